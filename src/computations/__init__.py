"""
Stateless numerical building blocks of the Savitzky-Golay filter.

Kernel construction lives in `savgol_kernel`, the border handling in `regions`
and the region sweep in `savgol_filter`.
"""

from .savgol_filter import savgol_filter_gray
from .savgol_kernel import ConvolutionKernel, KernelBuilder, RegressionWindow
from .regions import Region, partition_regions

__all__ = (
    "ConvolutionKernel",
    "KernelBuilder",
    "Region",
    "RegressionWindow",
    "partition_regions",
    "savgol_filter_gray",
)
