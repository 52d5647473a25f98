import numpy as np
from loguru import logger
from numpy.lib.stride_tricks import sliding_window_view

from computations.regions import partition_regions, window_top_left
from computations.savgol_kernel import ConvolutionKernel, KernelBuilder, RegressionWindow
from container_models.base import GrayscaleData, Origin, Pair
from utils.constants import MAX_BATCH_VALUES


def savgol_filter_gray(data: GrayscaleData, window: RegressionWindow) -> GrayscaleData:
    """
    Smooth an 8-bit grayscale raster with a 2D Savitzky-Golay filter.

    The equation matrix is factorized once. Every region of the image is then swept
    with the kernel for the origin its pixels need; kernels are computed once per
    distinct origin and reused for all pixels sharing it. The interior is convolved
    in row batches of at most `MAX_BATCH_VALUES` neighborhood values, so the working
    memory does not grow with the image size.

    :param data: Grayscale pixel data of shape ``(H, W)``, read only.
    :param window: The validated regression window.
    :returns: A newly allocated array with the smoothed pixels, or `data` itself when the
        window is larger than the image in either direction.
    """
    height, width = data.shape
    if window.width > width or window.height > height:
        logger.warning(
            f"Window {window.width}x{window.height} exceeds the {width}x{height} image, "
            "returning the image unchanged"
        )
        return data

    image_size = Pair(width, height)
    neighborhoods = sliding_window_view(data, (window.height, window.width))
    output = np.empty((height, width), dtype=np.uint8)
    batch_rows = max(1, MAX_BATCH_VALUES // (width * window.num_data_points))

    builder = KernelBuilder(window)
    kernels: dict[Origin, ConvolutionKernel] = {builder.kernel.origin: builder.kernel}

    for region in partition_regions(image_size, window.size):
        for group in region.origin_groups(batch_rows):
            if (kernel := kernels.get(group.origin)) is None:
                kernel = kernels[group.origin] = builder.recalc_for_origin(group.origin)
            tops, lefts = window_top_left(group.rows, group.cols, image_size, window.size)
            output[group.rows, group.cols] = kernel.convolve_many(neighborhoods[tops, lefts])

    logger.debug(f"Computed {len(kernels)} distinct kernels for a {width}x{height} image")
    return output
