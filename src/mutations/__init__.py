"""
Image Mutations Module
======================

This package contains all available `ImageMutation` implementations.

Each mutation represents a single, well-defined transformation that can
be applied to a `GrayImage`. Mutations are designed to be composable and
can be chained together using a pipeline (e.g. `returns.pipeline.flow`).
"""

from .filter import SavGolFilter, savgol_filter, smooth_image


__all__ = ["SavGolFilter", "savgol_filter", "smooth_image"]
