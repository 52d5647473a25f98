"""
Partitioning of the output image into the nine regions of the border handling.

Near a border the regression window cannot be centered on the output pixel. The
window keeps its full size and is clamped inside the image, so the position of the
estimated pixel inside the window (the origin) shifts instead. Each region describes
which output pixels it covers and how their origin is derived.

::

    +-----------+--------------------+------------+
    | top-left  |        top         | top-right  |   rows [0, kt)
    +-----------+--------------------+------------+
    |   left    |      interior      |   right    |   rows [kt, H - kb)
    +-----------+--------------------+------------+
    |bottom-left|       bottom       |bottom-right|   rows [H - kb, H)
    +-----------+--------------------+------------+
      [0, kl)       [kl, W - kr)       [W - kr, W)
"""

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from itertools import product
from typing import NamedTuple

import numpy as np
from numpy.typing import NDArray

from container_models.base import Origin, Pair, Size
from utils.constants import OriginPolicy


class BorderExtents(NamedTuple):
    """Number of window rows/columns on each side of the window center."""

    top: int
    bottom: int
    left: int
    right: int

    @classmethod
    def from_window(cls, window_size: Size) -> "BorderExtents":
        width, height = window_size
        top = height // 2
        left = width // 2
        return cls(top=top, bottom=height - top - 1, left=left, right=width - left - 1)


class PixelGroup(NamedTuple):
    """Output pixels of one region that share a kernel origin."""

    origin: Origin
    rows: NDArray[np.intp]
    cols: NDArray[np.intp]


@dataclass(frozen=True)
class Region:
    name: str
    rows: range
    cols: range
    policy: OriginPolicy
    origin_rule: Callable[[int, int], Origin]

    @property
    def is_empty(self) -> bool:
        return not self.rows or not self.cols

    @property
    def pixel_count(self) -> int:
        return len(self.rows) * len(self.cols)

    def origin_at(self, x: int, y: int) -> Origin:
        """Kernel origin used for output pixel ``(x, y)``."""
        return self.origin_rule(x, y)

    def origin_groups(self, batch_rows: int | None = None) -> Iterator[PixelGroup]:
        """
        Yield the pixels of the region in batches sharing one origin.

        The batching follows the region's `OriginPolicy`, so without `batch_rows` the
        number of yielded groups equals the number of kernel recomputations the
        region needs.

        :param batch_rows: Maximum number of rows per group of a `CONSTANT` region,
            which bounds the memory of a batch on large images. All groups of the
            region share the same origin.
        """
        if self.is_empty:
            return
        match self.policy:
            case OriginPolicy.CONSTANT:
                origin = self.origin_at(self.cols[0], self.rows[0])
                step = batch_rows or len(self.rows)
                for start in range(0, len(self.rows), step):
                    rows = self.rows[start : start + step]
                    ys, xs = np.meshgrid(rows, self.cols, indexing="ij")
                    yield PixelGroup(origin, ys.ravel(), xs.ravel())
            case OriginPolicy.PER_ROW:
                xs = np.asarray(self.cols)
                for y in self.rows:
                    yield PixelGroup(self.origin_at(self.cols[0], y), np.full_like(xs, y), xs)
            case OriginPolicy.PER_COLUMN:
                ys = np.asarray(self.rows)
                for x in self.cols:
                    yield PixelGroup(self.origin_at(x, self.rows[0]), ys, np.full_like(ys, x))
            case OriginPolicy.PER_PIXEL:
                for y, x in product(self.rows, self.cols):
                    yield PixelGroup(self.origin_at(x, y), np.array([y]), np.array([x]))


def partition_regions(image_size: Size, window_size: Size) -> tuple[Region, ...]:
    """
    Divide an image into the nine regions of the border handling.

    The regions are disjoint and together cover every pixel of the image. Regions
    that are empty for the given sizes (e.g. the corners of a one pixel wide window)
    are included with empty ranges.

    :param image_size: Image size as ``(width, height)``.
    :param window_size: Regression window size as ``(width, height)``; must not exceed
        the image size.
    :returns: The regions in the order top-left, top, top-right, left, interior, right,
        bottom-left, bottom, bottom-right.
    """
    width, height = image_size
    kw, kh = window_size
    if kw > width or kh > height:
        raise ValueError(
            f"Window {kw}x{kh} does not fit inside the {width}x{height} image"
        )
    kt, kb, kl, kr = BorderExtents.from_window(window_size)
    right_start = width - kr
    bottom_start = height - kb

    top_rows = range(0, kt)
    middle_rows = range(kt, bottom_start)
    bottom_rows = range(bottom_start, height)
    left_cols = range(0, kl)
    middle_cols = range(kl, right_start)
    right_cols = range(right_start, width)

    def right_x(x: int) -> int:
        return kl + 1 + (x - right_start)

    def bottom_y(y: int) -> int:
        return kt + 1 + (y - bottom_start)

    per_pixel, per_row = OriginPolicy.PER_PIXEL, OriginPolicy.PER_ROW
    per_column, constant = OriginPolicy.PER_COLUMN, OriginPolicy.CONSTANT
    return (
        Region("top-left", top_rows, left_cols, per_pixel, lambda x, y: Pair(x, y)),
        Region("top", top_rows, middle_cols, per_row, lambda x, y: Pair(kl, y)),
        # The origin runs from the last window column towards the center here.
        Region(
            "top-right",
            top_rows,
            right_cols,
            per_pixel,
            lambda x, y: Pair(kw - 1 - (x - right_start), y),
        ),
        Region("left", middle_rows, left_cols, per_column, lambda x, y: Pair(x, kt)),
        Region("interior", middle_rows, middle_cols, constant, lambda x, y: Pair(kl, kt)),
        Region("right", middle_rows, right_cols, per_column, lambda x, y: Pair(right_x(x), kt)),
        Region("bottom-left", bottom_rows, left_cols, per_pixel, lambda x, y: Pair(x, bottom_y(y))),
        Region("bottom", bottom_rows, middle_cols, per_row, lambda x, y: Pair(kl, bottom_y(y))),
        Region(
            "bottom-right",
            bottom_rows,
            right_cols,
            per_pixel,
            lambda x, y: Pair(right_x(x), bottom_y(y)),
        ),
    )


def window_top_left(
    rows: NDArray[np.intp], cols: NDArray[np.intp], image_size: Size, window_size: Size
) -> tuple[NDArray[np.intp], NDArray[np.intp]]:
    """
    Top-left corner of the regression window used for each output pixel.

    The window is centered on the pixel where possible and clamped into
    ``[0, H - kh] x [0, W - kw]`` otherwise.

    :returns: A tuple ``(tops, lefts)`` of the same length as `rows` and `cols`.
    """
    width, height = image_size
    kw, kh = window_size
    extents = BorderExtents.from_window(window_size)
    tops = np.clip(rows - extents.top, 0, height - kh)
    lefts = np.clip(cols - extents.left, 0, width - kw)
    return tops, lefts
