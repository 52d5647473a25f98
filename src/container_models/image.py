"""Grayscale image container.

This module defines the data container used to represent images throughout
the smoothing pipeline.

Architecture
------------
::

    +--------------------------------------+
    |              GrayImage               |
    |--------------------------------------|
    | data   : GrayscaleData (uint8)       |
    | height : int (rows)                  |
    | width  : int (columns)               |
    +--------------------------------------+
    | from_pil(image) -> cls               |
    | to_pil() -> PIL.Image.Image          |
    +--------------------------------------+

- :class:`GrayImage` is the single container for 8-bit grayscale rasters.
- Rows are stored row-major; a padded row stride is represented by a numpy
  view and is always read through ``[row, col]`` indexing.
- Compared by data equality.
"""

from __future__ import annotations

import numpy as np
from PIL.Image import Image, fromarray
from pydantic import BaseModel, ConfigDict

from container_models.base import GrayscaleData, Pair, Size


class GrayImage(BaseModel):
    data: GrayscaleData

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        validate_assignment=True,
        extra="forbid",
        revalidate_instances="always",
    )

    @property
    def height(self) -> int:
        """Return the height (number of rows) of the image."""
        return self.data.shape[0]

    @property
    def width(self) -> int:
        """Return the width (number of columns) of the image."""
        return self.data.shape[1]

    @property
    def size(self) -> Size:
        return Pair(self.width, self.height)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GrayImage):
            return NotImplemented
        return np.array_equal(self.data, other.data)

    @classmethod
    def from_pil(cls, image: Image) -> GrayImage:
        """
        Build a container from a Pillow image in mode ``L``.

        :param image: An 8-bit grayscale Pillow image.
        :returns: An instance of `GrayImage` owning a copy of the pixel data.
        :raises ValueError: If the image is not in mode ``L``.
        """
        if image.mode != "L":
            raise ValueError(f"Expected a grayscale image in mode 'L', got '{image.mode}'")
        return cls(data=np.array(image, dtype=np.uint8))

    def to_pil(self) -> Image:
        return fromarray(np.ascontiguousarray(self.data))
