import numpy as np
from loguru import logger
from numpy.typing import NDArray
from PIL import Image

from container_models.image import GrayImage
from exceptions import UnsupportedImageError

type SupportedImage = GrayImage | Image.Image | NDArray[np.uint8]

_COLOR_CHANNELS = (3, 4)


def _array_to_grayscale(array: NDArray) -> NDArray[np.uint8]:
    if array.dtype != np.uint8:
        raise UnsupportedImageError(
            f"Only 8-bit pixel arrays are supported, got dtype {array.dtype}"
        )
    if array.ndim == 2:
        return np.array(array, dtype=np.uint8, order="C")
    if array.ndim == 3 and array.shape[-1] in _COLOR_CHANNELS:
        return np.array(Image.fromarray(np.ascontiguousarray(array)).convert("L"), dtype=np.uint8)
    raise UnsupportedImageError(
        f"Expected an (H, W) grayscale or (H, W, 3|4) color array, got shape {array.shape}"
    )


def to_grayscale(image: SupportedImage) -> GrayImage:
    """
    Convert an image to an 8-bit grayscale container.

    Color and paletted images are converted with Pillow's ``L`` conversion
    (ITU-R 601-2 luma). The returned container always owns a new, row-major buffer,
    so it never aliases the input.

    :param image: A `GrayImage`, a Pillow image of any mode, or a ``uint8`` array of
        shape ``(H, W)``, ``(H, W, 3)`` or ``(H, W, 4)``. Arrays may be strided views.
    :returns: An instance of `GrayImage`.
    :raises UnsupportedImageError: If the input cannot be interpreted as an 8-bit image.
    """
    match image:
        case GrayImage():
            data = np.array(image.data, order="C")
        case Image.Image():
            if image.mode != "L":
                logger.debug(f"Converting {image.mode} image to grayscale")
            data = np.array(image.convert("L"), dtype=np.uint8)
        case np.ndarray():
            data = _array_to_grayscale(image)
        case _:
            raise UnsupportedImageError(
                f"Cannot convert object of type {type(image).__name__} to grayscale"
            )
    return GrayImage(data=data)
