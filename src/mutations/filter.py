from typing import Self

from loguru import logger
from returns.result import safe

from computations.savgol_filter import savgol_filter_gray
from computations.savgol_kernel import RegressionWindow
from container_models import GrayImage
from container_models.base import Pair, Size
from conversion.grayscale import SupportedImage, to_grayscale
from mutations.base import ImageMutation
from settings import FilterSettings, get_settings
from utils.logger import log_railway_function


def savgol_filter(image: SupportedImage, window_size: Size, order: int) -> GrayImage:
    """
    Smooth an image with a 2D Savitzky-Golay filter.

    Every output pixel is the value, at the pixel's own position, of a polynomial surface
    fitted by least squares to a ``window_size`` neighborhood. The polynomial contains all
    terms ``y^i * x^j`` with ``i, j <= order``. Near the image borders the neighborhood is
    shifted inside the image instead of being padded.

    :param image: The source image; converted to 8-bit grayscale first.
    :param window_size: Regression window size as ``(width, height)``.
    :param order: Polynomial order, ``(order + 1)^2`` may not exceed the window area.
    :returns: A new `GrayImage` of the same size. When the window is larger than the image
        in either direction the grayscale image is returned unfiltered.
    :raises InvalidConfigurationError: If the window size or order is invalid. This is
        checked before the image is touched.
    """
    window = RegressionWindow.from_size(window_size, order)
    gray = to_grayscale(image)
    logger.info(
        f"Applying {window.width}x{window.height} Savitzky-Golay filter of order {window.order} "
        f"to a {gray.width}x{gray.height} image"
    )
    return GrayImage(data=savgol_filter_gray(gray.data, window))


@log_railway_function(
    "Failed to smooth image", success_message="Smoothed image with Savitzky-Golay filter"
)
@safe
def smooth_image(image: SupportedImage, *, window_size: Size, order: int) -> GrayImage:
    """Railway variant of `savgol_filter`, returning `Success` or `Failure`."""
    return savgol_filter(image, window_size, order)


class SavGolFilter(ImageMutation):
    """
    Image mutation that smooths a grayscale image with a 2D Savitzky-Golay filter.

    The window is validated on construction, so an invalid configuration fails before
    any image enters the pipeline.

    Parameters
    ----------
    window_size : Size
        Regression window size as ``(width, height)``.
    order : int
        Polynomial order of the local fit.
    """

    def __init__(self, window_size: Size, order: int) -> None:
        self.window = RegressionWindow.from_size(window_size, order)

    @classmethod
    def from_settings(cls, settings: FilterSettings | None = None) -> Self:
        """
        Build the mutation from filter settings.

        :param settings: Explicit settings; when omitted the process-wide settings are
            loaded from the environment and their configuration is logged.
        """
        if settings is None:
            settings = get_settings()
            settings.log_startup_config()
        return cls(
            window_size=Pair(settings.window_width, settings.window_height),
            order=settings.order,
        )

    @property
    def skip_predicate(self) -> bool:
        """
        A 1x1 window fits a constant to a single pixel, which returns the image unchanged.

        :returns: bool `True` if the mutation can be skipped, otherwise `False`.
        """
        if self.window.num_data_points == 1:
            logger.warning("skipping Savitzky-Golay filter, a 1x1 window is the identity.")
            return True
        return False

    def apply_on_image(self, image: GrayImage) -> GrayImage:
        """
        Smooth the image.

        :param image: Input grayscale image, left unmodified.
        :returns: A new, smoothed `GrayImage`.
        """
        return savgol_filter(image, self.window.size, self.window.order)
