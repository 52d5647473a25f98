"""
Railway-style image mutations.

An :class:`ImageMutation` turns one :class:`~container_models.image.GrayImage`
into another and reports errors as a `returns` `Failure` instead of raising, so
mutations chain with `flow` and `bind`. The numerical work behind a mutation
lives in ``computations``.

::

    ImageMutation  (apply_on_image, skip_predicate)
          ^
          |
    SavGolFilter   (mutations.filter)

Example
-------

    from returns.pipeline import flow
    from returns.pointfree import bind
    from container_models.base import Pair
    from mutations import SavGolFilter

    result = flow(
        image,
        SavGolFilter(window_size=Pair(5, 5), order=2),
        bind(SavGolFilter(window_size=Pair(3, 3), order=1)),
    )
"""

from abc import ABC, abstractmethod

from returns.result import safe

from container_models import GrayImage


class ImageMutation(ABC):
    """
    One step of a smoothing pipeline.

    The output of a mutation is always valid input for the next one. Parameters
    are passed to the constructor, so a configured mutation can be validated
    before any image reaches it.
    """

    @property
    def skip_predicate(self) -> bool:
        """`True` when applying the mutation would not change the image."""
        return False

    @safe
    def __call__(self, image: GrayImage) -> GrayImage:
        """
        Apply the mutation unless `skip_predicate` holds.

        :param image: The input image.
        :returns: `Success` with the resulting image (the input itself when skipped),
            or `Failure` with the raised exception.
        """
        if self.skip_predicate:
            return image
        return self.apply_on_image(image)

    @abstractmethod
    def apply_on_image(self, image: GrayImage) -> GrayImage:
        """
        Compute the mutated image; exceptions propagate to `__call__`.

        :param image: The input image, left unmodified.
        :returns: A new `GrayImage`.
        """
