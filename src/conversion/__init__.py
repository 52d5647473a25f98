from conversion.grayscale import SupportedImage, to_grayscale

__all__ = ("SupportedImage", "to_grayscale")
