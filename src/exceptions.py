class InvalidConfigurationError(ValueError):
    """Raised when a regression window cannot be used for Savitzky-Golay filtering."""

    def __init__(self, message: str):
        super().__init__(message)


class DegenerateFactorizationError(ArithmeticError):
    """Raised when the triangular factor of the equation matrix has a zero pivot."""

    def __init__(self, message: str):
        super().__init__(message)


class UnsupportedImageError(TypeError):
    """Raised when an image cannot be converted to 8-bit grayscale."""

    def __init__(self, message: str):
        super().__init__(message)
