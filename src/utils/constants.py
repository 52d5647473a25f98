from enum import Enum, auto
from typing import Final

MIN_PIXEL_VALUE: Final[int] = 0
MAX_PIXEL_VALUE: Final[int] = 255

# Upper bound on neighborhood values (pixels x window area) convolved in one batch
MAX_BATCH_VALUES: Final[int] = 2**20


class OriginPolicy(Enum):
    """How often the kernel origin changes while sweeping a region."""

    CONSTANT = auto()  # one origin for the whole region
    PER_ROW = auto()  # one origin per output row
    PER_COLUMN = auto()  # one origin per output column
    PER_PIXEL = auto()  # a new origin for every output pixel
