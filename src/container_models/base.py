from __future__ import annotations
from collections.abc import Sequence
from functools import partial
from typing import Annotated, NamedTuple

from numpy import array, dtype, floating, float64, number, uint8
from numpy.typing import DTypeLike, NDArray
from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, PlainSerializer


class Pair[T](NamedTuple):
    x: T
    y: T


# Position (x, y) inside a regression window
type Origin = Pair[int]
# Extent as (width, height)
type Size = Pair[int]


def serialize_ndarray[T: number](array_: NDArray[T]) -> list[T]:
    """Serialize numpy array to a Python list for JSON serialization."""
    return array_.tolist()


def coerce_to_array[T: number](
    dtype_: DTypeLike, value: Sequence[T] | NDArray[T] | None
) -> NDArray[T] | None:
    """
    Coerce input to dtype numpy array.

    Handles JSON deserialization where Python creates int64 integers by default.
    """
    if isinstance(value, Sequence):
        try:
            return array(value, dtype=dtype_)
        except OverflowError as ofe:
            raise ValueError("Array's value(s) out of range") from ofe

    return value


def validate_shape(n_dims: int, value: NDArray) -> NDArray:
    if (array_dims := len(value.shape)) != n_dims:
        raise ValueError(
            f"Array shape mismatch, expected {n_dims} dimension(s), but got {array_dims}"
        )
    return value


def validate_dtype(dtype_: DTypeLike, value: NDArray) -> NDArray:
    if value.dtype != dtype(dtype_):
        raise ValueError(
            f"Array dtype mismatch, expected {dtype(dtype_)}, but got {value.dtype}"
        )
    return value


class ConfigBaseModel(BaseModel):
    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        extra="forbid",
        frozen=True,
    )


type FloatArray1D = Annotated[
    NDArray[floating],
    BeforeValidator(partial(coerce_to_array, float64)),
    AfterValidator(partial(validate_shape, 1)),
    PlainSerializer(serialize_ndarray),
]
type FloatArray2D = Annotated[
    NDArray[floating],
    BeforeValidator(partial(coerce_to_array, float64)),
    AfterValidator(partial(validate_shape, 2)),
    PlainSerializer(serialize_ndarray),
]
type UInt8Array2D = Annotated[
    NDArray[uint8],
    BeforeValidator(partial(coerce_to_array, uint8)),
    AfterValidator(partial(validate_shape, 2)),
    AfterValidator(partial(validate_dtype, uint8)),
    PlainSerializer(serialize_ndarray),
]

# Semantic context
type GrayscaleData = UInt8Array2D  # Shape: (H, W), 8 bits per pixel
type KernelWeights = FloatArray1D  # Shape: (window height * window width,)
