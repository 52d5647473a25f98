"""
Savitzky-Golay convolution kernels for 2D grayscale smoothing.

A regression window of ``width x height`` pixels is fitted with a 2D polynomial
containing every term ``y^i * x^j`` for ``i, j`` in ``0..order``. The least-squares
fit is linear in the pixel values, so the fitted value at any point of the window
can be written as a weighted sum of the window's pixels. Those weights form the
convolution kernel.

The equation matrix only depends on the window geometry, so it is QR-factorized
once by Givens rotations. The rotations are logged, which allows the kernel for a
different origin (the window position of the pixel being estimated) to be derived
by rotating a new right-hand side and back-substituting, without factorizing again.
"""

import math
from dataclasses import dataclass
from typing import Self

import numpy as np
from loguru import logger
from numpy.typing import NDArray
from pydantic import Field, ValidationError, model_validator
from scipy.linalg import solve_triangular

from container_models.base import (
    ConfigBaseModel,
    FloatArray1D,
    FloatArray2D,
    KernelWeights,
    Origin,
    Pair,
    Size,
)
from exceptions import DegenerateFactorizationError, InvalidConfigurationError
from utils.constants import MAX_PIXEL_VALUE, MIN_PIXEL_VALUE


class RegressionWindow(ConfigBaseModel):
    """Size of the regression window and order of the fitted polynomial."""

    width: int = Field(..., gt=0, description="Window width in pixels.")
    height: int = Field(..., gt=0, description="Window height in pixels.")
    order: int = Field(
        ...,
        ge=0,
        description="Highest power of x and of y in the fitted polynomial.",
        examples=[0, 1, 2],
    )

    @property
    def num_vars(self) -> int:
        """Number of polynomial coefficients, ``(order + 1)^2``."""
        return (self.order + 1) ** 2

    @property
    def num_data_points(self) -> int:
        """Number of pixels in the window."""
        return self.width * self.height

    @property
    def size(self) -> Size:
        return Pair(self.width, self.height)

    @property
    def center(self) -> Origin:
        return Pair(self.width // 2, self.height // 2)

    @model_validator(mode="after")
    def validate_not_underdetermined(self) -> Self:
        if self.num_vars > self.num_data_points:
            raise ValueError(
                f"order {self.order} is too big for a {self.width}x{self.height} window: "
                f"{self.num_vars} coefficients but only {self.num_data_points} data points"
            )
        return self

    @classmethod
    def from_size(cls, window_size: tuple[int, int], order: int) -> Self:
        """
        Validate and build a regression window.

        :param window_size: Window size as ``(width, height)``.
        :param order: Polynomial order.
        :returns: The validated `RegressionWindow`.
        :raises InvalidConfigurationError: If the window is empty, the order is negative or the
            regression would be under-determined.
        """
        width, height = window_size
        try:
            return cls(width=width, height=height, order=order)
        except ValidationError as error:
            raise InvalidConfigurationError(
                f"Invalid Savitzky-Golay window {width}x{height} with order {order}: "
                + "; ".join(detail["msg"] for detail in error.errors())
            ) from error


@dataclass(frozen=True, eq=False)
class RotationLog:
    """
    Givens rotations in the order they were applied during factorization.

    Rotation ``n`` combines pivot row ``j`` with row ``i``; the pairs are enumerated
    column-major: for each pivot column ``j`` all rows ``i > j`` from top to bottom.
    """

    sines: FloatArray1D
    cosines: FloatArray1D

    def __len__(self) -> int:
        return self.sines.size


def build_equations(window: RegressionWindow) -> FloatArray2D:
    """
    Build the equation matrix of the polynomial fit.

    Row ``r`` belongs to data point ``(x, y)`` (1-based, row-major over the window) and
    holds ``y^i * x^j`` for ``i`` (outer) and ``j`` (inner) in ``0..order``.

    :param window: The regression window.
    :returns: Array of shape ``(num_data_points, num_vars)``.
    """
    ys, xs = np.indices((window.height, window.width), dtype=np.float64) + 1.0
    powers = np.arange(window.order + 1)
    y_powers = np.repeat(powers, window.order + 1)
    x_powers = np.tile(powers, window.order + 1)
    return ys.reshape(-1, 1) ** y_powers * xs.reshape(-1, 1) ** x_powers


def givens_qr(equations: FloatArray2D) -> tuple[FloatArray2D, RotationLog]:
    """
    QR-factorize an equation matrix by Givens rotations.

    Q is not formed. Instead every rotation is recorded so it can be replayed on a
    right-hand side later (see `rotate_right_hand_side`).

    :param equations: Matrix of shape ``(num_data_points, num_vars)``, not modified.
    :returns: A tuple ``(r_factor, rotations)`` with the upper triangular factor of shape
        ``(num_vars, num_vars)`` and the rotation log.
    """
    num_data_points, num_vars = equations.shape
    matrix = equations.copy()
    num_rotations = num_vars * (num_vars - 1) // 2 + (num_data_points - num_vars) * num_vars
    sines = np.empty(num_rotations)
    cosines = np.empty(num_rotations)

    rotation = 0
    for j in range(num_vars):
        for i in range(j + 1, num_data_points):
            a = matrix[j, j]
            b = matrix[i, j]
            radius = math.hypot(a, b)
            if radius == 0.0:
                # Nothing to eliminate; the identity keeps the log aligned with the sweep.
                cos, sin = 1.0, 0.0
            else:
                cos, sin = a / radius, b / radius
            sines[rotation] = sin
            cosines[rotation] = cos
            rotation += 1

            matrix[j, j] = radius
            matrix[i, j] = 0.0
            pivot_row = matrix[j, j + 1 :].copy()
            row = matrix[i, j + 1 :]
            matrix[j, j + 1 :] = cos * pivot_row + sin * row
            matrix[i, j + 1 :] = cos * row - sin * pivot_row

    r_factor = matrix[:num_vars].copy()
    for array in (r_factor, sines, cosines):
        array.setflags(write=False)
    return r_factor, RotationLog(sines=sines, cosines=cosines)


def rotate_right_hand_side(
    rhs: FloatArray1D, rotations: RotationLog, num_vars: int
) -> FloatArray1D:
    """
    Apply the logged rotations (i.e. Q transposed) to a right-hand side vector.

    :param rhs: Vector of length ``num_data_points``, not modified.
    :param rotations: The rotation log produced by `givens_qr`.
    :param num_vars: Number of columns of the factorized matrix.
    :returns: The rotated vector.
    """
    values = rhs.tolist()
    sines = iter(rotations.sines.tolist())
    cosines = iter(rotations.cosines.tolist())
    for j in range(num_vars):
        for i in range(j + 1, len(values)):
            sin, cos = next(sines), next(cosines)
            pivot = values[j]
            values[j] = cos * pivot + sin * values[i]
            values[i] = cos * values[i] - sin * pivot
    return np.array(values)


def back_substitute(r_factor: FloatArray2D, rhs: FloatArray1D) -> FloatArray1D:
    """
    Solve ``R @ coefficients = rhs`` for upper triangular ``R``.

    :raises DegenerateFactorizationError: If a diagonal element of ``R`` is zero.
    """
    if (zero_pivots := np.flatnonzero(np.diag(r_factor) == 0.0)).size:
        raise DegenerateFactorizationError(
            f"Triangular factor is singular, zero pivot(s) at {zero_pivots.tolist()}"
        )
    return solve_triangular(r_factor, rhs, lower=False)


@dataclass(frozen=True, eq=False)
class ConvolutionKernel:
    """
    Per-pixel weights of one regression window for one origin.

    The weights are stored flat in row-major window order, the same order in which
    `convolve` reads a neighborhood.
    """

    window: RegressionWindow
    origin: Origin
    weights: KernelWeights

    @property
    def matrix(self) -> FloatArray2D:
        """The weights laid out as the window, shape ``(height, width)``."""
        return self.weights.reshape(self.window.height, self.window.width)

    def convolve_many(self, neighborhoods: NDArray[np.uint8]) -> NDArray[np.uint8]:
        """
        Apply the kernel to a stack of neighborhoods.

        The weighted sums are truncated toward zero and clamped to the 8-bit range.

        :param neighborhoods: Pixel blocks of shape ``(n, height, width)``.
        :returns: Array of ``n`` output pixel values.
        """
        if neighborhoods.shape[1:] != (self.window.height, self.window.width):
            raise ValueError(
                f"Neighborhood shape {neighborhoods.shape[1:]} does not match the "
                f"{self.window.width}x{self.window.height} window"
            )
        flat = neighborhoods.reshape(len(neighborhoods), -1).astype(np.float64)
        sums = np.trunc(flat @ self.weights)
        return np.clip(sums, MIN_PIXEL_VALUE, MAX_PIXEL_VALUE).astype(np.uint8)

    def convolve(self, neighborhood: NDArray[np.uint8]) -> int:
        """Apply the kernel to a single ``(height, width)`` neighborhood."""
        return int(self.convolve_many(neighborhood[np.newaxis])[0])


class KernelBuilder:
    """
    Builds Savitzky-Golay kernels for one regression window.

    The equation matrix is factorized once on construction; afterwards the builder
    holds no mutable state, and every call to `recalc_for_origin` returns a new
    `ConvolutionKernel`.
    """

    def __init__(self, window: RegressionWindow, origin: Origin | None = None) -> None:
        """
        :param window: The regression window.
        :param origin: Origin of the initial kernel, defaults to the window center.
        :raises InvalidConfigurationError: If the regression would be under-determined.
        """
        if window.num_vars > window.num_data_points:
            raise InvalidConfigurationError(
                f"Cannot fit {window.num_vars} coefficients to {window.num_data_points} data points"
            )
        self.window = window
        self.equations = build_equations(window)
        self.equations.setflags(write=False)
        self.r_factor, self.rotations = givens_qr(self.equations)
        logger.debug(
            f"Factorized {window.width}x{window.height} window of order {window.order} "
            f"with {len(self.rotations)} rotations"
        )
        self.kernel = self.recalc_for_origin(origin if origin is not None else window.center)

    def _validate_origin(self, origin: Origin) -> None:
        x, y = origin
        if not (0 <= x < self.window.width and 0 <= y < self.window.height):
            raise ValueError(
                f"Origin {tuple(origin)} lies outside the "
                f"{self.window.width}x{self.window.height} window"
            )

    def recalc_for_origin(self, origin: Origin) -> ConvolutionKernel:
        """
        Derive the kernel that estimates the pixel at `origin` inside the window.

        :param origin: Position ``(x, y)`` of the estimated pixel, 0-based.
        :returns: A new `ConvolutionKernel` for `origin`.
        :raises ValueError: If `origin` lies outside the window.
        :raises DegenerateFactorizationError: If the triangular factor is singular.
        """
        self._validate_origin(origin)
        x, y = origin
        rhs = np.zeros(self.window.num_data_points)
        rhs[y * self.window.width + x] = 1.0

        rotated = rotate_right_hand_side(rhs, self.rotations, self.window.num_vars)
        coefficients = back_substitute(self.r_factor, rotated[: self.window.num_vars])
        weights = self.equations @ coefficients
        weights.setflags(write=False)
        return ConvolutionKernel(window=self.window, origin=Pair(x, y), weights=weights)
