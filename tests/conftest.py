import logging

import numpy as np
import pytest
from loguru import logger

from computations.savgol_kernel import KernelBuilder, RegressionWindow
from container_models import GrayImage

TEST_IMAGE_SIZE = 10


class PropagateHandler(logging.Handler):
    """Handler that propagates loguru records to standard logging."""

    def emit(self, record: logging.LogRecord) -> None:
        logging.getLogger(record.name).handle(record)


@pytest.fixture
def caplog(caplog):
    """Fixture to enable caplog to capture loguru logs."""
    handler_id = logger.add(PropagateHandler(), format="{message}")
    yield caplog
    logger.remove(handler_id)


@pytest.fixture(scope="module")
def window_5x5_order_2() -> RegressionWindow:
    return RegressionWindow(width=5, height=5, order=2)


@pytest.fixture(scope="module")
def builder_5x5_order_2(window_5x5_order_2: RegressionWindow) -> KernelBuilder:
    """Builder for the most common configuration, factorized once per module."""
    return KernelBuilder(window_5x5_order_2)


@pytest.fixture
def flat_image() -> GrayImage:
    """GrayImage where every pixel has the same value."""
    return GrayImage(data=np.full((TEST_IMAGE_SIZE, TEST_IMAGE_SIZE), 120, dtype=np.uint8))


@pytest.fixture
def noisy_image() -> GrayImage:
    """GrayImage with uniformly distributed noise, reproducible."""
    rng = np.random.default_rng(42)
    return GrayImage(
        data=rng.integers(0, 256, size=(17, 23), dtype=np.uint8),
    )


@pytest.fixture
def impulse_image() -> GrayImage:
    """GrayImage with a single bright pixel on a black background."""
    data = np.zeros((TEST_IMAGE_SIZE, TEST_IMAGE_SIZE), dtype=np.uint8)
    data[4, 5] = 255
    return GrayImage(data=data)
