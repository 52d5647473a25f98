import logging

import numpy as np
import pytest
from PIL import Image

from container_models import GrayImage
from conversion import to_grayscale
from exceptions import UnsupportedImageError


class TestToGrayscale:
    def test_gray_image_is_copied(self):
        # Arrange
        image = GrayImage(data=np.full((2, 3), 9, dtype=np.uint8))
        # Act
        result = to_grayscale(image)
        # Assert
        assert result == image
        assert not np.shares_memory(result.data, image.data)

    def test_array_view_is_copied_row_major(self):
        # Arrange
        padded = np.arange(24, dtype=np.uint8).reshape(4, 6)
        view = padded[:, 1:5]
        # Act
        result = to_grayscale(view)
        # Assert
        assert result.data.flags.c_contiguous
        np.testing.assert_array_equal(result.data, view)
        assert not np.shares_memory(result.data, padded)

    @pytest.mark.parametrize(
        "mode",
        [
            pytest.param("RGB", id="rgb"),
            pytest.param("RGBA", id="rgba"),
            pytest.param("P", id="palette"),
        ],
    )
    def test_pil_color_image_is_converted(self, mode: str, caplog: pytest.LogCaptureFixture):
        # Arrange
        image = Image.new(mode, (5, 4))
        # Act
        with caplog.at_level(logging.DEBUG):
            result = to_grayscale(image)
        # Assert
        assert result.size == (5, 4)
        assert f"Converting {mode} image to grayscale" in caplog.text

    def test_pil_gray_image_keeps_pixels(self):
        # Arrange
        data = np.arange(20, dtype=np.uint8).reshape(4, 5)
        # Act
        result = to_grayscale(Image.fromarray(data))
        # Assert
        np.testing.assert_array_equal(result.data, data)

    def test_rgb_array_uses_luma_weights(self):
        # Arrange
        pixels = np.array([[[255, 0, 0], [0, 255, 0], [0, 0, 255]]], dtype=np.uint8)
        # Act
        result = to_grayscale(pixels)
        # Assert: ITU-R 601-2 luma, L = R * 299/1000 + G * 587/1000 + B * 114/1000
        np.testing.assert_allclose(result.data[0], [76, 150, 29], atol=1)

    def test_rgba_array_is_supported(self):
        pixels = np.full((2, 2, 4), 200, dtype=np.uint8)
        assert to_grayscale(pixels).data.tolist() == [[200, 200], [200, 200]]

    @pytest.mark.parametrize(
        ("image", "match"),
        [
            pytest.param(np.zeros((2, 2), dtype=np.float64), "8-bit", id="float_array"),
            pytest.param(np.zeros((2, 2), dtype=np.uint16), "8-bit", id="uint16_array"),
            pytest.param(np.zeros((2, 2, 2), dtype=np.uint8), "shape", id="two_channels"),
            pytest.param(np.zeros(4, dtype=np.uint8), "shape", id="one_dimensional"),
            pytest.param([[1, 2], [3, 4]], "list", id="nested_list"),
        ],
    )
    def test_unsupported_input_raises(self, image, match: str):
        with pytest.raises(UnsupportedImageError, match=match):
            to_grayscale(image)
