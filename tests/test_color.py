"""Tests for RGB to NV21 conversion."""

import math

import numpy as np
import pytest

from facestream.vision.color import nv21_buffer_size, nv21_luma, rgb_to_nv21


def reference_nv21(pixels):
    """Per-pixel raster-scan conversion used to cross-check the vectorized one."""
    height, width = pixels.shape[:2]
    out = bytearray(nv21_buffer_size(width, height))
    y_index = 0
    uv_index = width * height
    for j in range(height):
        for i in range(width):
            r, g, b = (int(c) for c in pixels[j, i, :3])
            y = ((66 * r + 129 * g + 25 * b + 128) >> 8) + 16
            u = ((-38 * r - 74 * g + 112 * b + 128) >> 8) + 128
            v = ((112 * r - 94 * g - 18 * b + 128) >> 8) + 128
            out[y_index] = min(max(y, 0), 255)
            y_index += 1
            if j % 2 == 0 and i % 2 == 0:
                out[uv_index] = min(max(v, 0), 255)
                out[uv_index + 1] = min(max(u, 0), 255)
                uv_index += 2
    return np.frombuffer(bytes(out), dtype=np.uint8)


class TestRgbToNv21:
    """Test cases for rgb_to_nv21."""

    def test_gray_pixel(self):
        """Mid gray maps to Y=126 and neutral chroma."""
        pixels = np.full((2, 2, 3), 128, dtype=np.uint8)
        out = rgb_to_nv21(pixels)

        assert list(out[:4]) == [126, 126, 126, 126]
        assert list(out[4:]) == [128, 128]  # V, U

    @pytest.mark.parametrize("width,height", [(4, 4), (5, 3), (1, 1), (7, 2), (640, 480)])
    def test_buffer_length(self, width, height):
        pixels = np.zeros((height, width, 3), dtype=np.uint8)
        expected = width * height + 2 * math.ceil(height / 2) * math.ceil(width / 2)

        assert nv21_buffer_size(width, height) == expected
        assert rgb_to_nv21(pixels).size == expected

    def test_chroma_is_vu_interleaved(self):
        """Pure red has V above U."""
        pixels = np.zeros((2, 2, 3), dtype=np.uint8)
        pixels[..., 0] = 255
        out = rgb_to_nv21(pixels)

        v, u = int(out[4]), int(out[5])
        assert v == ((112 * 255 + 128) >> 8) + 128
        assert u == ((-38 * 255 + 128) >> 8) + 128
        assert v > u

    def test_chroma_sampled_from_top_left_of_block(self):
        """Only the even-row, even-column pixel contributes chroma."""
        pixels = np.zeros((2, 2, 3), dtype=np.uint8)
        pixels[0, 1] = (255, 0, 0)
        pixels[1, 0] = (0, 0, 255)
        pixels[1, 1] = (0, 255, 0)
        out = rgb_to_nv21(pixels)

        assert list(out[4:]) == [128, 128]

    def test_clamping(self):
        """White saturates luma at 235 and stays within byte range."""
        pixels = np.full((2, 2, 3), 255, dtype=np.uint8)
        out = rgb_to_nv21(pixels)

        assert out.dtype == np.uint8
        assert int(out[0]) == 235

    @pytest.mark.parametrize("width,height", [(6, 4), (5, 5), (3, 7)])
    def test_matches_raster_scan(self, width, height):
        rng = np.random.default_rng(7)
        pixels = rng.integers(0, 256, (height, width, 3), dtype=np.uint8)

        np.testing.assert_array_equal(rgb_to_nv21(pixels), reference_nv21(pixels))

    def test_alpha_channel_ignored(self):
        rng = np.random.default_rng(3)
        rgb = rng.integers(0, 256, (4, 6, 3), dtype=np.uint8)
        rgba = np.concatenate([rgb, np.full((4, 6, 1), 17, dtype=np.uint8)], axis=2)

        np.testing.assert_array_equal(rgb_to_nv21(rgba), rgb_to_nv21(rgb))

    def test_rejects_non_rgb(self):
        with pytest.raises(ValueError):
            rgb_to_nv21(np.zeros((4, 4), dtype=np.uint8))


class TestNv21Luma:
    """Test cases for nv21_luma."""

    def test_luma_view(self):
        pixels = np.full((3, 5, 3), 128, dtype=np.uint8)
        out = rgb_to_nv21(pixels)
        luma = nv21_luma(out, 5, 3)

        assert luma.shape == (3, 5)
        assert np.all(luma == 126)
        assert np.shares_memory(luma, out)

    def test_wrong_size(self):
        with pytest.raises(ValueError):
            nv21_luma(np.zeros(10, dtype=np.uint8), 4, 4)
