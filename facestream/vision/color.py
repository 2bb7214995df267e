"""RGB to NV21 conversion for the face detector input."""

from enum import Enum

import numpy as np


class ColorFormat(Enum):
    """Byte layouts understood by the detectors."""
    NV21 = "nv21"
    RGB = "rgb"


def _half(n: int) -> int:
    return (n + 1) // 2


def nv21_buffer_size(width: int, height: int) -> int:
    """Return the NV21 buffer length for a width x height image."""
    return width * height + 2 * _half(height) * _half(width)


def rgb_to_nv21(pixels: np.ndarray) -> np.ndarray:
    """Convert an RGB(A) image to an NV21 byte buffer.

    Uses the integer BT.601 approximation. The luma plane is written for every
    pixel; chroma is taken from the pixel at even row and even column of each
    2x2 block and stored as interleaved V, U pairs in raster order. Alpha, if
    present, is ignored.

    Args:
        pixels: uint8 array of shape (height, width, 3) or (height, width, 4)

    Returns:
        1-D uint8 array of length nv21_buffer_size(width, height)
    """
    if pixels.ndim != 3 or pixels.shape[2] not in (3, 4):
        raise ValueError(f"Expected an (H, W, 3|4) RGB(A) image, got shape {pixels.shape}")

    height, width = pixels.shape[:2]
    frame_size = width * height
    out = np.empty(nv21_buffer_size(width, height), dtype=np.uint8)

    rgb = pixels[..., :3].astype(np.int32)
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]

    y = ((66 * r + 129 * g + 25 * b + 128) >> 8) + 16
    np.clip(y, 0, 255, out=y)
    out[:frame_size] = y.reshape(-1)

    # Chroma only for the top-left pixel of every 2x2 block
    rs, gs, bs = r[::2, ::2], g[::2, ::2], b[::2, ::2]
    u = ((-38 * rs - 74 * gs + 112 * bs + 128) >> 8) + 128
    v = ((112 * rs - 94 * gs - 18 * bs + 128) >> 8) + 128

    vu = out[frame_size:].reshape(_half(height), _half(width), 2)
    vu[..., 0] = np.clip(v, 0, 255)
    vu[..., 1] = np.clip(u, 0, 255)

    return out


def nv21_luma(buffer: np.ndarray, width: int, height: int) -> np.ndarray:
    """Return the luma plane of an NV21 buffer as a (height, width) view."""
    expected = nv21_buffer_size(width, height)
    if buffer.size != expected:
        raise ValueError(f"NV21 buffer for {width}x{height} must be {expected} bytes, got {buffer.size}")
    return buffer[: width * height].reshape(height, width)
