from __future__ import annotations

import numpy as np
import pytest

from resampling_eval.buffers import PixelBuffer


def make_checkerboard(size: int = 64, cell: int = 1) -> PixelBuffer:
    yy, xx = np.indices((size, size))
    on = ((yy // cell + xx // cell) % 2).astype(np.uint8) * 255
    pixels = np.empty((size, size, 4), dtype=np.uint8)
    pixels[..., 0] = on
    pixels[..., 1] = on
    pixels[..., 2] = on
    pixels[..., 3] = 255
    return PixelBuffer(size, size, pixels)


def make_gradient(width: int = 32, height: int = 24) -> PixelBuffer:
    yy, xx = np.indices((height, width))
    pixels = np.empty((height, width, 4), dtype=np.uint8)
    pixels[..., 0] = (xx * 255 // max(width - 1, 1)).astype(np.uint8)
    pixels[..., 1] = (yy * 255 // max(height - 1, 1)).astype(np.uint8)
    pixels[..., 2] = ((xx + yy) * 3 % 256).astype(np.uint8)
    pixels[..., 3] = 255
    return PixelBuffer(width, height, pixels)


@pytest.fixture
def gray_image() -> PixelBuffer:
    return PixelBuffer.filled(64, 64, (128, 128, 128, 255))


@pytest.fixture
def checkerboard() -> PixelBuffer:
    return make_checkerboard()


@pytest.fixture
def gradient_image() -> PixelBuffer:
    return make_gradient()
