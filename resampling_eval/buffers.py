"""Pixel buffer type and the statistics helpers shared by the metrics."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

CHANNELS = 4

# Rec. 601 weights applied to (R, G, B).
LUMA_WEIGHTS = np.array([0.2989, 0.587, 0.114], dtype=np.float64)


@dataclass(frozen=True, eq=False)
class PixelBuffer:
    """Immutable RGBA8 image, row-major with the origin at the top-left.

    ``pixels`` has shape ``(height, width, 4)`` and dtype ``uint8``. The array
    is flagged read-only on construction; producing a different image always
    means creating a new buffer.
    """

    width: int
    height: int
    pixels: np.ndarray

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError(f"Invalid dimensions {self.width}x{self.height}")
        if self.pixels.dtype != np.uint8:
            raise ValueError(f"Expected uint8 samples, got {self.pixels.dtype}")
        expected = (self.height, self.width, CHANNELS)
        if self.pixels.shape != expected:
            raise ValueError(f"Pixel array shape {self.pixels.shape} does not match {expected}")
        pixels = np.ascontiguousarray(self.pixels)
        pixels.flags.writeable = False
        object.__setattr__(self, "pixels", pixels)

    @classmethod
    def from_array(cls, rgba: np.ndarray) -> "PixelBuffer":
        """Wrap a ``(H, W, 4)`` uint8 array, copying it."""

        if rgba.ndim != 3 or rgba.shape[2] != CHANNELS:
            raise ValueError(f"Expected an (H, W, 4) array, got shape {rgba.shape}")
        height, width = rgba.shape[:2]
        return cls(width, height, np.array(rgba, dtype=np.uint8, copy=True))

    @classmethod
    def from_samples(cls, width: int, height: int, samples: Sequence[int]) -> "PixelBuffer":
        """Build a buffer from a flat interleaved RGBA sequence."""

        flat = np.asarray(samples, dtype=np.uint8).reshape(-1)
        if flat.size != width * height * CHANNELS:
            raise ValueError(
                f"Expected {width * height * CHANNELS} samples for {width}x{height}, got {flat.size}"
            )
        return cls(width, height, flat.reshape(height, width, CHANNELS).copy())

    @classmethod
    def filled(cls, width: int, height: int, rgba: Tuple[int, int, int, int]) -> "PixelBuffer":
        pixels = np.empty((height, width, CHANNELS), dtype=np.uint8)
        pixels[...] = rgba
        return cls(width, height, pixels)

    @property
    def channels(self) -> int:
        return CHANNELS

    @property
    def samples(self) -> np.ndarray:
        """Flat read-only view of the interleaved samples."""

        return self.pixels.reshape(-1)

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height


def scaled_dimension(size: int, scale_factor: float) -> int:
    """Scale a dimension, rounding halves up."""

    return int(math.floor(size * scale_factor + 0.5))


def luminance(buffer: PixelBuffer) -> np.ndarray:
    """Single-channel float64 luminance plane of ``buffer``."""

    rgb = buffer.pixels[..., :3].astype(np.float64)
    return rgb @ LUMA_WEIGHTS


def window_statistics(
    plane_a: np.ndarray,
    plane_b: np.ndarray,
    window: int,
    stride: int,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """Per-window means, population variances and covariance of two planes.

    Windows start at multiples of ``stride`` and are skipped once they would
    cross the image border. Each returned array has one entry per window; they
    are empty when no window fits.
    """

    height, width = plane_a.shape
    if height < window or width < window:
        empty = np.empty(0, dtype=np.float64)
        return empty, empty, empty, empty, empty

    win_a = sliding_window_view(plane_a, (window, window))[::stride, ::stride]
    win_b = sliding_window_view(plane_b, (window, window))[::stride, ::stride]
    win_a = win_a.reshape(-1, window * window)
    win_b = win_b.reshape(-1, window * window)

    mean_a = win_a.mean(axis=1)
    mean_b = win_b.mean(axis=1)
    dev_a = win_a - mean_a[:, np.newaxis]
    dev_b = win_b - mean_b[:, np.newaxis]
    var_a = (dev_a * dev_a).mean(axis=1)
    var_b = (dev_b * dev_b).mean(axis=1)
    cov = (dev_a * dev_b).mean(axis=1)
    return mean_a, mean_b, var_a, var_b, cov
