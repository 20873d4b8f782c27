"""Image similarity metrics computed on :class:`PixelBuffer` pairs.

All functions are pure: they never modify their inputs and hold no state.
Both buffers must share the same dimensions; callers get there by resizing
the scaled image back to the original size before scoring.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from .buffers import PixelBuffer, luminance, window_statistics
from .errors import MetricError

MAX_PIXEL_VALUE = 255.0

SSIM_WINDOW = 8
SSIM_STRIDE = SSIM_WINDOW // 2
SSIM_C1 = (0.01 * MAX_PIXEL_VALUE) ** 2
SSIM_C2 = (0.03 * MAX_PIXEL_VALUE) ** 2

FSIM_EPSILON = 0.01

SOBEL_X = np.array([[-1, 0, 1], [-2, 0, 2], [-1, 0, 1]], dtype=np.float64)
SOBEL_Y = np.array([[-1, -2, -1], [0, 0, 0], [1, 2, 1]], dtype=np.float64)


@dataclass(frozen=True)
class MetricScores:
    """The three similarity scores of one comparison."""

    psnr: float
    ssim: float
    fsim: float


def _check_pair(a: PixelBuffer, b: PixelBuffer) -> None:
    if not isinstance(a, PixelBuffer) or not isinstance(b, PixelBuffer):
        raise MetricError("Metrics require two PixelBuffer instances")
    if a.size != b.size:
        raise MetricError(
            f"Buffer dimensions differ: {a.width}x{a.height} vs {b.width}x{b.height}"
        )
    if a.is_empty:
        raise MetricError("Cannot score an empty buffer")


def psnr(a: PixelBuffer, b: PixelBuffer) -> float:
    """Peak signal-to-noise ratio over the RGB channels, in dB.

    Returns ``inf`` for identical colour data. Alpha is ignored.
    """

    _check_pair(a, b)
    diff = a.pixels[..., :3].astype(np.float64) - b.pixels[..., :3].astype(np.float64)
    mse = float(np.mean(diff * diff))
    if mse == 0.0:
        return math.inf
    return 10.0 * math.log10(MAX_PIXEL_VALUE * MAX_PIXEL_VALUE / mse)


def ssim(a: PixelBuffer, b: PixelBuffer) -> float:
    """Mean structural similarity over overlapping 8x8 luminance windows.

    Windows advance by half their size and are skipped at the border instead
    of padding. Returns 0 when the image is smaller than one window.
    """

    _check_pair(a, b)
    mean_a, mean_b, var_a, var_b, cov = window_statistics(
        luminance(a), luminance(b), SSIM_WINDOW, SSIM_STRIDE
    )
    if mean_a.size == 0:
        return 0.0

    sigma_a = np.sqrt(var_a)
    sigma_b = np.sqrt(var_b)
    lum = (2.0 * mean_a * mean_b + SSIM_C1) / (mean_a * mean_a + mean_b * mean_b + SSIM_C1)
    contrast = (2.0 * sigma_a * sigma_b + SSIM_C2) / (var_a + var_b + SSIM_C2)
    structure = (cov + SSIM_C2 / 2.0) / (sigma_a * sigma_b + SSIM_C2 / 2.0)
    return float(np.mean(lum * contrast * structure))


def gradient_magnitude(plane: np.ndarray) -> np.ndarray:
    """Sobel gradient magnitude of the interior pixels of ``plane``.

    The result has shape ``(H - 2, W - 2)``; the one-pixel border is not
    evaluated.
    """

    height, width = plane.shape
    if height < 3 or width < 3:
        return np.empty((0, 0), dtype=np.float64)

    gx = np.zeros((height - 2, width - 2), dtype=np.float64)
    gy = np.zeros_like(gx)
    for ky in range(3):
        for kx in range(3):
            patch = plane[ky:ky + height - 2, kx:kx + width - 2]
            gx += SOBEL_X[ky, kx] * patch
            gy += SOBEL_Y[ky, kx] * patch
    return np.sqrt(gx * gx + gy * gy)


def fsim(a: PixelBuffer, b: PixelBuffer) -> float:
    """Gradient-magnitude similarity.

    This is a lightweight edge-similarity proxy, not the phase-congruency
    FSIM from the literature. Pixels whose local score is not finite are left
    out of the mean; returns 0 when no pixel qualifies.
    """

    _check_pair(a, b)
    g1 = gradient_magnitude(luminance(a))
    g2 = gradient_magnitude(luminance(b))
    if g1.size == 0:
        return 0.0

    with np.errstate(invalid="ignore", divide="ignore", over="ignore"):
        local = (2.0 * g1 * g2 + FSIM_EPSILON) / (g1 * g1 + g2 * g2 + FSIM_EPSILON)
    valid = np.isfinite(local)
    count = int(np.count_nonzero(valid))
    if count == 0:
        return 0.0
    return float(local[valid].sum() / count)


def compute_metrics(original: PixelBuffer, candidate: PixelBuffer) -> MetricScores:
    """Score ``candidate`` against ``original`` with all three metrics."""

    return MetricScores(
        psnr=psnr(original, candidate),
        ssim=ssim(original, candidate),
        fsim=fsim(original, candidate),
    )
