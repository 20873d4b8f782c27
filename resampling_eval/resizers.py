"""Resize client implementations."""

from __future__ import annotations

import time
from typing import Dict, Tuple

import cv2

from .buffers import PixelBuffer
from .config import InterpolationMethod
from .errors import ResizeError
from .interfaces import IResizeClient

OPENCV_INTERPOLATION: Dict[InterpolationMethod, int] = {
    InterpolationMethod.NEAREST: cv2.INTER_NEAREST,
    InterpolationMethod.BILINEAR: cv2.INTER_LINEAR,
    InterpolationMethod.BICUBIC: cv2.INTER_CUBIC,
    InterpolationMethod.LANCZOS: cv2.INTER_LANCZOS4,
}


class OpenCVResizeClient(IResizeClient):
    """Resize client backed by :func:`cv2.resize`."""

    def resize(
        self,
        buffer: PixelBuffer,
        width: int,
        height: int,
        method: InterpolationMethod,
    ) -> Tuple[PixelBuffer, float]:
        if width <= 0 or height <= 0:
            raise ResizeError(f"Unsupported target size {width}x{height}")
        if buffer.is_empty:
            raise ResizeError("Cannot resize an empty buffer")
        try:
            flag = OPENCV_INTERPOLATION[InterpolationMethod(method)]
        except (KeyError, ValueError) as exc:
            raise ResizeError(f"Unsupported interpolation method: {method}") from exc

        start = time.perf_counter()
        try:
            resized = cv2.resize(buffer.pixels, (width, height), interpolation=flag)
        except cv2.error as exc:
            raise ResizeError(f"OpenCV resize to {width}x{height} failed: {exc}") from exc
        elapsed_ms = (time.perf_counter() - start) * 1000.0
        return PixelBuffer(width, height, resized), elapsed_ms
