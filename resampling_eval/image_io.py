"""Image file adapters converting between files and :class:`PixelBuffer`."""

from __future__ import annotations

from pathlib import Path

import cv2
import numpy as np

from .buffers import PixelBuffer


def _to_rgba8(image: np.ndarray) -> np.ndarray:
    if image.dtype == np.uint16:
        image = (image >> 8).astype(np.uint8)
    elif image.dtype != np.uint8:
        image = np.clip(image, 0, 255).astype(np.uint8)

    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
    channels = image.shape[2]
    if channels == 1:
        return cv2.cvtColor(image[..., 0], cv2.COLOR_GRAY2RGBA)
    if channels == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2RGBA)
    if channels == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)
    raise ValueError(f"Unsupported channel count: {channels}")


def load_pixel_buffer(path: Path) -> PixelBuffer:
    """Decode an image file into an RGBA8 buffer."""

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Image not found: {path}")
    image = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if image is None:
        raise RuntimeError(f"Failed to decode image: {path}")
    return PixelBuffer.from_array(_to_rgba8(image))


def save_pixel_buffer(
    path: Path,
    buffer: PixelBuffer,
    image_format: str = "png",
    jpg_quality: int = 95,
) -> None:
    """Encode ``buffer`` to ``path``; JPEG output drops the alpha channel."""

    fmt = image_format.lower()
    if fmt in ("jpg", "jpeg"):
        bgr = cv2.cvtColor(buffer.pixels, cv2.COLOR_RGBA2BGR)
        ok = cv2.imwrite(str(path), bgr, [int(cv2.IMWRITE_JPEG_QUALITY), jpg_quality])
    else:
        bgra = cv2.cvtColor(buffer.pixels, cv2.COLOR_RGBA2BGRA)
        ok = cv2.imwrite(str(path), bgra)
    if not ok:
        raise RuntimeError(f"Failed to write image: {path}")
