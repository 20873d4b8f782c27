import cv2
import numpy as np
import pytest

from resampling_eval.buffers import PixelBuffer
from resampling_eval.image_io import load_pixel_buffer, save_pixel_buffer


def test_load_converts_bgr_to_rgba(tmp_path) -> None:
    path = tmp_path / "bgr.png"
    bgr = np.zeros((3, 5, 3), dtype=np.uint8)
    bgr[..., 0] = 10  # blue
    bgr[..., 2] = 200  # red
    assert cv2.imwrite(str(path), bgr)

    buffer = load_pixel_buffer(path)

    assert buffer.size == (5, 3)
    assert list(buffer.pixels[0, 0]) == [200, 0, 10, 255]


def test_load_converts_grayscale(tmp_path) -> None:
    path = tmp_path / "gray.png"
    assert cv2.imwrite(str(path), np.full((4, 4), 77, dtype=np.uint8))
    buffer = load_pixel_buffer(path)
    assert list(buffer.pixels[1, 1]) == [77, 77, 77, 255]


def test_load_reduces_16_bit_images(tmp_path) -> None:
    path = tmp_path / "deep.png"
    assert cv2.imwrite(str(path), np.full((2, 2, 3), 0xFF00, dtype=np.uint16))
    buffer = load_pixel_buffer(path)
    assert list(buffer.pixels[0, 0]) == [255, 255, 255, 255]


def test_save_and_load_keep_alpha(tmp_path) -> None:
    path = tmp_path / "rgba.png"
    original = PixelBuffer.filled(6, 2, (1, 2, 3, 128))
    save_pixel_buffer(path, original)
    loaded = load_pixel_buffer(path)
    np.testing.assert_array_equal(loaded.pixels, original.pixels)


def test_load_missing_file(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        load_pixel_buffer(tmp_path / "missing.png")


def test_load_undecodable_file(tmp_path) -> None:
    path = tmp_path / "broken.png"
    path.write_bytes(b"fake")
    with pytest.raises(RuntimeError):
        load_pixel_buffer(path)


def test_save_raises_when_encoder_fails(tmp_path, monkeypatch) -> None:
    monkeypatch.setattr("cv2.imwrite", lambda *args, **kwargs: False)
    with pytest.raises(RuntimeError):
        save_pixel_buffer(tmp_path / "out.png", PixelBuffer.filled(1, 1, (0, 0, 0, 0)))
