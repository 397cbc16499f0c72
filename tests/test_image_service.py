import numpy as np
import pytest
from PIL import Image

from visidiff.models.image_model import DecodedImage
from visidiff.services.image_service import DecodeError, ImageService


@pytest.fixture
def service():
    return ImageService()


def test_decode_png_to_rgba(service, png_bytes):
    raw = png_bytes(3, 2, (10, 20, 30, 255))

    data = service.decode(raw)

    assert data.image.size == (3, 2)
    assert data.image.pixel(2, 1) == (10, 20, 30, 255)
    assert data.format == "PNG"
    assert data.size_bytes == len(raw)
    assert data.path is None


def test_decode_non_rgba_source_is_converted(service, png_bytes):
    data = service.decode(png_bytes(2, 2, (200, 100, 50, 255), fmt="BMP"))
    assert data.image.pixels.shape == (2, 2, 4)
    assert data.image.pixel(0, 0) == (200, 100, 50, 255)


@pytest.mark.parametrize("raw", [b"", b"<svg></svg>", b"hello world"])
def test_decode_failure(service, raw):
    with pytest.raises(DecodeError):
        service.decode(raw)


def test_decode_truncated_png(service, png_bytes):
    raw = png_bytes(32, 32)
    with pytest.raises(DecodeError):
        service.decode(raw[: len(raw) // 2])


def test_load_image_missing_file(service, tmp_path):
    with pytest.raises(FileNotFoundError):
        service.load_image(tmp_path / "nope.png")


def test_load_image_from_disk(service, tmp_path, png_bytes):
    path = tmp_path / "a.png"
    path.write_bytes(png_bytes(4, 4))

    data = service.load_image(path)

    assert data.path == path
    assert data.image.size == (4, 4)


def test_decoded_image_is_read_only():
    pixels = np.zeros((2, 3, 4), dtype=np.uint8)
    image = DecodedImage(width=3, height=2, pixels=pixels)

    pixels[0, 0] = (9, 9, 9, 9)

    assert image.pixel(0, 0) == (0, 0, 0, 0)
    with pytest.raises(ValueError):
        image.pixels[0, 0, 0] = 1


@pytest.mark.parametrize(
    "width, height, shape",
    [(0, 2, (2, 0, 4)), (2, 2, (2, 2, 3)), (3, 2, (3, 2, 4))],
)
def test_decoded_image_validates_shape(width, height, shape):
    with pytest.raises(ValueError):
        DecodedImage(width=width, height=height, pixels=np.zeros(shape, dtype=np.uint8))


def test_from_buffer_row_major():
    image = DecodedImage.from_buffer(2, 1, bytes([1, 2, 3, 4, 5, 6, 7, 8]))
    assert image.pixel(1, 0) == (5, 6, 7, 8)
    assert image.to_bytes() == bytes([1, 2, 3, 4, 5, 6, 7, 8])

    with pytest.raises(ValueError):
        DecodedImage.from_buffer(2, 2, bytes(8))


def test_oversized_image_is_decode_error(service, png_bytes, monkeypatch):
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)

    with pytest.raises(DecodeError):
        service.decode(png_bytes(64, 64))
