import io

import numpy as np
import pytest
from PIL import Image

from visidiff.models.image_model import DecodedImage


@pytest.fixture
def solid():
    """Фабрика однотонных изображений: solid(w, h, (r, g, b, a))."""
    def make(width, height, rgba=(100, 100, 100, 255)):
        return DecodedImage.filled(width, height, rgba)
    return make


@pytest.fixture
def noise():
    def make(width, height, seed=0):
        rng = np.random.default_rng(seed)
        pixels = rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8)
        pixels[..., 3] = 255
        return DecodedImage(width=width, height=height, pixels=pixels)
    return make


@pytest.fixture
def png_bytes():
    def encode(width, height, rgba=(10, 20, 30, 255), fmt="PNG"):
        buf = io.BytesIO()
        image = Image.new("RGBA", (width, height), rgba)
        if fmt in ("BMP", "JPEG"):
            image = image.convert("RGB")
        image.save(buf, format=fmt)
        return buf.getvalue()
    return encode
