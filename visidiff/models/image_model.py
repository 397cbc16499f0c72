"""Модель декодированного изображения.

Принципы:
- SRP: только структура данных, без логики обработки.
- Чистый код: неизменяемость (`frozen=True`, read-only буфер) для предсказуемости.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import numpy as np
from PIL import Image


@dataclass(frozen=True, eq=False)
class DecodedImage:
    """Неизменяемый растр RGBA, 8 бит на канал.

    Fields:
        width: Ширина, px.
        height: Высота, px.
        pixels: Массив `uint8` формы (height, width, 4), построчно, только для чтения.
    """
    width: int
    height: int
    pixels: np.ndarray

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Размеры должны быть положительными: {self.width}×{self.height}")
        expected = (self.height, self.width, 4)
        if self.pixels.shape != expected:
            raise ValueError(f"Форма буфера {self.pixels.shape}, ожидалось {expected}")
        if self.pixels.dtype != np.uint8:
            raise ValueError(f"Ожидался буфер uint8, получен {self.pixels.dtype}")
        if self.pixels.flags.writeable:
            frozen = self.pixels.copy()
            frozen.flags.writeable = False
            object.__setattr__(self, "pixels", frozen)

    @classmethod
    def from_buffer(cls, width: int, height: int, data: bytes | bytearray | np.ndarray) -> "DecodedImage":
        """Создаёт изображение из плоского построчного буфера RGBA длиной width*height*4."""
        flat = np.frombuffer(bytes(data), dtype=np.uint8) if not isinstance(data, np.ndarray) else data
        if flat.size != width * height * 4:
            raise ValueError(f"Длина буфера {flat.size}, ожидалось {width * height * 4}")
        return cls(width=width, height=height, pixels=flat.astype(np.uint8).reshape(height, width, 4))

    @classmethod
    def from_pil(cls, image: Image.Image) -> "DecodedImage":
        rgba = image if image.mode == "RGBA" else image.convert("RGBA")
        width, height = rgba.size
        return cls(width=width, height=height, pixels=np.asarray(rgba, dtype=np.uint8))

    @classmethod
    def filled(cls, width: int, height: int, rgba: Tuple[int, int, int, int]) -> "DecodedImage":
        """Однотонное изображение; удобно для заглушек и тестов."""
        pixels = np.empty((height, width, 4), dtype=np.uint8)
        pixels[...] = rgba
        return cls(width=width, height=height, pixels=pixels)

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    def pixel(self, x: int, y: int) -> Tuple[int, int, int, int]:
        r, g, b, a = (int(v) for v in self.pixels[y, x])
        return r, g, b, a

    def to_bytes(self) -> bytes:
        return self.pixels.tobytes()

    def to_pil(self) -> Image.Image:
        return Image.fromarray(np.ascontiguousarray(self.pixels), mode="RGBA")


@dataclass(frozen=True)
class ImageData:
    """Декодированное изображение вместе с метаданными источника.

    Fields:
        image: Декодированный растр.
        path: Путь к исходному файлу, если изображение читалось с диска.
        format: Формат по данным PIL, например "PNG".
        size_bytes: Размер закодированных данных, если доступен.
    """
    image: DecodedImage
    path: Optional[Path]
    format: Optional[str]
    size_bytes: Optional[int]
