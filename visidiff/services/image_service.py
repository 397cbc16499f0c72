"""Декодирование изображений из байтов и с диска.

Принципы:
- SRP: класс отвечает только за декодирование и базовое извлечение свойств.
- OCP: новые источники (ревизия в VCS, поток) добавляются отдельными методами поверх `decode`.
"""
from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

from visidiff.models.image_model import DecodedImage, ImageData

logger = logging.getLogger(__name__)


class DecodeError(ValueError):
    """Данные не удалось декодировать: неизвестный формат или повреждённый файл."""


class ImageService:
    def decode(self, raw: bytes, source: Optional[Path] = None) -> ImageData:
        """Декодирует закодированное изображение (PNG, JPEG, GIF, WebP, …) в RGBA.

        Args:
            raw: Байты файла.
            source: Путь, откуда байты прочитаны (для метаданных и сообщений).

        Returns:
            `ImageData` с растром `DecodedImage` и метаданными.

        Raises:
            DecodeError: если данные не распознаны, повреждены или изображение слишком велико.
        """
        label = str(source) if source is not None else "<bytes>"
        if not raw:
            raise DecodeError(f"Пустые данные изображения: {label}")
        try:
            with Image.open(io.BytesIO(raw)) as pil_image:
                pil_image.load()
                fmt = pil_image.format
                decoded = DecodedImage.from_pil(pil_image.convert("RGBA"))
        except UnidentifiedImageError as exc:
            raise DecodeError(f"Данные не являются изображением: {label}") from exc
        except (OSError, SyntaxError, ValueError) as exc:
            # Pillow reports truncated/corrupt data through these
            raise DecodeError(f"Повреждённое изображение {label}: {exc}") from exc
        except (Image.DecompressionBombError, MemoryError) as exc:
            raise DecodeError(f"Изображение слишком велико {label}: {exc}") from exc

        logger.debug("Decoded %s: %dx%d %s", label, decoded.width, decoded.height, fmt)
        return ImageData(image=decoded, path=source, format=fmt, size_bytes=len(raw))

    def load_image(self, file_path: str | Path) -> ImageData:
        """Читает файл с диска и декодирует его.

        Raises:
            FileNotFoundError: если путь не существует или не указывает на файл.
            DecodeError: если файл не распознан как изображение.
        """
        path = Path(file_path)
        if not path.exists() or not path.is_file():
            raise FileNotFoundError(f"Файл не найден: {path}")
        return self.decode(path.read_bytes(), source=path)
