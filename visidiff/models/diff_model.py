from __future__ import annotations

from dataclasses import dataclass

from visidiff.models.image_model import DecodedImage


@dataclass(frozen=True)
class DiffResult:
    """Результат попиксельного сравнения.

    Fields:
        image: Карта различий размером с область перекрытия входов.
        changed_pixel_count: Число пикселей, признанных изменёнными.
        total_pixel_count: Ширина × высота карты различий.
    """
    image: DecodedImage
    changed_pixel_count: int
    total_pixel_count: int

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def change_ratio(self) -> float:
        if self.total_pixel_count == 0:
            return 0.0
        return self.changed_pixel_count / self.total_pixel_count
