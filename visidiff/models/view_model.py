"""Описания того, что нужно отрисовать, — по одному классу на состояние/режим.

Каждый вариант несёт только свои поля, поэтому UI не нужно гадать,
какие параметры сессии важны в каком режиме.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, FrozenSet, Optional, Tuple, Union

from visidiff.models.diff_model import DiffResult
from visidiff.models.image_model import DecodedImage
from visidiff.models.session_model import PresentationState, ViewMode


class Control(str, Enum):
    VIEW_MODE = "view_mode"
    OPACITY = "opacity"
    ZOOM = "zoom"
    PAN = "pan"
    SENSITIVITY = "sensitivity"


@dataclass(frozen=True)
class ViewTransform:
    """Общее аффинное преобразование слоёв: масштаб вокруг центра окна, затем сдвиг."""
    scale: float
    center: Tuple[float, float]
    pan: Tuple[float, float] = (0.0, 0.0)

    def apply(self, x: float, y: float) -> Tuple[float, float]:
        """Координаты слоя -> координаты окна просмотра."""
        cx, cy = self.center
        px, py = self.pan
        return cx + self.scale * (x - cx) + px, cy + self.scale * (y - cy) + py

    def invert(self, x: float, y: float) -> Tuple[float, float]:
        """Координаты окна просмотра -> координаты слоя."""
        cx, cy = self.center
        px, py = self.pan
        return cx + (x - cx - px) / self.scale, cy + (y - cy - py) / self.scale

    def pil_affine(self) -> Tuple[float, float, float, float, float, float]:
        """Коэффициенты для `Image.transform(..., Image.Transform.AFFINE, data)`.

        PIL ожидает обратное отображение: точка выхода -> точка входа.
        """
        cx, cy = self.center
        px, py = self.pan
        inv = 1.0 / self.scale
        return (inv, 0.0, cx - (cx + px) * inv, 0.0, inv, cy - (cy + py) * inv)


@dataclass(frozen=True)
class EmptyView:
    state: ClassVar[PresentationState] = PresentationState.EMPTY
    controls: ClassVar[FrozenSet[Control]] = frozenset()


@dataclass(frozen=True)
class NewFileView:
    current: DecodedImage
    state: ClassVar[PresentationState] = PresentationState.NEW_FILE
    controls: ClassVar[FrozenSet[Control]] = frozenset()


@dataclass(frozen=True)
class DeletedView:
    previous: DecodedImage
    state: ClassVar[PresentationState] = PresentationState.DELETED
    controls: ClassVar[FrozenSet[Control]] = frozenset()


@dataclass(frozen=True)
class OnionSkinView:
    previous: DecodedImage
    current: DecodedImage
    opacity: int
    zoom: int
    transform: ViewTransform
    state: ClassVar[PresentationState] = PresentationState.COMPARING
    mode: ClassVar[ViewMode] = ViewMode.ONION_SKIN
    controls: ClassVar[FrozenSet[Control]] = frozenset(
        {Control.VIEW_MODE, Control.OPACITY, Control.ZOOM, Control.PAN}
    )

    @property
    def alpha(self) -> float:
        """Вес `current` поверх `previous`: 0.0 — только старое, 1.0 — только новое."""
        return self.opacity / 100.0


@dataclass(frozen=True)
class SideBySideView:
    previous: DecodedImage
    current: DecodedImage
    state: ClassVar[PresentationState] = PresentationState.COMPARING
    mode: ClassVar[ViewMode] = ViewMode.SIDE_BY_SIDE
    controls: ClassVar[FrozenSet[Control]] = frozenset({Control.VIEW_MODE})


@dataclass(frozen=True)
class DiffView:
    sensitivity: int
    result: Optional[DiffResult]  # None while the pair is still being decoded
    error: Optional[str] = None
    state: ClassVar[PresentationState] = PresentationState.COMPARING
    mode: ClassVar[ViewMode] = ViewMode.DIFF
    controls: ClassVar[FrozenSet[Control]] = frozenset({Control.VIEW_MODE, Control.SENSITIVITY})

    @property
    def is_pending(self) -> bool:
        return self.result is None and self.error is None


ComparisonView = Union[OnionSkinView, SideBySideView, DiffView]
View = Union[EmptyView, NewFileView, DeletedView, OnionSkinView, SideBySideView, DiffView]
