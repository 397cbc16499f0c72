"""Состояние одного сравнения: пара изображений, режим и параметры режимов.

Принципы:
- SRP: хранит состояние и гарантирует его инварианты (диапазоны, шаг масштаба).
- Чистый код: каждый сеттер тотален (не бросает исключений) и возвращает сессию.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from visidiff.config import DEFAULT_CONFIG, ComparerConfig
from visidiff.models.image_model import DecodedImage


class ViewMode(str, Enum):
    ONION_SKIN = "onion_skin"
    SIDE_BY_SIDE = "side_by_side"
    DIFF = "diff"


class PresentationState(str, Enum):
    """Высокоуровневое состояние для UI; ровно одно из четырёх."""
    EMPTY = "empty"
    NEW_FILE = "new_file"
    DELETED = "deleted"
    COMPARING = "comparing"


def _clamp(value: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, value))


@dataclass(frozen=True)
class PanGesture:
    """Жест перетаскивания: смещение на момент начала + накопленная дельта указателя."""
    anchor: Tuple[float, float]
    delta: Tuple[float, float] = (0.0, 0.0)

    def moved_to(self, dx: float, dy: float) -> "PanGesture":
        """Возвращает жест с новой суммарной дельтой от точки нажатия."""
        return PanGesture(anchor=self.anchor, delta=(float(dx), float(dy)))

    @property
    def pan(self) -> Tuple[float, float]:
        ax, ay = self.anchor
        dx, dy = self.delta
        return ax + dx, ay + dy


@dataclass
class ComparisonSession:
    """Изменяемое состояние сравнения «было/стало».

    Инварианты:
    - `zoom` кратен шагу и лежит в [zoom_min, zoom_max];
    - `opacity` в [0, 100], `sensitivity` в [0, sensitivity_max];
    - изменение любых полей, кроме пары изображений, не трогает изображения.
    """
    config: ComparerConfig = DEFAULT_CONFIG
    previous: Optional[DecodedImage] = None
    current: Optional[DecodedImage] = None
    view_mode: ViewMode = ViewMode.ONION_SKIN
    opacity: int = field(init=False)
    zoom: int = field(init=False)
    pan: Tuple[float, float] = (0.0, 0.0)
    sensitivity: int = field(init=False)

    def __post_init__(self) -> None:
        self.opacity = _clamp(int(self.config.default_opacity), 0, 100)
        self.zoom = self._snap_zoom(self.config.default_zoom)
        self.sensitivity = _clamp(int(self.config.default_sensitivity), 0, self.config.sensitivity_max)

    # ---- Derived state ----
    @property
    def has_pair(self) -> bool:
        return self.previous is not None and self.current is not None

    @property
    def state(self) -> PresentationState:
        if self.previous is None and self.current is None:
            return PresentationState.EMPTY
        if self.previous is None:
            return PresentationState.NEW_FILE
        if self.current is None:
            return PresentationState.DELETED
        return PresentationState.COMPARING

    # ---- Images & mode ----
    def set_images(self, previous: Optional[DecodedImage], current: Optional[DecodedImage]) -> "ComparisonSession":
        """Атомарно заменяет обе стороны.

        При смене пары (по идентичности объектов) сбрасывает режим, непрозрачность,
        масштаб и смещение к значениям по умолчанию. Порог чувствительности сохраняется.
        """
        is_new_pair = previous is not self.previous or current is not self.current
        self.previous = previous
        self.current = current
        if is_new_pair:
            self.view_mode = ViewMode.ONION_SKIN
            self.opacity = _clamp(int(self.config.default_opacity), 0, 100)
            self.zoom = self._snap_zoom(self.config.default_zoom)
            self.pan = (0.0, 0.0)
        return self

    def set_view_mode(self, mode: ViewMode) -> "ComparisonSession":
        if not self.has_pair:
            return self
        self.view_mode = ViewMode(mode)
        return self

    # ---- Onion skin ----
    def set_opacity(self, value: float) -> "ComparisonSession":
        if not math.isfinite(value):
            return self
        self.opacity = _clamp(int(round(value)), 0, 100)
        return self

    def zoom_in(self) -> "ComparisonSession":
        self.zoom = self._snap_zoom(self.zoom + self.config.zoom_step)
        return self

    def zoom_out(self) -> "ComparisonSession":
        self.zoom = self._snap_zoom(self.zoom - self.config.zoom_step)
        return self

    def set_zoom(self, percent: float) -> "ComparisonSession":
        """Устанавливает масштаб, привязывая его к ближайшему шагу (для пресетов)."""
        if math.isfinite(percent):
            self.zoom = self._snap_zoom(percent)
        return self

    def reset_zoom_and_pan(self) -> "ComparisonSession":
        # "Fit"
        self.zoom = self._snap_zoom(100)
        self.pan = (0.0, 0.0)
        return self

    def reset_zoom_only(self) -> "ComparisonSession":
        # "100%"
        self.zoom = self._snap_zoom(100)
        return self

    def set_pan(self, x: float, y: float) -> "ComparisonSession":
        if not (math.isfinite(x) and math.isfinite(y)):
            return self
        self.pan = (float(x), float(y))
        return self

    def begin_pan(self) -> PanGesture:
        return PanGesture(anchor=self.pan)

    # ---- Diff ----
    def set_sensitivity(self, value: float) -> "ComparisonSession":
        # NaN and infinities keep the current value
        if not math.isfinite(value):
            return self
        self.sensitivity = _clamp(int(round(value)), 0, self.config.sensitivity_max)
        return self

    # ---- Helpers ----
    def _snap_zoom(self, percent: float) -> int:
        step = self.config.zoom_step
        snapped = int(round(percent / step)) * step
        return _clamp(snapped, self.config.zoom_min, self.config.zoom_max)
