"""Настройки сравнения: значения по умолчанию и границы параметров.

Принципы:
- SRP: только хранение и (де)сериализация параметров, без логики сравнения.
"""
from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Tuple

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Ошибка чтения или проверки файла настроек."""


@dataclass(frozen=True)
class ComparerConfig:
    """Параметры движка сравнения.

    Fields:
        default_opacity: Непрозрачность «нового» слоя, %.
        default_zoom: Масштаб onion skin, %.
        default_sensitivity: Порог цветового расстояния для режима Diff.
        zoom_step: Шаг кнопок масштаба, %.
        zoom_min / zoom_max: Границы масштаба, %.
        sensitivity_max: Верхняя граница порога.
        highlight_rgba: Цвет изменённых пикселей.
        panel_gap: Зазор между панелями side-by-side, px.
    """
    default_opacity: int = 100
    default_zoom: int = 100
    default_sensitivity: int = 10
    zoom_step: int = 25
    zoom_min: int = 25
    zoom_max: int = 400
    sensitivity_max: int = 50
    highlight_rgba: Tuple[int, int, int, int] = (255, 0, 255, 255)
    panel_gap: int = 16

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name == "highlight_rgba":
                if not isinstance(value, tuple) or not all(_is_int(c) for c in value):
                    raise ConfigError(f"highlight_rgba должен быть кортежем целых: {value!r}")
            elif not _is_int(value):
                raise ConfigError(f"{f.name} должен быть целым числом: {value!r}")
        if self.zoom_step <= 0:
            raise ConfigError(f"zoom_step должен быть положительным: {self.zoom_step}")
        if not (0 < self.zoom_min <= self.zoom_max):
            raise ConfigError(f"Неверный диапазон масштаба: {self.zoom_min}..{self.zoom_max}")
        if self.zoom_min % self.zoom_step or self.zoom_max % self.zoom_step:
            raise ConfigError("Границы масштаба должны быть кратны zoom_step")
        if self.sensitivity_max < 0:
            raise ConfigError(f"sensitivity_max < 0: {self.sensitivity_max}")
        if len(self.highlight_rgba) != 4 or any(not 0 <= c <= 255 for c in self.highlight_rgba):
            raise ConfigError(f"highlight_rgba должен содержать 4 канала 0..255: {self.highlight_rgba}")

    def to_json(self, path: str | Path) -> None:
        Path(path).write_text(json.dumps(asdict(self), indent=2), encoding="utf-8")

    @classmethod
    def from_json(cls, path: str | Path) -> "ComparerConfig":
        """Читает настройки из JSON; неизвестные ключи игнорируются с предупреждением.

        Raises:
            ConfigError: файл не читается, не является JSON-объектом или содержит неверные значения.
        """
        try:
            raw = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ConfigError(f"Не удалось прочитать настройки {path}: {exc}") from exc
        if not isinstance(raw, dict):
            raise ConfigError(f"Ожидался JSON-объект в {path}")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(raw) - known)
        if unknown:
            logger.warning("Unknown config keys ignored: %s", ", ".join(unknown))
        values = {k: v for k, v in raw.items() if k in known}
        try:
            if "highlight_rgba" in values:
                values["highlight_rgba"] = tuple(values["highlight_rgba"])
            return cls(**values)
        except TypeError as exc:
            raise ConfigError(f"Неверные значения в {path}: {exc}") from exc


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


DEFAULT_CONFIG = ComparerConfig()
