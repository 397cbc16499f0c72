"""Боковая панель: выбор файлов «было/стало», сведения о сторонах и сообщения.

Принципы:
- SRP: управляет только UI выбора и информации, не содержит логики сравнения.
- ISP: события наружу через `on_*`, данные внутрь через компактные `set_*`.
"""
from __future__ import annotations

from typing import Callable, Iterable, Optional

import customtkinter as ctk

from visidiff.models.image_model import ImageData
from visidiff.models.session_model import PresentationState

STATE_LABELS = {
    PresentationState.EMPTY: "Нет изображений",
    PresentationState.NEW_FILE: "Новый файл",
    PresentationState.DELETED: "Удалён",
    PresentationState.COMPARING: "Сравнение",
}


def _format_size(size_bytes: Optional[int]) -> str:
    if size_bytes is None:
        return "—"
    thresholds = [("Б", 1024), ("КБ", 1024**2), ("МБ", 1024**3)]
    for label, limit in thresholds:
        if size_bytes < limit:
            if label == "Б":
                return f"{size_bytes} {label}"
            value = size_bytes / (limit // 1024)
            return f"{value:.1f} {label}"
    return f"{size_bytes / 1024**3:.1f} ГБ"


class _SideInfo:
    """Блок сведений об одной стороне сравнения."""
    def __init__(self, master: ctk.CTkFrame, title: str, first_row: int) -> None:
        self._title = ctk.CTkLabel(master, text=title, font=ctk.CTkFont(size=16, weight="bold"))
        self._title.grid(row=first_row, column=0, padx=8, pady=(8, 4), sticky="w")

        self._path_val = ctk.StringVar(value="—")
        self._size_val = ctk.StringVar(value="—")
        self._dims_val = ctk.StringVar(value="—")

        labels = (
            ctk.CTkLabel(master, textvariable=self._path_val, wraplength=250, anchor="w", justify="left"),
            ctk.CTkLabel(master, textvariable=self._size_val, anchor="w", justify="left"),
            ctk.CTkLabel(master, textvariable=self._dims_val, anchor="w", justify="left"),
        )
        for offset, label in enumerate(labels, start=1):
            label.grid(row=first_row + offset, column=0, padx=8, pady=(0, 2), sticky="ew")

    def set(self, data: Optional[ImageData]) -> None:
        if data is None:
            self._path_val.set("отсутствует")
            self._size_val.set("—")
            self._dims_val.set("—")
            return
        fmt = f" · {data.format}" if data.format else ""
        self._path_val.set(str(data.path) if data.path is not None else "—")
        self._size_val.set(_format_size(data.size_bytes) + fmt)
        self._dims_val.set(f"{data.image.width} × {data.image.height} px")


class Sidebar(ctk.CTkFrame):
    """Панель с блоками: файлы, сведения о сторонах, состояние, сообщения."""
    def __init__(self, master: ctk.CTk, **kwargs) -> None:
        super().__init__(master, width=280, **kwargs)

        self.grid_columnconfigure(0, weight=1)

        # Callbacks
        self.on_open_previous: Optional[Callable[[], None]] = None
        self.on_open_current: Optional[Callable[[], None]] = None
        self.on_clear: Optional[Callable[[], None]] = None

        self._title = ctk.CTkLabel(self, text="Файлы", font=ctk.CTkFont(size=16, weight="bold"))
        self._title.grid(row=0, column=0, padx=8, pady=(8, 4), sticky="w")

        self._open_prev_btn = ctk.CTkButton(self, text="Открыть «было»…", command=self._emit_open_previous)
        self._open_prev_btn.grid(row=1, column=0, padx=8, pady=(0, 6), sticky="ew")
        self._open_cur_btn = ctk.CTkButton(self, text="Открыть «стало»…", command=self._emit_open_current)
        self._open_cur_btn.grid(row=2, column=0, padx=8, pady=(0, 6), sticky="ew")
        self._clear_btn = ctk.CTkButton(self, text="Очистить", command=self._emit_clear)
        self._clear_btn.grid(row=3, column=0, padx=8, pady=(0, 12), sticky="ew")

        self._previous_info = _SideInfo(self, "Было", first_row=4)
        self._current_info = _SideInfo(self, "Стало", first_row=8)

        self._state_val = ctk.StringVar(value=STATE_LABELS[PresentationState.EMPTY])
        self._state_label = ctk.CTkLabel(self, textvariable=self._state_val, font=ctk.CTkFont(weight="bold"))
        self._state_label.grid(row=12, column=0, padx=8, pady=(12, 4), sticky="w")

        self._notices_val = ctk.StringVar(value="")
        self._notices_label = ctk.CTkLabel(
            self, textvariable=self._notices_val, wraplength=250, anchor="w", justify="left", text_color="#c62828"
        )
        self._notices_label.grid(row=13, column=0, padx=8, pady=(0, 8), sticky="ew")

        # filler
        self.grid_rowconfigure(99, weight=1)

    # ---- Public API ----
    def set_images_info(self, previous: Optional[ImageData], current: Optional[ImageData]) -> None:
        self._previous_info.set(previous)
        self._current_info.set(current)

    def set_state(self, state: PresentationState) -> None:
        self._state_val.set(STATE_LABELS[state])

    def set_notices(self, notices: Iterable[str]) -> None:
        self._notices_val.set("\n".join(notices))

    # ---- Events ----
    def _emit_open_previous(self) -> None:
        if self.on_open_previous:
            self.on_open_previous()

    def _emit_open_current(self) -> None:
        if self.on_open_current:
            self.on_open_current()

    def _emit_clear(self) -> None:
        if self.on_clear:
            self.on_clear()
