"""Контроллер приложения: связывает виджеты с `ComparisonController`.

SOLID:
- SRP: класс управляет связями между UI и контроллером сравнения (без логики сравнения).
- DIP: виджеты ничего не знают друг о друге, общаются через контроллер.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from tkinter import TclError, filedialog
from typing import Optional

import customtkinter as ctk

from visidiff.controllers.comparison_controller import ComparisonController
from visidiff.models.session_model import ViewMode
from visidiff.ui.bottom_bar import BottomBar
from visidiff.ui.comparer_view import ComparerView
from visidiff.ui.sidebar import Sidebar

IMAGE_FILETYPES = (
    ("Images", "*.png *.jpg *.jpeg *.bmp *.gif *.tiff *.webp"),
    ("All files", "*.*"),
)


@dataclass
class AppController:
    """Связывает элементы UI с контроллером сравнения.

    Ответственности:
    - Инициализация и бинд событий (UI -> контроллер).
    - Выбор файлов «было/стало» через диалог.
    - Синхронизация видимых элементов управления с активным режимом.
    """
    viewer: ComparerView
    sidebar: Sidebar
    bottom: BottomBar
    window: ctk.CTk
    comparison: ComparisonController

    _previous_path: Optional[Path] = field(default=None, init=False)
    _current_path: Optional[Path] = field(default=None, init=False)

    def bind_events(self) -> None:
        """Регистрирует обработчики событий между UI-компонентами."""
        self.sidebar.on_open_previous = self._handle_open_previous
        self.sidebar.on_open_current = self._handle_open_current
        self.sidebar.on_clear = self._handle_clear

        self.viewer.on_resize = self._handle_resize
        self.viewer.on_pan_start = self.comparison.begin_pan
        self.viewer.on_pan_move = self._handle_pan_move
        self.viewer.on_pan_end = self.comparison.end_pan
        self.viewer.on_wheel_zoom = self._handle_wheel_zoom

        self.bottom.on_view_mode_change = self._handle_view_mode_change
        self.bottom.on_opacity_change = self._wrap(self.comparison.set_opacity)
        self.bottom.on_zoom_in = self._wrap(self.comparison.zoom_in)
        self.bottom.on_zoom_out = self._wrap(self.comparison.zoom_out)
        self.bottom.on_zoom_fit = self._wrap(self.comparison.fit)
        self.bottom.on_zoom_actual = self._wrap(self.comparison.actual_size)
        self.bottom.on_sensitivity_change = self._wrap(self.comparison.set_sensitivity)

        # results of background diff arrive on a worker thread
        self.comparison.schedule = lambda action: self.window.after(0, action)
        self.comparison.on_diff_ready = self._refresh

    def open_paths(self, previous: Optional[Path], current: Optional[Path]) -> None:
        self._previous_path = previous
        self._current_path = current
        self._load()

    # ---- Handlers ----
    def _handle_open_previous(self) -> None:
        path = self._ask_path("Выберите прежнюю версию")
        if path is not None:
            self._previous_path = path
            self._load()

    def _handle_open_current(self) -> None:
        path = self._ask_path("Выберите текущую версию")
        if path is not None:
            self._current_path = path
            self._load()

    def _handle_clear(self) -> None:
        self.open_paths(None, None)

    def _handle_resize(self, width: int, height: int) -> None:
        self.comparison.set_viewport(width, height)
        self._refresh()

    def _handle_pan_move(self, dx: float, dy: float) -> None:
        self.comparison.drag_pan(dx, dy)
        self._refresh()

    def _handle_wheel_zoom(self, zoom_in: bool) -> None:
        if zoom_in:
            self.comparison.zoom_in()
        else:
            self.comparison.zoom_out()
        self._refresh()

    def _handle_view_mode_change(self, mode: ViewMode) -> None:
        self.comparison.set_view_mode(mode)
        self._refresh()

    # ---- Helpers ----
    def _wrap(self, action):
        def handler(*args) -> None:
            action(*args)
            self._refresh()
        return handler

    def _ask_path(self, title: str) -> Optional[Path]:
        try:
            file_path = filedialog.askopenfilename(title=title, filetypes=IMAGE_FILETYPES)
        except TclError:
            # Silent fail if dialog cannot open
            return None
        return Path(file_path) if file_path else None

    def _load(self) -> None:
        state = self.comparison.load_files(self._previous_path, self._current_path)
        self.sidebar.set_images_info(self.comparison.previous_info, self.comparison.current_info)
        self.sidebar.set_state(state)
        self._refresh()

    def _refresh(self) -> None:
        """Перерисовывает вид и синхронизирует элементы управления с сессией."""
        session = self.comparison.session
        view = self.comparison.view()
        rendered = self.comparison.compositor.render(view, self.comparison.viewport)
        self.viewer.show(view, rendered, panel_gap=self.comparison.compositor.panel_gap)

        self.bottom.set_controls(view.controls)
        self.bottom.set_view_mode_value(session.view_mode)
        self.bottom.set_opacity(session.opacity)
        self.bottom.set_zoom_percent(session.zoom)
        self.bottom.set_sensitivity(session.sensitivity)
        self.bottom.set_diff_stats(self.comparison.diff_summary())
        self.sidebar.set_notices(self.comparison.notices)
