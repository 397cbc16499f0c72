"""Виджет просмотра сравнения: onion skin, side-by-side, diff и баннеры состояний.

Принципы:
- SRP: только отрисовка готового описания вида и приём жестов мыши.
- Чистый код: вся математика масштаба/сдвига живёт в сессии и композиторе,
  виджет лишь сообщает дельты указателя.
"""
from __future__ import annotations

from typing import Callable, Optional, Tuple

import customtkinter as ctk
import tkinter as tk
from PIL import Image, ImageTk

from visidiff.models.view_model import (
    DeletedView,
    DiffView,
    EmptyView,
    NewFileView,
    OnionSkinView,
    SideBySideView,
    View,
)

BANNER_H = 28


class ComparerView(ctk.CTkFrame):
    """Канва, на которой рисуется результат `CompositorService.render`."""
    def __init__(self, master: ctk.CTk | tk.Misc, **kwargs) -> None:
        super().__init__(master, **kwargs)
        self.grid_rowconfigure(0, weight=1)
        self.grid_columnconfigure(0, weight=1)

        self._canvas = tk.Canvas(self, highlightthickness=0, bg=self._get_canvas_bg())
        self._canvas.grid(row=0, column=0, sticky="nsew")

        self._tk_image: Optional[ImageTk.PhotoImage] = None

        # panning state
        self._pan_start_canvas_xy: Optional[Tuple[int, int]] = None
        self._pan_enabled: bool = False

        self.on_resize: Optional[Callable[[int, int], None]] = None
        self.on_pan_start: Optional[Callable[[], None]] = None
        self.on_pan_move: Optional[Callable[[float, float], None]] = None
        self.on_pan_end: Optional[Callable[[], None]] = None
        self.on_wheel_zoom: Optional[Callable[[bool], None]] = None

        self._canvas.bind("<Configure>", self._on_canvas_resize)

        # Mouse wheel zoom (cross-platform)
        self._canvas.bind("<MouseWheel>", self._on_mouse_wheel)      # Windows/macOS
        self._canvas.bind("<Button-4>", self._on_mouse_wheel_linux)  # Linux scroll up
        self._canvas.bind("<Button-5>", self._on_mouse_wheel_linux)  # Linux scroll down

        # Panning with left mouse drag
        self._canvas.bind("<ButtonPress-1>", self._on_pan_start)
        self._canvas.bind("<B1-Motion>", self._on_pan_move)
        self._canvas.bind("<ButtonRelease-1>", self._on_pan_end)

    # ---- Public API ----
    def viewport_size(self) -> Tuple[int, int]:
        """Размер области, доступной под изображение (без полосы баннера)."""
        return max(1, int(self._canvas.winfo_width())), max(1, int(self._canvas.winfo_height()) - BANNER_H)

    def show(self, view: View, rendered: Optional[Image.Image], panel_gap: int = 16) -> None:
        """Перерисовывает канву по описанию вида и его растеризации."""
        self._canvas.delete("all")
        self._pan_enabled = isinstance(view, OnionSkinView)
        canvas_w = int(self._canvas.winfo_width())
        vw, vh = self.viewport_size()

        if isinstance(view, EmptyView):
            self._draw_placeholder("Выберите изображения для сравнения")
            return

        if isinstance(view, NewFileView):
            self._draw_banner("Новый файл", fill="#2e7d32")
        elif isinstance(view, DeletedView):
            self._draw_banner("Удалён", fill="#c62828")
        elif isinstance(view, SideBySideView):
            panel_w = max(1, (vw - panel_gap) // 2)
            self._draw_banner_text("Было", panel_w // 2)
            self._draw_banner_text("Стало", panel_w + panel_gap + panel_w // 2)
        elif isinstance(view, DiffView):
            if view.error is not None:
                self._draw_placeholder(view.error)
                return
            if view.is_pending:
                self._draw_placeholder("Вычисление различий…")
                return
        else:
            self._draw_banner_text("Было (HEAD)", 60)
            self._draw_banner_text("Стало (рабочая копия)", canvas_w - 90)

        if rendered is None:
            return
        self._tk_image = ImageTk.PhotoImage(rendered)
        x = (vw - rendered.width) // 2
        y = BANNER_H + (vh - rendered.height) // 2
        self._canvas.create_image(x, y, image=self._tk_image, anchor="nw")

    # ---- Internals ----
    def _draw_placeholder(self, text: str) -> None:
        w = int(self._canvas.winfo_width())
        h = int(self._canvas.winfo_height())
        self._canvas.create_text(w // 2, h // 2, text=text, fill="#808080")

    def _draw_banner(self, text: str, fill: str) -> None:
        w = int(self._canvas.winfo_width())
        self._canvas.create_rectangle(0, 0, w, BANNER_H, fill=fill, outline="")
        self._canvas.create_text(w // 2, BANNER_H // 2, text=text, fill="white")

    def _draw_banner_text(self, text: str, x: int) -> None:
        self._canvas.create_text(x, BANNER_H // 2, text=text, fill="#808080")

    def _on_canvas_resize(self, _event: tk.Event) -> None:
        if self.on_resize:
            self.on_resize(*self.viewport_size())

    def _get_canvas_bg(self) -> str:
        # CTk does not expose canvas theme, so pick neutral
        return "#1f1f1f" if ctk.get_appearance_mode().lower() == "dark" else "#f2f2f2"

    # ---- Mouse wheel zoom ----
    def _on_mouse_wheel(self, event: tk.Event) -> None:
        if event.delta == 0 or not self._pan_enabled:
            return
        if self.on_wheel_zoom:
            self.on_wheel_zoom(event.delta > 0)

    def _on_mouse_wheel_linux(self, event: tk.Event) -> None:
        # On X11, Button-4 is up, Button-5 is down
        if not self._pan_enabled:
            return
        if self.on_wheel_zoom:
            self.on_wheel_zoom(getattr(event, "num", None) == 4)

    # ---- Panning ----
    def _on_pan_start(self, event: tk.Event) -> None:
        if not self._pan_enabled:
            return
        self._canvas.focus_set()
        self._pan_start_canvas_xy = (event.x, event.y)
        if self.on_pan_start:
            self.on_pan_start()

    def _on_pan_move(self, event: tk.Event) -> None:
        if self._pan_start_canvas_xy is None:
            return
        sx, sy = self._pan_start_canvas_xy
        if self.on_pan_move:
            self.on_pan_move(event.x - sx, event.y - sy)

    def _on_pan_end(self, _event: tk.Event) -> None:
        if self._pan_start_canvas_xy is None:
            return
        self._pan_start_canvas_xy = None
        if self.on_pan_end:
            self.on_pan_end()
