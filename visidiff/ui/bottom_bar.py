from __future__ import annotations

from typing import Callable, FrozenSet, Optional

import customtkinter as ctk

from visidiff.models.session_model import ViewMode
from visidiff.models.view_model import Control

MODE_LABELS = {
    ViewMode.ONION_SKIN: "Onion skin",
    ViewMode.SIDE_BY_SIDE: "Side by side",
    ViewMode.DIFF: "Diff",
}


class BottomBar(ctk.CTkFrame):
    def __init__(self, master: ctk.CTk, sensitivity_max: int = 50, **kwargs) -> None:
        super().__init__(master, height=64, **kwargs)

        # callbacks
        self.on_view_mode_change: Optional[Callable[[ViewMode], None]] = None
        self.on_opacity_change: Optional[Callable[[int], None]] = None
        self.on_zoom_in: Optional[Callable[[], None]] = None
        self.on_zoom_out: Optional[Callable[[], None]] = None
        self.on_zoom_fit: Optional[Callable[[], None]] = None
        self.on_zoom_actual: Optional[Callable[[], None]] = None
        self.on_sensitivity_change: Optional[Callable[[int], None]] = None

        # layout
        self.grid_rowconfigure(0, weight=1)
        self.grid_columnconfigure(2, weight=1)  # slider stretches

        # Mode toggle
        self._mode_buttons = ctk.CTkSegmentedButton(
            self,
            values=[MODE_LABELS[m] for m in ViewMode],
            command=self._on_mode_click,
        )
        self._mode_buttons.set(MODE_LABELS[ViewMode.ONION_SKIN])

        # Opacity: "Было" <slider> "Стало"
        self._old_label = ctk.CTkLabel(self, text="Было")
        self._opacity_slider = ctk.CTkSlider(self, from_=0, to=100, number_of_steps=100, command=self._on_opacity_slider)
        self._opacity_slider.set(100)
        self._new_label = ctk.CTkLabel(self, text="Стало")
        self._opacity_value = ctk.StringVar(value=self._opacity_text(100))
        self._opacity_value_label = ctk.CTkLabel(self, textvariable=self._opacity_value, width=140, anchor="w")

        # Zoom buttons
        self._zoom_out_btn = ctk.CTkButton(self, text="−", width=32, command=self._emit(lambda: self.on_zoom_out))
        self._zoom_value = ctk.StringVar(value="100%")
        self._zoom_value_label = ctk.CTkLabel(self, textvariable=self._zoom_value, width=48)
        self._zoom_in_btn = ctk.CTkButton(self, text="+", width=32, command=self._emit(lambda: self.on_zoom_in))
        self._fit_btn = ctk.CTkButton(self, text="Fit", width=48, command=self._emit(lambda: self.on_zoom_fit))
        self._actual_btn = ctk.CTkButton(self, text="100%", width=56, command=self._emit(lambda: self.on_zoom_actual))

        # Sensitivity (diff mode)
        self._sens_label = ctk.CTkLabel(self, text="Чувствительность")
        self._sens_slider = ctk.CTkSlider(
            self, from_=0, to=sensitivity_max, number_of_steps=max(1, sensitivity_max), command=self._on_sens_slider
        )
        self._sens_slider.set(10)
        self._sens_value = ctk.StringVar(value="10")
        self._sens_value_label = ctk.CTkLabel(self, textvariable=self._sens_value, width=32, anchor="w")
        self._stats_value = ctk.StringVar(value="")
        self._stats_label = ctk.CTkLabel(self, textvariable=self._stats_value, anchor="w")

        self.set_controls(frozenset())

    # public API (sync from controller)
    def set_controls(self, controls: FrozenSet[Control]) -> None:
        """Показывает только элементы, применимые к текущему режиму."""
        self._toggle(self._mode_buttons, Control.VIEW_MODE in controls, column=0, padx=(10, 12))
        show_opacity = Control.OPACITY in controls
        self._toggle(self._old_label, show_opacity, column=1, padx=(6, 4))
        self._toggle(self._opacity_slider, show_opacity, column=2, sticky="ew")
        self._toggle(self._new_label, show_opacity, column=3, padx=(4, 6))
        self._toggle(self._opacity_value_label, show_opacity, column=4)
        show_zoom = Control.ZOOM in controls
        self._toggle(self._zoom_out_btn, show_zoom, column=5)
        self._toggle(self._zoom_value_label, show_zoom, column=6)
        self._toggle(self._zoom_in_btn, show_zoom, column=7)
        self._toggle(self._fit_btn, show_zoom, column=8)
        self._toggle(self._actual_btn, show_zoom, column=9, padx=(6, 10))
        show_sens = Control.SENSITIVITY in controls
        self._toggle(self._sens_label, show_sens, column=1, padx=(6, 4))
        self._toggle(self._sens_slider, show_sens, column=2, sticky="ew")
        self._toggle(self._sens_value_label, show_sens, column=3)
        self._toggle(self._stats_label, show_sens, column=4, padx=(6, 10))

    def set_view_mode_value(self, mode: ViewMode) -> None:
        self._mode_buttons.set(MODE_LABELS[mode])

    def set_opacity(self, percent: int) -> None:
        self._opacity_slider.set(percent)
        self._opacity_value.set(self._opacity_text(percent))

    def set_zoom_percent(self, percent: int) -> None:
        self._zoom_value.set(f"{percent}%")

    def set_sensitivity(self, value: int) -> None:
        self._sens_slider.set(value)
        self._sens_value.set(str(value))

    def set_diff_stats(self, text: Optional[str]) -> None:
        self._stats_value.set(text or "")

    # events
    def _on_mode_click(self, value: str) -> None:
        for mode, label in MODE_LABELS.items():
            if label == value and self.on_view_mode_change:
                self.on_view_mode_change(mode)

    def _on_opacity_slider(self, value: float) -> None:
        percent = int(round(value))
        self._opacity_value.set(self._opacity_text(percent))
        if self.on_opacity_change:
            self.on_opacity_change(percent)

    def _on_sens_slider(self, value: float) -> None:
        sens = int(round(value))
        self._sens_value.set(str(sens))
        if self.on_sensitivity_change:
            self.on_sensitivity_change(sens)

    # helpers
    def _emit(self, get_callback: Callable[[], Optional[Callable[[], None]]]) -> Callable[[], None]:
        def handler() -> None:
            callback = get_callback()
            if callback:
                callback()
        return handler

    def _opacity_text(self, percent: int) -> str:
        return f"{percent}% новое / {100 - percent}% старое"

    def _toggle(self, widget: ctk.CTkBaseClass, visible: bool, column: int, padx=6, sticky: str = "w") -> None:
        if visible:
            widget.grid(row=0, column=column, padx=padx, pady=8, sticky=sticky)
        else:
            widget.grid_remove()
