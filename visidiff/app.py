from __future__ import annotations

from pathlib import Path
from typing import Optional

import customtkinter as ctk

from visidiff.config import DEFAULT_CONFIG, ComparerConfig
from visidiff.controllers.app_controller import AppController
from visidiff.controllers.comparison_controller import ComparisonController
from visidiff.ui.bottom_bar import BottomBar
from visidiff.ui.comparer_view import ComparerView
from visidiff.ui.sidebar import Sidebar


class ComparerApp(ctk.CTk):
    def __init__(self, config: ComparerConfig = DEFAULT_CONFIG) -> None:
        super().__init__()
        ctk.set_appearance_mode("system")
        ctk.set_default_color_theme("blue")

        self.title("Visidiff")
        self.minsize(900, 600)

        # root layout: left viewer, right sidebar
        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(0, weight=1)
        self.grid_rowconfigure(1, weight=0)

        self._viewer = ComparerView(self)
        self._viewer.grid(row=0, column=0, sticky="nsew", padx=(12, 6), pady=(12, 6))

        self._sidebar = Sidebar(self)
        self._sidebar.grid(row=0, column=1, sticky="ns", padx=(6, 12), pady=(12, 6))

        self._bottom = BottomBar(self, sensitivity_max=config.sensitivity_max)
        self._bottom.grid(row=1, column=0, columnspan=2, sticky="ew", padx=12, pady=(0, 12))

        self._comparison = ComparisonController(config=config, async_diff=True)
        self._controller = AppController(
            viewer=self._viewer,
            sidebar=self._sidebar,
            bottom=self._bottom,
            window=self,
            comparison=self._comparison,
        )
        self._controller.bind_events()
        self.protocol("WM_DELETE_WINDOW", self._on_close)

    def open_paths(self, previous: Optional[Path], current: Optional[Path]) -> None:
        self._controller.open_paths(previous, current)

    def _on_close(self) -> None:
        self._comparison.close()
        self.destroy()
