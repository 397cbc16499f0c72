"""Композитор: состояние сессии -> описание вида и его растеризация средствами PIL.

Принципы:
- SRP: сам не сравнивает пиксели, режим Diff делегирует `DiffService`.
- Чистый код: режим выбирается только по `session.view_mode`; параметры сессии не изменяются.
"""
from __future__ import annotations

from typing import Optional, Tuple

from PIL import Image, ImageOps

from visidiff.models.diff_model import DiffResult
from visidiff.models.image_model import DecodedImage
from visidiff.models.session_model import ComparisonSession, PresentationState, ViewMode
from visidiff.models.view_model import (
    DeletedView,
    DiffView,
    EmptyView,
    NewFileView,
    OnionSkinView,
    SideBySideView,
    View,
    ViewTransform,
)
from visidiff.services.diff_service import DiffService

Size = Tuple[int, int]

TRANSPARENT = (0, 0, 0, 0)


class CompositorService:
    def __init__(self, diff_service: Optional[DiffService] = None, panel_gap: int = 16) -> None:
        self._diff_service = diff_service or DiffService()
        self._panel_gap = panel_gap

    @property
    def panel_gap(self) -> int:
        return self._panel_gap

    # ---------- Описание вида ----------
    def compose(
        self,
        session: ComparisonSession,
        viewport: Size,
        diff_result: Optional[DiffResult] = None,
        compute_diff: bool = True,
        diff_error: Optional[str] = None,
    ) -> View:
        """
        Строит описание для активного состояния/режима.

        В режиме Diff использует готовый `diff_result`; если его нет и `compute_diff`
        истинно, считает diff синхронно. `diff_error` попадает в `DiffView`, если
        фоновый пересчёт завершился ошибкой. В остальных режимах diff не считается никогда.
        """
        state = session.state
        if state is PresentationState.EMPTY:
            return EmptyView()
        if state is PresentationState.NEW_FILE:
            return NewFileView(current=session.current)
        if state is PresentationState.DELETED:
            return DeletedView(previous=session.previous)

        if session.view_mode is ViewMode.SIDE_BY_SIDE:
            return SideBySideView(previous=session.previous, current=session.current)
        if session.view_mode is ViewMode.DIFF:
            if diff_result is None and diff_error is None and compute_diff:
                diff_result = self._diff_service.compute_pixel_diff(
                    session.previous, session.current, session.sensitivity
                )
            return DiffView(sensitivity=session.sensitivity, result=diff_result, error=diff_error)
        return OnionSkinView(
            previous=session.previous,
            current=session.current,
            opacity=session.opacity,
            zoom=session.zoom,
            transform=self.view_transform(session, viewport),
        )

    def view_transform(self, session: ComparisonSession, viewport: Size) -> ViewTransform:
        vw, vh = viewport
        return ViewTransform(scale=session.zoom / 100.0, center=(vw / 2.0, vh / 2.0), pan=session.pan)

    # ---------- Растеризация ----------
    def render(self, view: View, viewport: Size) -> Optional[Image.Image]:
        """Рисует описание в изображение RGBA; для `EmptyView` и незавершённого diff — None."""
        if isinstance(view, OnionSkinView):
            return self.render_onion_skin(view, viewport)
        if isinstance(view, SideBySideView):
            return self.render_side_by_side(view, viewport)
        if isinstance(view, DiffView):
            return view.result.image.to_pil() if view.result is not None else None
        if isinstance(view, NewFileView):
            return self._fit(view.current.to_pil(), viewport)
        if isinstance(view, DeletedView):
            source = view.previous.to_pil()
            gray = ImageOps.grayscale(source).convert("RGBA")
            gray.putalpha(source.getchannel("A"))
            return self._fit(gray, viewport)
        return None

    def render_onion_skin(self, view: OnionSkinView, viewport: Size) -> Image.Image:
        """
        `previous` — базовый слой, `current` — поверх с альфой `opacity/100`.
        Оба слоя проходят одно и то же преобразование, поэтому остаются совмещёнными попиксельно.
        """
        resample = Image.Resampling.NEAREST if view.zoom >= 100 else Image.Resampling.BILINEAR
        coeffs = view.transform.pil_affine()
        base = self._layer(view.previous, viewport).transform(
            viewport, Image.Transform.AFFINE, coeffs, resample=resample
        )
        overlay = self._layer(view.current, viewport).transform(
            viewport, Image.Transform.AFFINE, coeffs, resample=resample
        )
        if view.opacity < 100:
            alpha = overlay.getchannel("A").point(lambda a: a * view.opacity // 100)
            overlay.putalpha(alpha)
        return Image.alpha_composite(base, overlay)

    def render_side_by_side(self, view: SideBySideView, viewport: Size) -> Image.Image:
        """Две панели одинаковой ширины без общего преобразования и смешивания."""
        panel = self.panel_size(viewport)
        vw, vh = viewport
        canvas = Image.new("RGBA", (max(1, vw), max(1, vh)), TRANSPARENT)
        for index, image in enumerate((view.previous, view.current)):
            fitted = self._fit(image.to_pil(), panel)
            left = index * (panel[0] + self._panel_gap)
            x = left + (panel[0] - fitted.width) // 2
            y = (panel[1] - fitted.height) // 2
            canvas.alpha_composite(fitted, (x, y))
        return canvas

    def panel_size(self, viewport: Size) -> Size:
        vw, vh = viewport
        return max(1, (vw - self._panel_gap) // 2), max(1, vh)

    # ---------- Вспомогательные функции ----------
    def _layer(self, image: DecodedImage, viewport: Size) -> Image.Image:
        """Изображение, вписанное в окно и отцентрированное на прозрачном холсте размера окна."""
        vw, vh = viewport
        canvas = Image.new("RGBA", (max(1, vw), max(1, vh)), TRANSPARENT)
        fitted = self._fit(image.to_pil(), viewport)
        canvas.alpha_composite(fitted, ((canvas.width - fitted.width) // 2, (canvas.height - fitted.height) // 2))
        return canvas

    def _fit(self, image: Image.Image, box: Size) -> Image.Image:
        return ImageOps.contain(image, (max(1, box[0]), max(1, box[1])), method=Image.Resampling.LANCZOS)
