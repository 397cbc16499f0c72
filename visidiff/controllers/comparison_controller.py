"""Контроллер сравнения: оркестрация сессии, декодирования, композитора и diff.

SOLID:
- SRP: связывает модели и сервисы, не зная ничего о виджетах.
- DIP: UI общается только с этим классом и получает готовые описания видов.
Clean Code:
- Diff пересчитывается только при смене пары, смене порога или входе в режим Diff.
"""
from __future__ import annotations

import logging
from concurrent.futures import Future
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from visidiff.config import DEFAULT_CONFIG, ComparerConfig
from visidiff.models.diff_model import DiffResult
from visidiff.models.image_model import DecodedImage, ImageData
from visidiff.models.session_model import ComparisonSession, PanGesture, PresentationState, ViewMode
from visidiff.models.view_model import View
from visidiff.services.compositor_service import CompositorService
from visidiff.services.diff_pipeline import DiffPipeline
from visidiff.services.diff_service import DiffService
from visidiff.services.image_service import DecodeError, ImageService

logger = logging.getLogger(__name__)

Size = Tuple[int, int]


@dataclass
class ComparisonController:
    """Единая точка входа для слоя представления.

    Ответственности:
    - Приём пары изображений (байты, пути или готовые растры) и обработка отсутствия сторон.
    - Проброс действий пользователя в `ComparisonSession`.
    - Управление жизненным циклом `DiffResult` (кэш последнего результата, устаревание).
    - Выдача описания вида для текущего состояния.
    """
    config: ComparerConfig = DEFAULT_CONFIG
    viewport: Size = (800, 600)
    async_diff: bool = False
    on_diff_ready: Optional[Callable[[], None]] = None
    schedule: Optional[Callable[[Callable[[], None]], None]] = None

    session: ComparisonSession = field(init=False)
    notices: List[str] = field(init=False, default_factory=list)
    previous_info: Optional[ImageData] = field(init=False, default=None)
    current_info: Optional[ImageData] = field(init=False, default=None)

    _image_service: ImageService = field(init=False, repr=False)
    _pipeline: DiffPipeline = field(init=False, repr=False)
    _compositor: CompositorService = field(init=False, repr=False)
    # result is kept together with the request id it was computed for
    _diff: Optional[Tuple[int, DiffResult]] = field(init=False, default=None, repr=False)
    _failed: Optional[Tuple[int, str]] = field(init=False, default=None, repr=False)
    _gesture: Optional[PanGesture] = field(init=False, default=None, repr=False)
    _inflight_id: Optional[int] = field(init=False, default=None, repr=False)

    def __post_init__(self) -> None:
        diff_service = DiffService(highlight_rgba=self.config.highlight_rgba)
        self.session = ComparisonSession(config=self.config)
        self._image_service = ImageService()
        self._pipeline = DiffPipeline(diff_service)
        self._compositor = CompositorService(diff_service, panel_gap=self.config.panel_gap)

    @property
    def state(self) -> PresentationState:
        return self.session.state

    @property
    def compositor(self) -> CompositorService:
        return self._compositor

    @property
    def diff_result(self) -> Optional[DiffResult]:
        """Результат diff для текущих входов; устаревший результат не возвращается."""
        cached = self._diff
        if cached is None or not self._pipeline.is_current(cached[0]):
            return None
        return cached[1]

    @property
    def diff_error(self) -> Optional[str]:
        failed = self._failed
        if failed is None or not self._pipeline.is_current(failed[0]):
            return None
        return failed[1]

    # ---- Input: image pair ----
    def load_pair(
        self,
        previous_raw: Optional[bytes],
        current_raw: Optional[bytes],
        previous_name: Optional[str] = None,
        current_name: Optional[str] = None,
    ) -> PresentationState:
        """Декодирует обе стороны; `None` означает отсутствие стороны (файл добавлен/удалён).

        Ошибка декодирования не пробрасывается: сторона считается отсутствующей,
        а в `notices` добавляется сообщение для пользователя.
        """
        self.notices.clear()
        prev_info = self._decode_side(previous_raw, previous_name or "previous")
        cur_info = self._decode_side(current_raw, current_name or "current")
        return self._apply_pair(prev_info, cur_info)

    def load_files(
        self,
        previous_path: Optional[str | Path],
        current_path: Optional[str | Path],
    ) -> PresentationState:
        """Загружает стороны с диска; отсутствующий файл трактуется как отсутствующая сторона."""
        self.notices.clear()
        prev_info = self._load_side(previous_path)
        cur_info = self._load_side(current_path)
        return self._apply_pair(prev_info, cur_info)

    def set_images(self, previous: Optional[DecodedImage], current: Optional[DecodedImage]) -> PresentationState:
        """Принимает уже декодированные растры (декодер на стороне вызывающего)."""
        before = (self.session.previous, self.session.current)
        self.session.set_images(previous, current)
        if (previous, current) != before:
            self._invalidate_diff()
        return self.session.state

    # ---- Input: view mode & controls ----
    def set_view_mode(self, mode: ViewMode) -> None:
        self.session.set_view_mode(mode)
        if self._gesture is not None and self.session.view_mode is not ViewMode.ONION_SKIN:
            self._gesture = None

    def set_opacity(self, value: float) -> None:
        self.session.set_opacity(value)

    def zoom_in(self) -> None:
        self.session.zoom_in()

    def zoom_out(self) -> None:
        self.session.zoom_out()

    def fit(self) -> None:
        self.session.reset_zoom_and_pan()

    def actual_size(self) -> None:
        self.session.reset_zoom_only()

    def begin_pan(self) -> None:
        if self.session.view_mode is ViewMode.ONION_SKIN and self.session.has_pair:
            self._gesture = self.session.begin_pan()

    def drag_pan(self, dx: float, dy: float) -> None:
        """`dx`, `dy` — суммарное смещение указателя от точки нажатия."""
        if self._gesture is None:
            return
        self._gesture = self._gesture.moved_to(dx, dy)
        self.session.set_pan(*self._gesture.pan)

    def end_pan(self) -> None:
        self._gesture = None

    def set_sensitivity(self, value: float) -> None:
        old = self.session.sensitivity
        self.session.set_sensitivity(value)
        if self.session.sensitivity != old:
            self._invalidate_diff()

    def set_viewport(self, width: int, height: int) -> None:
        self.viewport = (max(1, int(width)), max(1, int(height)))

    # ---- Output ----
    def view(self) -> View:
        """Описание вида для текущего состояния; при необходимости запускает пересчёт diff."""
        if self.session.has_pair and self.session.view_mode is ViewMode.DIFF and self.diff_result is None:
            self._refresh_diff()
        return self._compositor.compose(
            self.session,
            self.viewport,
            self.diff_result,
            compute_diff=False,
            diff_error=self.diff_error,
        )

    def diff_summary(self) -> Optional[str]:
        result = self.diff_result
        if result is None:
            return None
        return (
            f"{result.changed_pixel_count:,} / {result.total_pixel_count:,} px изменено "
            f"({result.change_ratio:.2%})"
        )

    def close(self) -> None:
        self._pipeline.close()

    # ---- Diff lifecycle ----
    def apply_diff_result(self, request_id: int, result: DiffResult) -> bool:
        """Применяет результат фонового пересчёта, если он всё ещё актуален.

        Результат хранится вместе со своим идентификатором запроса, поэтому даже
        записанный после смены входов он не попадёт в вид: `diff_result` сверяет
        идентификатор с последним выданным.
        """
        if not self._pipeline.is_current(request_id):
            logger.debug("Dropping diff result %d: inputs changed", request_id)
            return False
        self._diff = (request_id, result)
        return True

    def _refresh_diff(self) -> None:
        previous, current = self.session.previous, self.session.current
        sensitivity = self.session.sensitivity
        if self.async_diff:
            if self.diff_error is not None:
                # retried only after the inputs change
                return
            if self._inflight_id is not None and self._pipeline.is_current(self._inflight_id):
                return
            request_id, future = self._pipeline.submit(
                lambda: previous, lambda: current, sensitivity, self._on_async_result
            )
            self._inflight_id = request_id
            future.add_done_callback(lambda done: self._on_diff_done(request_id, done))
            return
        request_id = self._pipeline.request()
        result = self._pipeline.complete(request_id, previous, current, sensitivity)
        if result is not None:
            self._diff = (request_id, result)

    def _on_async_result(self, request_id: int, result: DiffResult) -> None:
        # called on the worker thread
        self._deliver(lambda: self._finish_diff(request_id, result))

    def _on_diff_done(self, request_id: int, future: Future) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            self._deliver(lambda: self._fail_diff(request_id, exc))

    def _finish_diff(self, request_id: int, result: DiffResult) -> None:
        if self.apply_diff_result(request_id, result) and self.on_diff_ready is not None:
            self.on_diff_ready()

    def _fail_diff(self, request_id: int, exc: BaseException) -> None:
        logger.error("Diff request %d failed", request_id, exc_info=exc)
        if self._inflight_id == request_id:
            self._inflight_id = None
        if not self._pipeline.is_current(request_id):
            return
        message = f"Не удалось вычислить различия: {exc!r}"
        self._failed = (request_id, message)
        self.notices.append(message)
        if self.on_diff_ready is not None:
            self.on_diff_ready()

    def _deliver(self, action: Callable[[], None]) -> None:
        """Передаёт действие в поток UI через `schedule`; без него выполняет сразу."""
        if self.schedule is None:
            action()
        else:
            self.schedule(action)

    def _invalidate_diff(self) -> None:
        self._diff = None
        self._failed = None
        # a fresh id makes any in-flight computation stale
        self._pipeline.request()

    # ---- Helpers ----
    def _apply_pair(self, prev_info: Optional[ImageData], cur_info: Optional[ImageData]) -> PresentationState:
        self.previous_info = prev_info
        self.current_info = cur_info
        self._gesture = None
        state = self.set_images(
            prev_info.image if prev_info is not None else None,
            cur_info.image if cur_info is not None else None,
        )
        logger.info("Comparison state: %s", state.value)
        return state

    def _decode_side(self, raw: Optional[bytes], name: str) -> Optional[ImageData]:
        if raw is None:
            return None
        try:
            return self._image_service.decode(raw)
        except DecodeError as exc:
            logger.warning("Could not decode %s image: %s", name, exc)
            self.notices.append(f"Не удалось декодировать {name}: {exc}")
            return None

    def _load_side(self, path: Optional[str | Path]) -> Optional[ImageData]:
        if path is None:
            return None
        try:
            return self._image_service.load_image(path)
        except FileNotFoundError:
            logger.info("No file at %s, treating side as absent", path)
            return None
        except DecodeError as exc:
            logger.warning("Could not decode %s: %s", path, exc)
            self.notices.append(str(exc))
            return None
