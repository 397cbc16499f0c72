"""Конвейер «декодировать пару -> посчитать diff» с отбрасыванием устаревших результатов.

Каждый запрос получает монотонно растущий идентификатор. Результат применяется,
только если его идентификатор совпадает с последним выданным (last-request-wins);
иначе он молча отбрасывается. Отмена самого декодирования не нужна.
"""
from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional, Tuple

from visidiff.models.diff_model import DiffResult
from visidiff.models.image_model import DecodedImage
from visidiff.services.diff_service import DiffService

logger = logging.getLogger(__name__)

DecodeFn = Callable[[], DecodedImage]
ResultCallback = Callable[[int, DiffResult], None]


class DiffPipeline:
    def __init__(self, diff_service: Optional[DiffService] = None) -> None:
        self._diff_service = diff_service or DiffService()
        self._lock = threading.Lock()
        self._request_id = 0
        self._resolved_id = 0
        self._executor: Optional[ThreadPoolExecutor] = None

    def __enter__(self) -> DiffPipeline:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    @property
    def latest_request_id(self) -> int:
        with self._lock:
            return self._request_id

    @property
    def is_pending(self) -> bool:
        """Есть ли выданный запрос, для которого результат ещё не применён."""
        with self._lock:
            return self._resolved_id != self._request_id

    def request(self) -> int:
        """Выдаёт новый идентификатор; все ранее выданные становятся устаревшими."""
        with self._lock:
            self._request_id += 1
            return self._request_id

    def is_current(self, request_id: int) -> bool:
        with self._lock:
            return request_id == self._request_id

    def complete(
        self,
        request_id: int,
        previous: DecodedImage,
        current: DecodedImage,
        sensitivity: int,
    ) -> Optional[DiffResult]:
        """Оба операнда декодированы: считает diff, если запрос ещё актуален.

        Returns:
            `DiffResult` или `None`, если запрос устарел (до или во время вычисления).
        """
        if not self.is_current(request_id):
            logger.debug("Discarding stale diff request %d before compute", request_id)
            return None

        result = self._diff_service.compute_pixel_diff(previous, current, sensitivity)

        with self._lock:
            if request_id != self._request_id:
                logger.debug("Discarding stale diff request %d after compute", request_id)
                return None
            self._resolved_id = request_id
        return result

    def submit(
        self,
        decode_previous: DecodeFn,
        decode_current: DecodeFn,
        sensitivity: int,
        on_result: ResultCallback,
    ) -> Tuple[int, Future]:
        """Асинхронно декодирует пару и считает diff в фоновом потоке.

        `on_result` вызывается из рабочего потока и только для актуального запроса.
        Ошибка декодирования пробрасывается через возвращаемый `Future`.

        Returns:
            Идентификатор запроса и `Future` с результатом (None для устаревшего).
        """
        request_id = self.request()
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="visidiff-diff")
            executor = self._executor
        future = executor.submit(self._run, request_id, decode_previous, decode_current, sensitivity, on_result)
        return request_id, future

    def close(self) -> None:
        with self._lock:
            executor = self._executor
            self._executor = None
        if executor is not None:
            executor.shutdown(wait=True)

    def _run(
        self,
        request_id: int,
        decode_previous: DecodeFn,
        decode_current: DecodeFn,
        sensitivity: int,
        on_result: ResultCallback,
    ) -> Optional[DiffResult]:
        previous = decode_previous()
        current = decode_current()
        result = self.complete(request_id, previous, current, sensitivity)
        if result is not None:
            on_result(request_id, result)
        return result
