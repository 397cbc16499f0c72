from __future__ import annotations

import logging
from typing import Tuple

import numpy as np

from visidiff.models.diff_model import DiffResult
from visidiff.models.image_model import DecodedImage

logger = logging.getLogger(__name__)

HIGHLIGHT_RGBA: Tuple[int, int, int, int] = (255, 0, 255, 255)


class DiffService:
    def __init__(self, highlight_rgba: Tuple[int, int, int, int] = HIGHLIGHT_RGBA) -> None:
        self._highlight = np.array(highlight_rgba, dtype=np.uint8)

    def compute_pixel_diff(self, previous: DecodedImage, current: DecodedImage, sensitivity: int) -> DiffResult:
        """
        Попиксельное сравнение двух растров в области их перекрытия.

        - Выход имеет размер (min ширин, min высот); пиксели вне перекрытия не рассматриваются.
        - Расстояние: среднее абсолютных разностей R, G, B (альфа игнорируется).
        - Расстояние строго больше `sensitivity` -> пиксель изменён и закрашивается цветом подсветки.
        - Иначе пиксель серый: яркость текущего изображения, приглушённая вдвое; A=255.

        Функция чистая: входы не изменяются, результат строится заново при каждом вызове.
        """
        out_w = min(previous.width, current.width)
        out_h = min(previous.height, current.height)

        # each input is sliced with its own stride; numpy views keep the original row length
        prev_rgb = previous.pixels[:out_h, :out_w, :3].astype(np.int32)
        cur_rgb = current.pixels[:out_h, :out_w, :3].astype(np.int32)

        # d = sum/3 > s  <=>  sum > 3*s, без деления и погрешностей float
        channel_sum = np.abs(prev_rgb - cur_rgb).sum(axis=2)
        changed = channel_sum > 3 * sensitivity

        out = np.empty((out_h, out_w, 4), dtype=np.uint8)
        out[..., :3] = self._dimmed_gray(cur_rgb)[..., np.newaxis]
        out[..., 3] = 255
        out[changed] = self._highlight
        out.flags.writeable = False

        changed_count = int(np.count_nonzero(changed))
        total = out_w * out_h
        logger.debug(
            "Pixel diff %dx%d vs %dx%d at sensitivity %s: %d/%d changed",
            previous.width, previous.height, current.width, current.height,
            sensitivity, changed_count, total,
        )
        return DiffResult(
            image=DecodedImage(width=out_w, height=out_h, pixels=out),
            changed_pixel_count=changed_count,
            total_pixel_count=total,
        )

    # ---------- Вспомогательные функции ----------
    def _dimmed_gray(self, rgb: np.ndarray) -> np.ndarray:
        """
        Яркость по весам BT.601, округлённая «половина вверх», затем делённая на 2 с отбрасыванием дробной части.
        """
        lum = 0.299 * rgb[..., 0] + 0.587 * rgb[..., 1] + 0.114 * rgb[..., 2]
        lum_rounded = np.floor(lum + 0.5).astype(np.int32)
        return (lum_rounded // 2).astype(np.uint8)
