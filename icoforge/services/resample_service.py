"""Масштабирование источника в квадрат целевого размера.

Пропорции сохраняются, изображение центрируется на прозрачном холсте.
Premultiplied-источник после масштабирования переводится в straight alpha.
"""
from __future__ import annotations

from typing import Tuple

import numpy as np
from PIL import Image

from icoforge.logger import log
from icoforge.models.image_model import BYTES_PER_PIXEL, RenderedImage, SourceImage


def unpremultiply(rgba: np.ndarray) -> np.ndarray:
    """
    Premultiplied RGBA (uint8, (..., 4)) -> straight alpha.
    Для 0 < a < 255: c = min(255, round(c * 255 / a)); a == 0 и a == 255 не меняются.
    Возвращает новый массив, вход не мутируется.
    """
    out = np.array(rgba, dtype=np.uint8, copy=True)
    alpha = out[..., 3].astype(np.uint32)
    partial = (alpha > 0) & (alpha < 255)
    if not partial.any():
        return out

    a = alpha[partial][:, None]
    color = out[..., :3][partial].astype(np.uint32)
    # integer round-half-up of c*255/a
    restored = (color * 255 + a // 2) // a
    out[..., :3][partial] = np.minimum(restored, 255).astype(np.uint8)
    return out


def fit_box(width: int, height: int, size: int) -> Tuple[int, int, int, int]:
    """
    Вписывает width x height в квадрат size x size с сохранением пропорций.
    Возвращает (offset_x, offset_y, draw_w, draw_h).
    """
    scale = min(size / width, size / height)
    draw_w = min(size, max(1, int(round(width * scale))))
    draw_h = min(size, max(1, int(round(height * scale))))
    return (size - draw_w) // 2, (size - draw_h) // 2, draw_w, draw_h


class ResampleService:
    def __init__(self, resample: Image.Resampling = Image.Resampling.LANCZOS) -> None:
        self._resample = resample

    def resample(self, source: SourceImage, size: int) -> RenderedImage:
        """
        Масштабирует источник в квадрат size x size: пропорции сохраняются,
        изображение центрируется, поля полностью прозрачны (0, 0, 0, 0).
        Результат всегда в straight alpha и не разделяет память с источником.
        """
        if size <= 0:
            raise ValueError(f"Размер должен быть положительным: {size}")

        offset_x, offset_y, draw_w, draw_h = fit_box(source.width, source.height, size)

        # RGBa: scale premultiplied data as-is; RGBA: Pillow premultiplies internally
        mode = "RGBa" if source.premultiplied else "RGBA"
        src = Image.frombytes(mode, (source.width, source.height), source.pixels)
        if (draw_w, draw_h) == src.size:
            scaled = src
        else:
            scaled = src.resize((draw_w, draw_h), self._resample)

        canvas = Image.new(mode, (size, size), (0, 0, 0, 0))
        canvas.paste(scaled, (offset_x, offset_y))

        arr = np.frombuffer(canvas.tobytes(), dtype=np.uint8).reshape(size, size, BYTES_PER_PIXEL)
        if source.premultiplied:
            arr = unpremultiply(arr)

        log.debug(
            "Resampled %dx%d -> %dx%d (drawn %dx%d at %d,%d)",
            source.width, source.height, size, size, draw_w, draw_h, offset_x, offset_y,
        )
        return RenderedImage(width=size, height=size, pixels=arr.tobytes())
