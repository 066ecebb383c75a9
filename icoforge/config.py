"""Параметры конвертации.

Каталог размеров фиксирован (`ICON_SIZES`); опции позволяют лишь выбрать его
подмножество, порядок всегда остаётся каталожным.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from PIL import Image

from icoforge.models.image_model import ICON_SIZES


@dataclass(frozen=True)
class ConversionOptions:
    """Неизменяемые настройки одной конвертации.

    Fields:
        sizes: Подмножество `ICON_SIZES`.
        png_min_size: Изображения не меньше этого размера кодируются в PNG.
        resample: Фильтр Pillow для масштабирования.
        max_workers: при значении больше 1 размеры рендерятся в пуле потоков.
    """
    sizes: Tuple[int, ...] = ICON_SIZES
    png_min_size: int = 256
    resample: Image.Resampling = Image.Resampling.LANCZOS
    max_workers: int = 1

    def __post_init__(self) -> None:
        sizes = tuple(int(s) for s in self.sizes)
        if not sizes:
            raise ValueError("Список размеров пуст")
        unknown = [s for s in sizes if s not in ICON_SIZES]
        if unknown:
            raise ValueError(f"Размеры вне каталога {ICON_SIZES}: {unknown}")
        if len(set(sizes)) != len(sizes):
            raise ValueError(f"Повторяющиеся размеры: {sizes}")
        if self.png_min_size < 1:
            raise ValueError(f"png_min_size должен быть >= 1, получено {self.png_min_size}")
        if self.max_workers < 1:
            raise ValueError(f"max_workers должен быть >= 1, получено {self.max_workers}")
        # keep catalog order regardless of the order given
        object.__setattr__(self, "sizes", tuple(s for s in ICON_SIZES if s in sizes))
