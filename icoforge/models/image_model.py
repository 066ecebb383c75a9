"""Модели данных для изображений иконки.

Принципы:
- SRP: только структура данных, без логики обработки.
- Чистый код: неизменяемость (`frozen=True`) для предсказуемости.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

# Fixed catalog; order defines directory order in the container.
ICON_SIZES: Tuple[int, ...] = (16, 32, 48, 64, 128, 256)

BYTES_PER_PIXEL = 4


@dataclass(frozen=True)
class SourceImage:
    """Неизменяемое исходное изображение.

    Fields:
        width: Ширина, px.
        height: Высота, px.
        pixels: RGBA, 8 бит на канал, построчно сверху вниз.
        premultiplied: True, если цвет уже умножен на альфу.
    """
    width: int
    height: int
    pixels: bytes
    premultiplied: bool = False


@dataclass(frozen=True)
class RenderedImage:
    """Квадратное изображение целевого размера (RGBA, straight alpha, сверху вниз)."""
    width: int
    height: int
    pixels: bytes

    @property
    def expected_length(self) -> int:
        return self.width * self.height * BYTES_PER_PIXEL


class PayloadKind(Enum):
    BITMAP = "bitmap"  # BITMAPINFOHEADER + BGRA rows + AND mask
    PNG = "png"


@dataclass(frozen=True)
class ImagePayload:
    """Готовые байты одного изображения внутри контейнера."""
    kind: PayloadKind
    data: bytes

    @property
    def length(self) -> int:
        return len(self.data)
