"""Сериализация контейнера ICO: заголовок, каталог, полезные нагрузки.

Чистое детерминированное преобразование: одинаковый вход даёт одинаковые байты.
"""
from __future__ import annotations

import struct
from typing import List, Sequence, Tuple

from icoforge.logger import log
from icoforge.models.image_model import ImagePayload

ICON_TYPE = 1
MAX_ENTRY_SIZE = 256

_HEADER = struct.Struct("<HHH")          # reserved, type, count
_ENTRY = struct.Struct("<BBBBHHII")      # w, h, colors, reserved, planes, bpp, length, offset

HEADER_SIZE = _HEADER.size               # 6
ENTRY_SIZE = _ENTRY.size                 # 16


def size_byte(size: int) -> int:
    """Размер стороны в байте каталога: 256 и больше записываются как 0."""
    return 0 if size >= MAX_ENTRY_SIZE else size


class ContainerService:
    def compute_offsets(self, lengths: Sequence[int]) -> List[int]:
        """Абсолютные смещения нагрузок: 6 + 16*N + сумма предыдущих длин."""
        offset = HEADER_SIZE + ENTRY_SIZE * len(lengths)
        offsets: List[int] = []
        for length in lengths:
            offsets.append(offset)
            offset += length
        return offsets

    def serialize(self, entries: Sequence[Tuple[int, ImagePayload]]) -> bytes:
        """
        Собирает файл ICO из упорядоченных пар (размер, нагрузка).
        Порядок каталога и нагрузок совпадает с порядком входа.
        """
        if not entries:
            raise ValueError("Контейнер должен содержать хотя бы одно изображение")
        for size, _payload in entries:
            if not 1 <= size <= MAX_ENTRY_SIZE:
                raise ValueError(f"Размер {size} вне диапазона 1..{MAX_ENTRY_SIZE}")

        count = len(entries)
        offsets = self.compute_offsets([payload.length for _size, payload in entries])

        parts = [_HEADER.pack(0, ICON_TYPE, count)]
        for (size, payload), offset in zip(entries, offsets):
            parts.append(_ENTRY.pack(
                size_byte(size),
                size_byte(size),
                0,
                0,
                1,
                32,
                payload.length,
                offset,
            ))
        parts.extend(payload.data for _size, payload in entries)

        data = b"".join(parts)
        log.debug("Serialized %d entries, %d bytes", count, len(data))
        return data
