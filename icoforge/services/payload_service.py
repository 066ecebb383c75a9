"""Сборка полезной нагрузки одного изображения иконки.

Два представления:
- BITMAP: BITMAPINFOHEADER (40 байт) + строки BGRA снизу вверх + AND-маска.
- PNG: изображение целиком, закодированное без потерь (только для 256x256).

AND-маска всегда нулевая (полностью "непрозрачная"): прозрачность несёт
альфа-канал цветовых данных, маска нужна старым читателям формата.
"""
from __future__ import annotations

import io
import struct

import numpy as np
from PIL import Image

from icoforge.logger import log
from icoforge.models.errors import EncodeError
from icoforge.models.image_model import BYTES_PER_PIXEL, ImagePayload, PayloadKind, RenderedImage

BITMAP_HEADER_SIZE = 40
PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"

# biSize, biWidth, biHeight, biPlanes, biBitCount, biCompression, biSizeImage,
# biXPelsPerMeter, biYPelsPerMeter, biClrUsed, biClrImportant
_BITMAP_HEADER = struct.Struct("<IiiHHIIiiII")


def mask_row_bytes(width: int) -> int:
    """Длина строки AND-маски: 1 бит на пиксель, выравнивание по 4 байтам."""
    return (width + 31) // 32 * 4


class PayloadService:
    def __init__(self, png_min_size: int = 256) -> None:
        self._png_min_size = png_min_size

    def build_payload(self, image: RenderedImage) -> ImagePayload:
        """
        Выбирает представление по размеру и собирает байты.

        Raises:
            ValueError: длина буфера не равна width*height*4 (нарушение контракта).
            EncodeError: PNG-кодировщик не справился.
        """
        if image.width <= 0 or image.height <= 0:
            raise ValueError(f"Недопустимые размеры: {image.width}x{image.height}")
        if len(image.pixels) != image.expected_length:
            raise ValueError(
                f"Буфер {len(image.pixels)} байт не совпадает с "
                f"{image.width}x{image.height}x{BYTES_PER_PIXEL}={image.expected_length}"
            )

        if image.width >= self._png_min_size and image.height >= self._png_min_size:
            payload = ImagePayload(kind=PayloadKind.PNG, data=self._build_png(image))
        else:
            payload = ImagePayload(kind=PayloadKind.BITMAP, data=self._build_bitmap(image))
        log.debug("Built %s payload for %dx%d: %d bytes", payload.kind.value, image.width, image.height, payload.length)
        return payload

    # ---------- PNG ----------
    def _build_png(self, image: RenderedImage) -> bytes:
        buf = io.BytesIO()
        try:
            pil_image = Image.frombytes("RGBA", (image.width, image.height), image.pixels)
            pil_image.save(buf, format="PNG")
        except (OSError, ValueError) as exc:
            raise EncodeError(f"Не удалось закодировать PNG {image.width}x{image.height}: {exc}") from exc
        return buf.getvalue()

    # ---------- BMP + AND mask ----------
    def _build_bitmap(self, image: RenderedImage) -> bytes:
        width, height = image.width, image.height
        xor_size = width * height * BYTES_PER_PIXEL

        header = _BITMAP_HEADER.pack(
            BITMAP_HEADER_SIZE,
            width,
            height * 2,  # XOR + AND stacked
            1,
            32,
            0,
            xor_size,
            0, 0, 0, 0,
        )

        rgba = np.frombuffer(image.pixels, dtype=np.uint8).reshape(height, width, BYTES_PER_PIXEL)
        # RGBA -> BGRA, rows bottom-up
        bgra = rgba[::-1, :, [2, 1, 0, 3]]
        color = np.ascontiguousarray(bgra).tobytes()
        assert len(color) == xor_size

        mask = bytes(mask_row_bytes(width) * height)
        return header + color + mask
