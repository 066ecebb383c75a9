"""Загрузка исходного изображения и упаковка его в `SourceImage`.

Принципы:
- SRP: класс отвечает только за декодирование и проверку размеров.
- OCP: новые источники добавляются отдельными ветками `load`, остальной конвейер их не замечает.
"""
from __future__ import annotations

import io
from pathlib import Path
from typing import BinaryIO, Union

from PIL import Image, UnidentifiedImageError

from icoforge.logger import log
from icoforge.models.errors import DecodeError, InvalidDimensionsError
from icoforge.models.image_model import BYTES_PER_PIXEL, SourceImage

ImageSource = Union[str, Path, bytes, bytearray, memoryview, BinaryIO, Image.Image, SourceImage]


class ImageService:
    def load(self, source: ImageSource) -> SourceImage:
        """Приводит любой поддерживаемый источник к `SourceImage`.

        Args:
            source: Путь, закодированные байты, бинарный поток, `PIL.Image.Image`
                или уже готовый `SourceImage`.

        Raises:
            DecodeError: источник не читается или не является изображением.
            InvalidDimensionsError: ширина или высота не положительны.
        """
        if isinstance(source, SourceImage):
            self._check_dimensions(source.width, source.height)
            self._check_buffer(source.width, source.height, source.pixels)
            return source
        if isinstance(source, Image.Image):
            return self.from_pil(source)
        if isinstance(source, (bytes, bytearray, memoryview)):
            return self.load_bytes(bytes(source))
        if isinstance(source, (str, Path)):
            return self.load_image(source)
        if hasattr(source, "read"):
            return self._decode(source, label="<stream>")
        raise DecodeError(f"Неподдерживаемый источник изображения: {type(source).__name__}")

    def load_image(self, file_path: str | Path) -> SourceImage:
        """Загружает изображение с диска.

        Raises:
            DecodeError: если путь не существует, не указывает на файл или файл не распознан.
        """
        path = Path(file_path)
        if not path.exists() or not path.is_file():
            raise DecodeError(f"Файл не найден: {path}")
        with path.open("rb") as fh:
            return self._decode(fh, label=str(path))

    def load_bytes(self, data: bytes) -> SourceImage:
        if not data:
            raise DecodeError("Пустой буфер изображения")
        return self._decode(io.BytesIO(data), label=f"<{len(data)} bytes>")

    def from_pil(self, image: Image.Image) -> SourceImage:
        """Копирует пиксели PIL-изображения; режим "RGBa" считается premultiplied."""
        width, height = image.size
        self._check_dimensions(width, height)
        if image.mode == "RGBa":
            return SourceImage(width=width, height=height, pixels=image.tobytes(), premultiplied=True)
        rgba = image if image.mode == "RGBA" else image.convert("RGBA")
        return SourceImage(width=width, height=height, pixels=rgba.tobytes(), premultiplied=False)

    def from_pixels(self, width: int, height: int, pixels: bytes, premultiplied: bool = False) -> SourceImage:
        """Оборачивает сырой RGBA-буфер (сверху вниз) в `SourceImage`."""
        self._check_dimensions(width, height)
        data = bytes(pixels)
        self._check_buffer(width, height, data)
        return SourceImage(width=width, height=height, pixels=data, premultiplied=premultiplied)

    # ---- Helpers ----
    def _decode(self, stream: BinaryIO, label: str) -> SourceImage:
        try:
            with Image.open(stream) as pil_image:
                pil_image.load()
                source = self.from_pil(pil_image)
        except UnidentifiedImageError as exc:
            raise DecodeError(f"Файл не является изображением: {label}") from exc
        except Image.DecompressionBombError as exc:
            raise DecodeError(f"Изображение слишком велико для декодирования {label}: {exc}") from exc
        except (OSError, SyntaxError) as exc:
            # truncated or corrupt data surfaces as OSError from the decoder
            raise DecodeError(f"Не удалось декодировать изображение {label}: {exc}") from exc
        log.debug("Decoded %s: %dx%d", label, source.width, source.height)
        return source

    @staticmethod
    def _check_dimensions(width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise InvalidDimensionsError(f"Недопустимые размеры изображения: {width}x{height}")

    @staticmethod
    def _check_buffer(width: int, height: int, pixels: bytes) -> None:
        expected = width * height * BYTES_PER_PIXEL
        if len(pixels) != expected:
            raise InvalidDimensionsError(
                f"Размер буфера {len(pixels)} не совпадает с {width}x{height}x{BYTES_PER_PIXEL}={expected}"
            )
