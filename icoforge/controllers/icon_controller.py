"""Контроллер конвертации: оркестрация сервисов от источника до байтов ICO.

SOLID:
- SRP: класс связывает сервисы и отвечает за запись результата; логики
  масштабирования и формата здесь нет.
- DIP: сервисы подставляются полями dataclass, по умолчанию строятся из опций.
Clean Code:
- UI вызывает одну функцию `convert(...)` и получает `ConversionResult`.
"""
from __future__ import annotations

import os
import tempfile
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from icoforge.config import ConversionOptions
from icoforge.logger import log
from icoforge.models.errors import IconError, IconWriteError
from icoforge.models.image_model import ImagePayload, SourceImage
from icoforge.models.result_model import ConversionResult
from icoforge.services.container_service import ContainerService
from icoforge.services.image_service import ImageService, ImageSource
from icoforge.services.payload_service import PayloadService
from icoforge.services.resample_service import ResampleService

ICON_SUFFIX = ".ico"
ICON_SUBDIR = "icon"


@dataclass
class IconController:
    """Конвейер источник -> размеры -> нагрузки -> контейнер.

    Ответственности:
    - Декодирование источника через `ImageService`.
    - Рендер каждого размера каталога (`ResampleService` + `PayloadService`).
    - Сборка файла через `ContainerService` и атомарная запись на диск.
    """
    options: ConversionOptions = field(default_factory=ConversionOptions)

    _image_service: ImageService = field(default_factory=ImageService)
    _resample_service: Optional[ResampleService] = None
    _payload_service: Optional[PayloadService] = None
    _container_service: ContainerService = field(default_factory=ContainerService)

    def __post_init__(self) -> None:
        if self._resample_service is None:
            self._resample_service = ResampleService(resample=self.options.resample)
        if self._payload_service is None:
            self._payload_service = PayloadService(png_min_size=self.options.png_min_size)

    # ---- Public API ----
    def encode(self, source: ImageSource) -> bytes:
        """Конвертирует источник в байты ICO; ошибки поднимаются как `IconError`."""
        image = self._image_service.load(source)
        entries = self._render_all(image)
        return self._container_service.serialize(entries)

    def convert(self, source: ImageSource) -> ConversionResult:
        """Как `encode`, но ошибка конвертации возвращается в результате."""
        try:
            data = self.encode(source)
        except IconError as exc:
            log.error("Conversion failed: %s", exc)
            return ConversionResult(error=exc)
        log.info("Icon built: %d sizes, %d bytes", len(self.options.sizes), len(data))
        return ConversionResult(data=data)

    def save(self, source: ImageSource, destination: str | Path) -> ConversionResult:
        """Конвертирует и атомарно записывает файл.

        Каталог назначения должен существовать: его выбор и создание остаются
        за вызывающей стороной. При любой ошибке файл назначения не появляется.
        """
        result = self.convert(source)
        if not result.ok:
            return result

        path = Path(destination)
        try:
            write_atomic(path, result.data)
        except IconWriteError as exc:
            log.error("Write failed: %s", exc)
            return ConversionResult(error=exc)
        log.info("Icon saved: %s", path)
        return ConversionResult(data=result.data, path=path)

    # ---- Helpers ----
    def _render_entry(self, image: SourceImage, size: int) -> Tuple[int, ImagePayload]:
        rendered = self._resample_service.resample(image, size)
        return size, self._payload_service.build_payload(rendered)

    def _render_all(self, image: SourceImage) -> List[Tuple[int, ImagePayload]]:
        sizes = self.options.sizes
        if self.options.max_workers > 1:
            # Executor.map yields in submission order, i.e. catalog order
            with ThreadPoolExecutor(max_workers=self.options.max_workers) as pool:
                return list(pool.map(lambda size: self._render_entry(image, size), sizes))
        return [self._render_entry(image, size) for size in sizes]


def _default_file_mode() -> int:
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def write_atomic(path: Path, data: bytes) -> None:
    """Пишет во временный файл рядом с `path` и заменяет им `path`.

    Raises:
        IconWriteError: каталог не существует, нет прав, диск заполнен и т.п.
    """
    path = Path(path)
    tmp_name: Optional[str] = None
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
            fh.flush()
            os.fsync(fh.fileno())
        # mkstemp creates 0600; match what a plain open() would produce
        os.chmod(tmp_name, _default_file_mode())
        os.replace(tmp_name, path)
        tmp_name = None
    except OSError as exc:
        raise IconWriteError(f"Не удалось записать {path}: {exc}") from exc
    finally:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)


def default_icon_path(source_path: str | Path) -> Path:
    """`<каталог источника>/icon/<имя>.ico`; сам каталог не создаётся."""
    source_path = Path(source_path)
    return source_path.parent / ICON_SUBDIR / (source_path.stem + ICON_SUFFIX)


def convert(source: ImageSource, options: Optional[ConversionOptions] = None) -> ConversionResult:
    """Единственная точка входа для UI: источник -> байты ICO или ошибка."""
    return IconController(options=options or ConversionOptions()).convert(source)


def save(
    source: ImageSource,
    destination: str | Path,
    options: Optional[ConversionOptions] = None,
) -> ConversionResult:
    return IconController(options=options or ConversionOptions()).save(source, destination)
