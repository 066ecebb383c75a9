"""Результат конвертации: либо байты файла, либо ошибка."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from icoforge.models.errors import IconError


@dataclass(frozen=True)
class ConversionResult:
    """Fields:
        data: Байты ICO при успехе.
        error: Ошибка конвертации при неудаче.
        path: Куда записан файл (только для `save`).
    """
    data: Optional[bytes] = None
    error: Optional[IconError] = None
    path: Optional[Path] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.data is not None

    def unwrap(self) -> bytes:
        """Возвращает байты или поднимает сохранённую ошибку."""
        if self.error is not None:
            raise self.error
        if self.data is None:
            raise ValueError("Результат не содержит ни данных, ни ошибки")
        return self.data
