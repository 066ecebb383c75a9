"""Ошибки конвертации.

Все ошибки наследуются от `IconError`, поэтому вызывающий код (UI) может
перехватывать одно исключение и показывать пользователю `str(exc)`.
"""
from __future__ import annotations


class IconError(Exception):
    """Базовая ошибка конвертации в иконку."""


class DecodeError(IconError, ValueError):
    """Источник не удалось прочитать или декодировать."""


class InvalidDimensionsError(IconError, ValueError):
    """Нулевые/отрицательные размеры или буфер не совпадает с размерами."""


class EncodeError(IconError):
    """Ошибка PNG-кодировщика для записи 256x256."""


class IconWriteError(IconError, OSError):
    """Файл назначения не удалось создать или записать."""
