"""Логирование icoforge.

Именованный логгер `icoforge`. По умолчанию к нему подключён только
`NullHandler`: библиотека молчит, пока приложение не вызовет `setup_logger`
(консоль stderr INFO и/или ротируемый файл). Модули импортируют `log`.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOGGER_NAME = "icoforge"


def _add_console_handler(logger: logging.Logger) -> None:
    for handler in logger.handlers:
        if type(handler) is logging.StreamHandler:
            return
    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(logging.INFO)
    ch.setFormatter(logging.Formatter("[%(levelname)-7s] %(funcName)s: %(message)s"))
    logger.addHandler(ch)


def _add_file_handler(logger: logging.Logger, log_file: Path) -> None:
    log_file = Path(log_file)
    for handler in logger.handlers:
        if isinstance(handler, RotatingFileHandler) and Path(handler.baseFilename) == log_file.resolve():
            return
    # 2 MB max, keep 3 backups
    fh = RotatingFileHandler(log_file, maxBytes=2 * 1024 * 1024, backupCount=3, encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)-7s] %(name)s.%(funcName)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    logger.addHandler(fh)


def _get_logger() -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    if not any(isinstance(h, logging.NullHandler) for h in logger.handlers):
        logger.setLevel(logging.DEBUG)
        logger.addHandler(logging.NullHandler())
    return logger


def setup_logger(console: bool = True, log_file: Optional[Path] = None) -> logging.Logger:
    """Подключает обработчики к логгеру приложения (повторный вызов их не дублирует).

    Args:
        console: Писать INFO и выше в stderr.
        log_file: Путь к файлу лога. Если задан, добавляется `RotatingFileHandler`.
    """
    logger = _get_logger()
    if console:
        _add_console_handler(logger)
    if log_file is not None:
        _add_file_handler(logger, log_file)
    return logger


# Module-level logger instance - import this everywhere
log = _get_logger()
