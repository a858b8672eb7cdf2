# -*- coding: utf-8 -*-
"""
Logger
======

Thin wrapper around the standard ``logging`` module that adds a ``success``
level and attaches console/file handlers once per logger name.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")

_LOG_FORMAT = "[%(name)s] %(levelname)s: %(message)s"
_FILE_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"
_ROOT_NAMESPACE = "scaffold"

_loggers: dict[str, "Logger"] = {}


def _resolve_level(level: str | int | None) -> int:
    if level is None:
        level = os.getenv("SCAFFOLD_LOG_LEVEL") or "INFO"
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    if not isinstance(resolved, int):
        return logging.INFO
    return resolved


class Logger:
    """Named project logger with a ``success`` level."""

    def __init__(self, name: str, *, log_dir: str | Path | None = None, level: str | int | None = None):
        self.name = name
        self._logger = logging.getLogger(f"{_ROOT_NAMESPACE}.{name}")
        self._logger.setLevel(_resolve_level(level))
        self._logger.propagate = True

        if not self._logger.handlers:
            console = logging.StreamHandler()
            console.setFormatter(logging.Formatter(_LOG_FORMAT))
            self._logger.addHandler(console)

        if log_dir:
            self.add_file_handler(log_dir)

    @property
    def level(self) -> int:
        return self._logger.level

    def add_file_handler(self, log_dir: str | Path) -> None:
        log_path = Path(log_dir) / f"{self.name}.log"
        for handler in self._logger.handlers:
            if isinstance(handler, logging.FileHandler) and Path(handler.baseFilename) == log_path.resolve():
                return
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        self._logger.addHandler(file_handler)

    def debug(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._logger.debug(message, *args, **kwargs)

    def info(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._logger.info(message, *args, **kwargs)

    def success(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._logger.log(SUCCESS, message, *args, **kwargs)

    def warning(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._logger.warning(message, *args, **kwargs)

    def error(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._logger.error(message, *args, **kwargs)

    def exception(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._logger.exception(message, *args, **kwargs)


def get_logger(name: str, log_dir: str | Path | None = None, level: str | int | None = None) -> Logger:
    """
    Get (or create) the project logger for ``name``.

    Args:
        name: Component name, used as the logger suffix and log file name.
        log_dir: Optional directory for a ``<name>.log`` file handler.
        level: Optional level; defaults to ``SCAFFOLD_LOG_LEVEL`` or INFO.
    """
    logger = _loggers.get(name)
    if logger is None:
        logger = Logger(name, log_dir=log_dir, level=level)
        _loggers[name] = logger
        return logger

    if level is not None:
        logger._logger.setLevel(_resolve_level(level))
    if log_dir:
        logger.add_file_handler(log_dir)
    return logger
