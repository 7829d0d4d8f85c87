"""Logging setup for the feed panels add-on."""
from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

from . import config
from .logging_safe import SafeFormatter, SafeJSONFormatter, make_formatter

_LOGGING_CONFIGURED = False


class MaxLevelFilter(logging.Filter):
    """Filter that only lets records up to ``max_level`` through."""

    def __init__(self, max_level: int) -> None:
        super().__init__()
        self._max_level = max_level

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - simple predicate
        return record.levelno <= self._max_level


def configure_logging(*, log_dir: Path | None = None, force: bool = False) -> None:
    """Install console, ``errors.log`` and ``diagnostics.log`` handlers.

    Diagnostics below ERROR go to ``diagnostics.log``; ERROR and above, which
    includes every storage failure reported by a subscription or uninstall, go
    to ``errors.log``. Calling the function again is a no-op unless ``force``
    is set.
    """

    global _LOGGING_CONFIGURED

    if _LOGGING_CONFIGURED and not force:
        return

    target_dir = Path(log_dir) if log_dir is not None else config.LOG_DIR_PATH
    os.makedirs(target_dir, exist_ok=True)

    level = getattr(logging, config.LOG_LEVEL, logging.INFO)
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(level=level)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    formatter = make_formatter(config.LOG_FORMAT)
    for handler in root_logger.handlers:
        handler.setFormatter(formatter)
        if isinstance(handler, logging.StreamHandler):
            handler.setLevel(level)

    error_handler = RotatingFileHandler(
        target_dir / "errors.log",
        maxBytes=config.LOG_MAX_BYTES,
        backupCount=config.LOG_BACKUP_COUNT,
        encoding="utf-8",
        delay=True,
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(formatter)
    root_logger.addHandler(error_handler)

    diagnostics_handler = RotatingFileHandler(
        target_dir / "diagnostics.log",
        maxBytes=config.LOG_MAX_BYTES,
        backupCount=config.LOG_BACKUP_COUNT,
        encoding="utf-8",
        delay=True,
    )
    diagnostics_handler.setLevel(logging.INFO)
    diagnostics_handler.addFilter(MaxLevelFilter(logging.ERROR - 1))
    diagnostics_handler.setFormatter(formatter)
    root_logger.addHandler(diagnostics_handler)

    _LOGGING_CONFIGURED = True


__all__ = [
    "MaxLevelFilter",
    "SafeFormatter",
    "SafeJSONFormatter",
    "configure_logging",
]
