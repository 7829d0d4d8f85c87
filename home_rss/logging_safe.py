from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict

from .utils.logging import sanitize_log_message

LOG_FORMAT_STRING = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class SafeFormatter(logging.Formatter):
    """
    A logging formatter that sanitizes messages before formatting.

    Feed titles and URLs are attacker controlled, so the merged message is
    stripped of control characters and ANSI codes and credentials are masked.
    """

    def format(self, record: logging.LogRecord) -> str:
        # Substitute args first so that secrets inside args are masked as well.
        record.msg = sanitize_log_message(record.getMessage())
        record.args = ()
        return super().format(record)


class SafeJSONFormatter(logging.Formatter):
    """JSON logging formatter that sanitizes values."""

    _DEFAULT_FIELDS = {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
    }

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, timezone.utc)
        payload: Dict[str, Any] = {
            "timestamp": timestamp.isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": sanitize_log_message(record.getMessage()),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = self.formatStack(record.stack_info)

        extras: Dict[str, Any] = {}
        for key, value in record.__dict__.items():
            if key in self._DEFAULT_FIELDS:
                continue
            if isinstance(value, str):
                extras[key] = sanitize_log_message(value)
            else:
                extras[key] = value
        if extras:
            payload["extra"] = extras

        return json.dumps(payload, ensure_ascii=False, default=str)


def make_formatter(log_format: str) -> logging.Formatter:
    if log_format == "json":
        return SafeJSONFormatter()
    return SafeFormatter(LOG_FORMAT_STRING)
