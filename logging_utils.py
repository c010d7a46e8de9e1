# logging_utils.py
"""Logging configuration helpers for Harper."""

from __future__ import annotations

import json
import logging
import sys
from typing import Any, ClassVar

_DEFAULT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_NOISY_LOGGERS = ("urllib3", "slack_sdk", "slack_bolt")


def _standard_record_keys() -> frozenset[str]:
    blank = logging.LogRecord("", logging.INFO, "", 0, "", (), None)
    return frozenset(blank.__dict__) | {"message", "asctime", "taskName"}


class JsonFormatter(logging.Formatter):
    """One JSON object per line; ``extra={...}`` fields become top-level keys."""

    RESERVED_KEYS: ClassVar[frozenset[str]] = _standard_record_keys()

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = {
            "time": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            data["stack"] = record.stack_info

        for key, value in record.__dict__.items():
            if key not in self.RESERVED_KEYS and not key.startswith("_"):
                data[key] = value

        return json.dumps(data, default=str, ensure_ascii=False)


class ExtraFormatter(logging.Formatter):
    """Plain-text formatter that appends ``extra`` fields as ``key=value`` pairs."""

    RESERVED_KEYS: ClassVar[frozenset[str]] = _standard_record_keys()

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        extras = [
            f"{key}={value!r}"
            for key, value in record.__dict__.items()
            if key not in self.RESERVED_KEYS and not key.startswith("_")
        ]
        return f"{base} {' '.join(extras)}" if extras else base


def _resolve_log_level(level_name: str) -> int:
    if not level_name:
        return logging.INFO
    numeric = logging.getLevelName(level_name.upper())
    if isinstance(numeric, int):
        return numeric
    return logging.INFO


def configure_logging(level_name: str, json_enabled: bool) -> None:
    """Configure root logging handler according to settings."""

    level = _resolve_log_level(level_name)
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    formatter = JsonFormatter() if json_enabled else ExtraFormatter(_DEFAULT_FORMAT)
    handler.setFormatter(formatter)
    root.addHandler(handler)

    # SDK loggers stay at WARNING or above.
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
