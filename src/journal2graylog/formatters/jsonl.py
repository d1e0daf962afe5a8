"""JSON Lines formatter."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterable, MutableMapping

__all__ = ["JSONLinesFormatter", "record_extras"]

_STANDARD_ATTRS = {
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
    "asctime",
    "message",
}


def record_extras(record: logging.LogRecord, drop_fields: Iterable[str] = ()) -> Dict[str, Any]:
    """Return the ``extra`` mapping attached to ``record``."""

    dropped = set(drop_fields)
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _STANDARD_ATTRS and key not in dropped
    }


class JSONLinesFormatter(logging.Formatter):
    """Emit diagnostics as one JSON object per line."""

    def __init__(
        self,
        *,
        drop_fields: Iterable[str] | None = None,
        datefmt: str | None = "%Y-%m-%dT%H:%M:%S%z",
    ) -> None:
        super().__init__(datefmt=datefmt)
        self.drop_fields = set(drop_fields or [])

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: MutableMapping[str, Any] = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }

        extra = record_extras(record, self.drop_fields)
        if extra:
            payload["extra"] = extra

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, separators=(",", ":"), default=str)
