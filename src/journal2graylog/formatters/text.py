"""Human readable text formatter."""

from __future__ import annotations

import json
import logging

from .jsonl import record_extras

__all__ = ["StructuredTextFormatter"]

_DEFAULT_FMT = "%(asctime)s | %(levelname)-5s | %(name)s | %(message)s"


class StructuredTextFormatter(logging.Formatter):
    """Formatter that appends ``extra`` fields as ``key=value`` pairs."""

    def __init__(self, *, show_extras: bool = True, fmt: str | None = None, datefmt: str | None = "%Y-%m-%d %H:%M:%S") -> None:
        super().__init__(fmt or _DEFAULT_FMT, datefmt=datefmt)
        self.show_extras = show_extras

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        line = super().format(record)
        if not self.show_extras:
            return line
        extras = record_extras(record)
        if not extras:
            return line
        parts = []
        for key, value in extras.items():
            rendered = json.dumps(value, ensure_ascii=False) if isinstance(value, (dict, list)) else str(value)
            parts.append(f"{key}={rendered}")
        return f"{line} | {' '.join(parts)}"
