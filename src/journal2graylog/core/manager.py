"""Diagnostics logging setup and teardown."""

from __future__ import annotations

import logging
import sys
from typing import IO, Callable, Dict

from ..config.schema import LoggingConfig
from ..formatters.jsonl import JSONLinesFormatter
from ..formatters.text import StructuredTextFormatter
from .levels import ensure_level, register_trace_level

LOGGER_NAMESPACE = "journal2graylog"

FORMATTER_BUILDERS: Dict[str, Callable[[], logging.Formatter]] = {
    "text": StructuredTextFormatter,
    "jsonl": JSONLinesFormatter,
}


def build_formatter(kind: str) -> logging.Formatter:
    builder = FORMATTER_BUILDERS.get(kind)
    if builder is None:
        raise ValueError(f"Unknown log format: {kind}")
    return builder()


class LogManager:
    """Own the single console handler attached to the package logger."""

    def __init__(self) -> None:
        self._handler: logging.Handler | None = None

    def configure(self, config: LoggingConfig, *, stream: IO[str] | None = None) -> None:
        """Apply ``config``, replacing any previously installed handler."""

        self._teardown()
        register_trace_level()

        if stream is None:
            stream = sys.stdout if config.stream == "stdout" else sys.stderr
        handler = logging.StreamHandler(stream=stream)
        handler.setFormatter(build_formatter(config.format))
        level = ensure_level(config.level)
        handler.setLevel(level)

        logger = logging.getLogger(LOGGER_NAMESPACE)
        logger.setLevel(level)
        logger.addHandler(handler)
        logger.propagate = False

        self._handler = handler

    def shutdown(self) -> None:
        self._teardown()

    def get_logger(self, name: str) -> logging.Logger:
        if name != LOGGER_NAMESPACE and not name.startswith(f"{LOGGER_NAMESPACE}."):
            name = f"{LOGGER_NAMESPACE}.{name}"
        return logging.getLogger(name)

    def _teardown(self) -> None:
        handler = self._handler
        if handler is None:
            return
        logger = logging.getLogger(LOGGER_NAMESPACE)
        logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)
        logger.propagate = True
        try:
            handler.flush()
        except (OSError, ValueError):
            pass
        handler.close()
        self._handler = None


GLOBAL_MANAGER = LogManager()
