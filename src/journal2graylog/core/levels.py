"""Diagnostics levels: the stdlib ones plus TRACE for per-record noise."""

from __future__ import annotations

import logging

TRACE_LEVEL_NAME = "TRACE"
TRACE_LEVEL_NUM = 5


def register_trace_level() -> None:
    """Name level 5 so formatters render it as ``TRACE``; idempotent."""

    if logging.getLevelName(TRACE_LEVEL_NUM) != TRACE_LEVEL_NAME:
        logging.addLevelName(TRACE_LEVEL_NUM, TRACE_LEVEL_NAME)


def parse_level(value: int | str) -> int | None:
    """Return the numeric level for ``value``, or ``None`` when it is unknown."""

    if isinstance(value, int):
        return value
    name = value.strip().upper()
    if name == TRACE_LEVEL_NAME:
        return TRACE_LEVEL_NUM
    if name.isdigit():
        return int(name)
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else None


def ensure_level(value: int | str) -> int:
    level = parse_level(value)
    return logging.INFO if level is None else level


def is_known_level(value: int | str) -> bool:
    return parse_level(value) is not None
