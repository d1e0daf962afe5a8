"""Time utilities for journal2graylog."""

from __future__ import annotations

import math
import time

__all__ = ["epoch_seconds", "from_microseconds"]


def epoch_seconds() -> float:
    """Return the wall-clock time as float seconds since the epoch."""

    return time.time()


def from_microseconds(value: str | int | float) -> float:
    """Convert journald's microsecond timestamps to GELF float seconds.

    Raises ``ValueError`` for values that are not numeric.
    """

    if isinstance(value, bool):
        raise ValueError("boolean is not a timestamp")
    if isinstance(value, str):
        value = value.strip()
        micros = int(value) if value.isdigit() else float(value)
    else:
        micros = value
    if not math.isfinite(micros):
        raise ValueError(f"timestamp is not finite: {value!r}")
    return micros / 1_000_000
