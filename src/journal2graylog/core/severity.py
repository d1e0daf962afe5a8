"""Severity scales used to filter journal records.

Both scales share the syslog ranks from RFC 5424: ``0`` is the most severe
(emergency) and ``7`` the most verbose (debug). Being ``IntEnum`` members,
``a > b`` reads as "``a`` is less severe than ``b``" and a threshold ``T``
admits every severity ``s`` with ``s <= T``.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Dict

__all__ = ["SystemSeverity", "MessageSeverity", "CANONICAL_NAMES"]

CANONICAL_NAMES = (
    "emergency",
    "alert",
    "critical",
    "error",
    "warning",
    "notice",
    "info",
    "debug",
)

_SYSTEM_ALIASES: Dict[str, int] = {
    "emerg": 0,
    "crit": 2,
    "err": 3,
    "warn": 4,
    "informational": 6,
}

_MESSAGE_ALIASES: Dict[str, int] = {
    "emerg": 0,
    "panic": 0,
    "fatal": 1,
    "crit": 2,
    "err": 3,
    "warn": 4,
    "informational": 6,
    "trace": 7,
}


class SystemSeverity(IntEnum):
    """Severity carried by the journal ``PRIORITY`` field."""

    EMERGENCY = 0
    ALERT = 1
    CRITICAL = 2
    ERROR = 3
    WARNING = 4
    NOTICE = 5
    INFO = 6
    DEBUG = 7

    @classmethod
    def from_numeric(cls, value: int) -> "SystemSeverity":
        """Map a syslog priority to a severity.

        Unknown priorities are treated as maximally verbose (``DEBUG``) so an
        unexpected value is filtered like debug output rather than silently
        dropped or promoted.
        """

        if 0 <= value <= 7:
            return cls(value)
        return cls.DEBUG

    @classmethod
    def from_name(cls, name: str | int) -> "SystemSeverity":
        """Parse a configured threshold; raises ``ValueError`` when unknown."""

        if isinstance(name, int):
            if 0 <= name <= 7:
                return cls(name)
            raise ValueError(f"System severity out of range: {name}")
        key = name.strip().lower()
        if key.isdigit():
            return cls.from_name(int(key))
        if key in CANONICAL_NAMES:
            return cls(CANONICAL_NAMES.index(key))
        if key in _SYSTEM_ALIASES:
            return cls(_SYSTEM_ALIASES[key])
        raise ValueError(f"Unknown system severity: {name!r}")

    def __str__(self) -> str:
        return CANONICAL_NAMES[self.value]


class MessageSeverity(IntEnum):
    """Severity embedded in free text as ``level=<name>``."""

    EMERGENCY = 0
    ALERT = 1
    CRITICAL = 2
    ERROR = 3
    WARNING = 4
    NOTICE = 5
    INFO = 6
    DEBUG = 7

    @classmethod
    def default(cls) -> "MessageSeverity":
        return cls.INFO

    @classmethod
    def from_name(cls, name: str) -> "MessageSeverity":
        """Case-insensitive lookup; unrecognized names map to :meth:`default`."""

        key = name.strip().lower()
        if key in CANONICAL_NAMES:
            return cls(CANONICAL_NAMES.index(key))
        if key in _MESSAGE_ALIASES:
            return cls(_MESSAGE_ALIASES[key])
        return cls.default()

    @classmethod
    def is_known(cls, name: str) -> bool:
        key = name.strip().lower()
        return key in CANONICAL_NAMES or key in _MESSAGE_ALIASES

    def __str__(self) -> str:
        return CANONICAL_NAMES[self.value]
