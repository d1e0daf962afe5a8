"""GELF message representation."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

from ..core.severity import SystemSeverity

__all__ = ["GELF_VERSION", "GelfMessage", "is_valid_field_name"]

GELF_VERSION = "1.1"

_FIELD_NAME_RE = re.compile(r"^[\w.\-]+$")
_RESERVED_FIELDS = frozenset({"id"})


def is_valid_field_name(name: str) -> bool:
    """Return ``True`` if ``name`` may be sent as an additional ``_name`` field."""

    return bool(_FIELD_NAME_RE.match(name)) and name not in _RESERVED_FIELDS


@dataclass(slots=True)
class GelfMessage:
    """A normalized event ready for encoding.

    ``additional`` holds field names without the leading underscore; the
    prefix is added when the message is rendered for the wire.
    """

    host: str
    short_message: str
    timestamp: float | None = None
    level: SystemSeverity | None = None
    full_message: str | None = None
    additional: Dict[str, Any] = field(default_factory=dict)

    def set_additional(self, name: str, value: Any) -> bool:
        """Attach an additional field; invalid or reserved names are refused."""

        if not is_valid_field_name(name):
            return False
        self.additional[name] = value
        return True

    def to_payload(
        self,
        static_fields: Mapping[str, Any] | None = None,
        *,
        default_timestamp: float | None = None,
    ) -> Dict[str, Any]:
        """Render the wire mapping, static fields first, then record fields."""

        payload: Dict[str, Any] = {
            "version": GELF_VERSION,
            "host": self.host,
            "short_message": self.short_message,
        }
        if self.full_message is not None:
            payload["full_message"] = self.full_message
        timestamp = self.timestamp if self.timestamp is not None else default_timestamp
        if timestamp is not None:
            payload["timestamp"] = timestamp
        if self.level is not None:
            payload["level"] = int(self.level)
        for name, value in (static_fields or {}).items():
            payload[f"_{name}"] = value
        for name, value in self.additional.items():
            payload.setdefault(f"_{name}", value)
        return payload
