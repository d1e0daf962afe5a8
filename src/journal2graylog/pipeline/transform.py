"""Decode journal records, apply severity filters and build GELF messages."""

from __future__ import annotations

import json
import re
from typing import Any, Dict

from ..config.schema import FiltersConfig
from ..core.errors import RecordSkipped, SkipReason
from ..core.severity import MessageSeverity, SystemSeverity
from ..gelf.message import GelfMessage
from ..utils.time import from_microseconds

__all__ = ["IGNORED_FIELDS", "RecordTransformer", "find_message_level", "normalize_value"]

MESSAGE_FIELD = "MESSAGE"
HOSTNAME_FIELD = "_HOSTNAME"
TIMESTAMP_FIELD = "__REALTIME_TIMESTAMP"
PRIORITY_FIELD = "PRIORITY"
DEFAULT_HOST = "undefined"

IGNORED_FIELDS = frozenset(
    {
        MESSAGE_FIELD,
        HOSTNAME_FIELD,
        TIMESTAMP_FIELD,
        PRIORITY_FIELD,
        "__CURSOR",
        "_BOOT_ID",
        "_MACHINE_ID",
        "_SYSTEMD_CGROUP",
        "_SYSTEMD_SLICE",
    }
)

# ``level=<word>`` followed by whitespace or the end of the message.
_LEVEL_RE = re.compile(r"level=([A-Za-z]+)(?=\s|$)")


def find_message_level(message: str) -> MessageSeverity | None:
    match = _LEVEL_RE.search(message)
    if match is None:
        return None
    return MessageSeverity.from_name(match.group(1))


def normalize_value(value: Any) -> Any:
    """Render a journal JSON value as a GELF field value (string or number).

    journalctl encodes non UTF-8 payloads as arrays of byte values and
    repeated fields as arrays of strings.
    """

    if isinstance(value, bool):
        return json.dumps(value)
    if isinstance(value, (str, int, float)):
        return value
    if isinstance(value, list):
        if value and all(isinstance(item, int) and not isinstance(item, bool) and 0 <= item < 256 for item in value):
            return bytes(value).decode("utf-8", errors="replace")
        if all(isinstance(item, str) for item in value):
            return "\n".join(value)
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def _parse_priority(value: Any) -> SystemSeverity | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return SystemSeverity.from_numeric(value)
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return SystemSeverity.from_numeric(int(value.strip()))
    return None


class RecordTransformer:
    """Turn one raw journal line into a :class:`GelfMessage`.

    Every rejection raises :class:`RecordSkipped` with the matching
    :class:`SkipReason`.
    """

    def __init__(self, filters: FiltersConfig | None = None) -> None:
        self.filters = filters or FiltersConfig()

    def decode(self, raw_line: str) -> Dict[str, Any]:
        try:
            decoded = json.loads(raw_line)
        except json.JSONDecodeError as exc:
            raise RecordSkipped(SkipReason.MALFORMED, str(exc)) from exc
        if not isinstance(decoded, dict):
            raise RecordSkipped(SkipReason.MALFORMED, f"expected a JSON object, got {type(decoded).__name__}")
        return decoded

    def transform(self, raw_line: str) -> GelfMessage:
        record = self.decode(raw_line)

        raw_message = record.get(MESSAGE_FIELD)
        if raw_message is None:
            raise RecordSkipped(SkipReason.NO_MESSAGE)
        short_message = str(normalize_value(raw_message))
        if not short_message.strip():
            raise RecordSkipped(SkipReason.NO_MESSAGE, "MESSAGE is empty")

        threshold = self.filters.message_level
        if threshold is not None:
            msg_level = find_message_level(short_message)
            if msg_level is not None and msg_level > threshold:
                raise RecordSkipped(
                    SkipReason.FILTERED_BY_MESSAGE_LEVEL,
                    f"message level {msg_level} is below {threshold}",
                )

        level = _parse_priority(record.get(PRIORITY_FIELD))
        if level is not None and level > self.filters.system_level:
            raise RecordSkipped(
                SkipReason.FILTERED_BY_SYSTEM_LEVEL,
                f"priority {level} is below {self.filters.system_level}",
            )

        host_raw = record.get(HOSTNAME_FIELD)
        host = DEFAULT_HOST if host_raw is None else str(normalize_value(host_raw))
        message = GelfMessage(host=host, short_message=short_message, level=level)

        timestamp_raw = record.get(TIMESTAMP_FIELD)
        if timestamp_raw is not None:
            try:
                message.timestamp = from_microseconds(timestamp_raw)
            except (TypeError, ValueError):
                message.timestamp = None

        for name, value in record.items():
            if name in IGNORED_FIELDS or value is None:
                continue
            message.set_additional(name, normalize_value(value))

        return message
