"""Configuration schema definition for journal2graylog."""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping

from ..core.severity import MessageSeverity, SystemSeverity
from ..gelf.chunking import CHUNK_SIZE_WAN, parse_chunk_size
from ..gelf.compression import Compression

DEFAULT_JOURNAL_COMMAND = ["journalctl", "-o", "json", "-f"]

DEFAULT_CONFIG: Dict[str, Any] = {
    "source": {
        "kind": "journal",
        "command": list(DEFAULT_JOURNAL_COMMAND),
    },
    "target": {
        "address": "localhost:12201",
        "ttl_s": 60,
        "sender_port": 0,
    },
    "gelf": {
        "compression": "gzip",
        "chunk_size": "wan",
    },
    "filters": {
        "system_level": "debug",
    },
    "fields": {},
    "logging": {
        "level": "INFO",
        "format": "text",
        "stream": "stderr",
    },
}

SOURCE_KINDS = ("journal", "stdin")
LOG_FORMATS = ("text", "jsonl")


def default_config() -> Dict[str, Any]:
    """Return a deep copy of the default configuration mapping."""

    return deepcopy(DEFAULT_CONFIG)


@dataclass(slots=True)
class SourceConfig:
    kind: str = "journal"
    command: List[str] = field(default_factory=lambda: list(DEFAULT_JOURNAL_COMMAND))


@dataclass(slots=True)
class TargetConfig:
    address: str = "localhost:12201"
    ttl_s: float = 60
    sender_port: int = 0


@dataclass(slots=True)
class GelfConfig:
    compression: Compression = Compression.GZIP
    chunk_size: int = CHUNK_SIZE_WAN


@dataclass(slots=True)
class FiltersConfig:
    system_level: SystemSeverity = SystemSeverity.DEBUG
    message_level: MessageSeverity | None = None


@dataclass(slots=True)
class LoggingConfig:
    level: str | int = "INFO"
    format: str = "text"
    stream: str = "stderr"


@dataclass(slots=True)
class ShipperConfig:
    source: SourceConfig
    target: TargetConfig
    gelf: GelfConfig
    filters: FiltersConfig
    fields: Dict[str, Any]
    logging: LoggingConfig


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = data.get(name, {})
    if not isinstance(value, Mapping):
        raise ValueError(f"Configuration section '{name}' must be a table")
    return value


def _to_source(data: Mapping[str, Any]) -> SourceConfig:
    kind = str(data.get("kind", "journal")).strip().lower()
    command_raw = data.get("command", DEFAULT_JOURNAL_COMMAND)
    if isinstance(command_raw, str):
        command = command_raw.split()
    else:
        command = [str(part) for part in command_raw]
    return SourceConfig(kind=kind, command=command)


def _to_target(data: Mapping[str, Any]) -> TargetConfig:
    return TargetConfig(
        address=str(data.get("address", "localhost:12201")).strip(),
        ttl_s=float(data.get("ttl_s", 60)),
        sender_port=int(data.get("sender_port", 0)),
    )


def _to_gelf(data: Mapping[str, Any]) -> GelfConfig:
    return GelfConfig(
        compression=Compression.from_name(str(data.get("compression", "gzip"))),
        chunk_size=parse_chunk_size(data.get("chunk_size", "wan")),
    )


def _to_filters(data: Mapping[str, Any]) -> FiltersConfig:
    system_level = SystemSeverity.from_name(data.get("system_level", "debug"))
    message_raw = data.get("message_level")
    message_level: MessageSeverity | None = None
    if message_raw not in (None, ""):
        name = str(message_raw)
        if not MessageSeverity.is_known(name):
            raise ValueError(f"Unknown message severity: {name!r}")
        message_level = MessageSeverity.from_name(name)
    return FiltersConfig(system_level=system_level, message_level=message_level)


def _to_fields(data: Mapping[str, Any]) -> Dict[str, Any]:
    fields: Dict[str, Any] = {}
    for name, value in data.items():
        if isinstance(value, (Mapping, list)):
            raise ValueError(f"Static field '{name}' must be a scalar value")
        fields[str(name)] = value
    return fields


def _to_logging(data: Mapping[str, Any]) -> LoggingConfig:
    return LoggingConfig(
        level=data.get("level", "INFO"),
        format=str(data.get("format", "text")).strip().lower(),
        stream=str(data.get("stream", "stderr")).strip().lower(),
    )


def build_config(data: Mapping[str, Any]) -> ShipperConfig:
    """Build typed configuration; raises ``ValueError`` on unparsable values."""

    return ShipperConfig(
        source=_to_source(_section(data, "source")),
        target=_to_target(_section(data, "target")),
        gelf=_to_gelf(_section(data, "gelf")),
        filters=_to_filters(_section(data, "filters")),
        fields=_to_fields(_section(data, "fields")),
        logging=_to_logging(_section(data, "logging")),
    )
