"""Configuration validation helpers."""

from __future__ import annotations

from ..config.schema import LOG_FORMATS, SOURCE_KINDS, ShipperConfig
from ..gelf.chunking import MAX_CHUNK_SIZE
from ..gelf.message import is_valid_field_name
from ..transport.resolver import parse_host_spec
from .errors import ResolutionError
from .levels import is_known_level

MAX_FIELD_VALUE_LEN = 2048


class ConfigurationError(ValueError):
    """Raised when configuration validation fails."""


def validate_configuration(config: ShipperConfig) -> None:
    """Ensure configuration values are usable before anything is started."""

    if config.source.kind not in SOURCE_KINDS:
        raise ConfigurationError(
            f"Unknown source kind '{config.source.kind}', expected one of: {', '.join(SOURCE_KINDS)}"
        )
    if config.source.kind == "journal" and not config.source.command:
        raise ConfigurationError("Journal source requires a non-empty command")

    try:
        parse_host_spec(config.target.address)
    except ResolutionError as exc:
        raise ConfigurationError(str(exc)) from exc

    if not 0 <= config.target.sender_port < 65536:
        raise ConfigurationError(f"Sender port out of range: {config.target.sender_port}")
    if config.target.ttl_s < 0:
        raise ConfigurationError(f"Resolution TTL must not be negative: {config.target.ttl_s}")
    if not 0 < config.gelf.chunk_size <= MAX_CHUNK_SIZE:
        raise ConfigurationError(f"Chunk size must be between 1 and {MAX_CHUNK_SIZE}: {config.gelf.chunk_size}")

    for name, value in config.fields.items():
        if not is_valid_field_name(name):
            raise ConfigurationError(f"Invalid static field name '{name}'")
        if len(str(value).encode("utf-8")) > MAX_FIELD_VALUE_LEN:
            raise ConfigurationError(f"Static field '{name}' is longer than {MAX_FIELD_VALUE_LEN} bytes")

    if config.logging.format not in LOG_FORMATS:
        raise ConfigurationError(
            f"Unknown log format '{config.logging.format}', expected one of: {', '.join(LOG_FORMATS)}"
        )
    if config.logging.stream not in {"stderr", "stdout"}:
        raise ConfigurationError(f"Unknown log stream '{config.logging.stream}'")
    if not is_known_level(config.logging.level):
        raise ConfigurationError(f"Unknown log level '{config.logging.level}'")
