"""Error taxonomy for the shipping pipeline."""

from __future__ import annotations

from enum import Enum

__all__ = [
    "SkipReason",
    "RecordSkipped",
    "ShipperError",
    "ResolutionError",
    "DispatchError",
    "UnsupportedPlatformError",
    "SourceSpawnError",
    "SourceClosedError",
]


class SkipReason(str, Enum):
    """Why a single input line produced no datagrams."""

    MALFORMED = "malformed"
    NO_MESSAGE = "no_message"
    FILTERED_BY_MESSAGE_LEVEL = "filtered_by_message_level"
    FILTERED_BY_SYSTEM_LEVEL = "filtered_by_system_level"
    TOO_MANY_CHUNKS = "too_many_chunks"


class RecordSkipped(Exception):
    """Raised when a record is dropped; never fatal to the ingestion loop."""

    def __init__(self, reason: SkipReason, detail: str = "") -> None:
        super().__init__(f"{reason.value}: {detail}" if detail else reason.value)
        self.reason = reason
        self.detail = detail


class ShipperError(RuntimeError):
    """Base class for fatal errors that terminate the shipper."""


class ResolutionError(ShipperError):
    """The target host specification could not be resolved to an address."""


class DispatchError(ShipperError):
    """The outbound UDP socket could not be created or bound."""


class UnsupportedPlatformError(ShipperError):
    """The journal source is only available on Linux."""


class SourceSpawnError(ShipperError):
    """The journal reader subprocess could not be started."""


class SourceClosedError(ShipperError):
    """The journal reader subprocess closed its output stream."""

    def __init__(self, stderr: str, returncode: int | None = None) -> None:
        message = stderr.strip() or "journal reader closed its output"
        if returncode is not None:
            message = f"{message} (exit code {returncode})"
        super().__init__(message)
        self.stderr = stderr
        self.returncode = returncode
