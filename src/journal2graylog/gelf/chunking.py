"""Chunked GELF over UDP.

A payload larger than one chunk is split into at most 128 datagrams, each
starting with a 12 byte header::

    0x1e 0x0f | message id (8 bytes) | sequence index (1) | total count (1)

A payload that fits into a single chunk is sent without any header.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Iterator, List

from ..core.errors import RecordSkipped, SkipReason

__all__ = [
    "CHUNK_MAGIC",
    "CHUNK_HEADER_SIZE",
    "MAX_CHUNKS",
    "CHUNK_SIZE_WAN",
    "CHUNK_SIZE_LAN",
    "MAX_CHUNK_SIZE",
    "ChunkedMessage",
    "parse_chunk_size",
]

CHUNK_MAGIC = b"\x1e\x0f"
CHUNK_HEADER_SIZE = 12
MAX_CHUNKS = 128
CHUNK_SIZE_WAN = 1420
CHUNK_SIZE_LAN = 8154
# Largest UDP payload over IPv4 minus the chunk header.
MAX_CHUNK_SIZE = 65507 - CHUNK_HEADER_SIZE

_PROFILES = {"wan": CHUNK_SIZE_WAN, "lan": CHUNK_SIZE_LAN}


def parse_chunk_size(value: str | int) -> int:
    """Translate a ``wan``/``lan`` profile or a byte count to a chunk size."""

    if isinstance(value, int):
        size = value
    else:
        key = value.strip().lower()
        if key in _PROFILES:
            return _PROFILES[key]
        try:
            size = int(key)
        except ValueError:
            raise ValueError(f"Unknown chunk size: {value!r}") from None
    if not 0 < size <= MAX_CHUNK_SIZE:
        raise ValueError(f"Chunk size must be between 1 and {MAX_CHUNK_SIZE}, got {size}")
    return size


def _random_id() -> bytes:
    return os.urandom(8)


@dataclass(slots=True)
class ChunkedMessage:
    """A compressed payload prepared for transmission in chunks."""

    payload: bytes
    chunk_size: int = CHUNK_SIZE_WAN
    message_id: bytes = field(default_factory=_random_id)

    def __post_init__(self) -> None:
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if len(self.message_id) != 8:
            raise ValueError("message_id must be exactly 8 bytes")
        if self.total > MAX_CHUNKS:
            raise RecordSkipped(
                SkipReason.TOO_MANY_CHUNKS,
                f"{len(self.payload)} bytes need {self.total} chunks of {self.chunk_size} bytes",
            )

    @property
    def total(self) -> int:
        return max(1, -(-len(self.payload) // self.chunk_size))

    @property
    def is_chunked(self) -> bool:
        return self.total > 1

    def header(self, index: int) -> bytes:
        return CHUNK_MAGIC + self.message_id + bytes((index, self.total))

    def __iter__(self) -> Iterator[bytes]:
        if not self.is_chunked:
            yield self.payload
            return
        for index in range(self.total):
            start = index * self.chunk_size
            yield self.header(index) + self.payload[start : start + self.chunk_size]

    def datagrams(self) -> List[bytes]:
        return list(self)
