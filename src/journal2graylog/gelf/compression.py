"""Payload compression algorithms supported by GELF."""

from __future__ import annotations

import gzip
import zlib
from enum import Enum

__all__ = ["Compression"]


class Compression(str, Enum):
    NONE = "none"
    GZIP = "gzip"
    ZLIB = "zlib"

    @classmethod
    def from_name(cls, name: str) -> "Compression":
        try:
            return cls(name.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown compression algorithm: {name!r}") from None

    def compress(self, data: bytes) -> bytes:
        if self is Compression.GZIP:
            return gzip.compress(data)
        if self is Compression.ZLIB:
            return zlib.compress(data)
        return data

    def decompress(self, data: bytes) -> bytes:
        if self is Compression.GZIP:
            return gzip.decompress(data)
        if self is Compression.ZLIB:
            return zlib.decompress(data)
        return data

    def __str__(self) -> str:
        return self.value
