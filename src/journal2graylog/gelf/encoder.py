"""Serialize, compress and chunk GELF messages."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping

from ..utils.time import epoch_seconds
from .chunking import CHUNK_SIZE_WAN, ChunkedMessage
from .compression import Compression
from .message import GelfMessage

__all__ = ["GelfEncoder"]


@dataclass(slots=True)
class GelfEncoder:
    """Turn a :class:`GelfMessage` into the datagrams sent on the wire.

    Messages without a timestamp are stamped with ``clock()`` at encoding
    time. ``static_fields`` passed to the methods are the operator supplied
    additional fields, identical for every record of a run.
    """

    compression: Compression = Compression.GZIP
    chunk_size: int = CHUNK_SIZE_WAN
    clock: Callable[[], float] = field(default=epoch_seconds)

    def payload(self, message: GelfMessage, static_fields: Mapping[str, Any] | None = None) -> Dict[str, Any]:
        return message.to_payload(static_fields, default_timestamp=self.clock())

    def serialize(self, message: GelfMessage, static_fields: Mapping[str, Any] | None = None) -> bytes:
        data = self.payload(message, static_fields)
        # Lone surrogates decoded from \uXXXX escapes have no UTF-8 form.
        return json.dumps(data, ensure_ascii=False, separators=(",", ":")).encode("utf-8", errors="replace")

    def encode(self, message: GelfMessage, static_fields: Mapping[str, Any] | None = None) -> bytes:
        return self.compression.compress(self.serialize(message, static_fields))

    def chunk(self, payload: bytes) -> ChunkedMessage:
        """Wrap ``payload``; raises ``RecordSkipped`` beyond 128 chunks."""

        return ChunkedMessage(payload, chunk_size=self.chunk_size)

    def datagrams(self, message: GelfMessage, static_fields: Mapping[str, Any] | None = None) -> List[bytes]:
        return self.chunk(self.encode(message, static_fields)).datagrams()
