from __future__ import annotations

import json
import random
import secrets

import pytest

from journal2graylog.core.errors import RecordSkipped, SkipReason
from journal2graylog.core.severity import SystemSeverity
from journal2graylog.gelf.chunking import (
    CHUNK_HEADER_SIZE,
    CHUNK_MAGIC,
    CHUNK_SIZE_LAN,
    CHUNK_SIZE_WAN,
    MAX_CHUNK_SIZE,
    MAX_CHUNKS,
    ChunkedMessage,
    parse_chunk_size,
)
from journal2graylog.gelf.compression import Compression
from journal2graylog.gelf.encoder import GelfEncoder
from journal2graylog.gelf.message import GelfMessage


def _message(text: str = "hello") -> GelfMessage:
    return GelfMessage(
        host="h1",
        short_message=text,
        timestamp=1700000000.5,
        level=SystemSeverity.ERROR,
        additional={"SYSLOG_IDENTIFIER": "sshd", "_PID": "42"},
    )


def _reassemble(datagrams: list[bytes]) -> bytes:
    parts = {}
    for datagram in datagrams:
        assert datagram[:2] == CHUNK_MAGIC
        parts[datagram[10]] = datagram[CHUNK_HEADER_SIZE:]
    return b"".join(parts[index] for index in sorted(parts))


def test_payload_layout() -> None:
    payload = _message().to_payload({"team": "infra"})
    assert payload == {
        "version": "1.1",
        "host": "h1",
        "short_message": "hello",
        "timestamp": 1700000000.5,
        "level": 3,
        "_team": "infra",
        "_SYSLOG_IDENTIFIER": "sshd",
        "__PID": "42",
    }


def test_static_fields_win_over_record_fields() -> None:
    message = GelfMessage(host="h", short_message="m", additional={"team": "from-record"})
    assert message.to_payload({"team": "static"})["_team"] == "static"


def test_missing_timestamp_uses_encoder_clock() -> None:
    encoder = GelfEncoder(compression=Compression.NONE, clock=lambda: 42.0)
    message = GelfMessage(host="h", short_message="m")
    data = json.loads(encoder.serialize(message))
    assert data["timestamp"] == 42.0
    assert "level" not in data


def test_lone_surrogate_is_replaced() -> None:
    encoder = GelfEncoder(compression=Compression.NONE, clock=lambda: 1.0)
    message = GelfMessage(host="h", short_message=json.loads('"bad \\ud800 escape"'))
    data = json.loads(encoder.serialize(message).decode("utf-8"))
    assert data["short_message"] == "bad ? escape"


@pytest.mark.parametrize("compression", list(Compression))
def test_single_datagram_round_trip(compression: Compression) -> None:
    encoder = GelfEncoder(compression=compression)
    message = _message()
    datagrams = encoder.datagrams(message, {"service": "api"})

    assert len(datagrams) == 1
    decoded = json.loads(compression.decompress(datagrams[0]))
    assert decoded == message.to_payload({"service": "api"})


def test_gzip_output_is_gzip() -> None:
    encoded = GelfEncoder(compression=Compression.GZIP).encode(_message())
    assert encoded[:2] == b"\x1f\x8b"


def test_chunked_round_trip_is_order_independent() -> None:
    encoder = GelfEncoder(compression=Compression.GZIP, chunk_size=CHUNK_SIZE_WAN)
    message = _message(secrets.token_hex(10_000))
    datagrams = encoder.datagrams(message)

    assert len(datagrams) > 1
    assert all(len(d) <= CHUNK_SIZE_WAN + CHUNK_HEADER_SIZE for d in datagrams)
    shuffled = list(datagrams)
    random.Random(7).shuffle(shuffled)
    decoded = json.loads(Compression.GZIP.decompress(_reassemble(shuffled)))
    assert decoded == message.to_payload()


def test_exactly_three_chunks() -> None:
    encoder = GelfEncoder(compression=Compression.NONE)
    message = _message("x" * 500)
    size = len(encoder.serialize(message))
    encoder.chunk_size = -(-size // 3)

    datagrams = encoder.datagrams(message)

    assert len(datagrams) == 3
    ids = {d[2:10] for d in datagrams}
    assert len(ids) == 1
    assert [d[10] for d in datagrams] == [0, 1, 2]
    assert all(d[11] == 3 for d in datagrams)
    assert json.loads(_reassemble(datagrams)) == message.to_payload()


def test_message_ids_are_random() -> None:
    first = ChunkedMessage(b"a" * 30, chunk_size=10)
    second = ChunkedMessage(b"a" * 30, chunk_size=10)
    assert first.message_id != second.message_id
    assert len(first.message_id) == 8


def test_small_payload_has_no_header() -> None:
    chunked = ChunkedMessage(b"payload", chunk_size=100)
    assert chunked.total == 1
    assert chunked.datagrams() == [b"payload"]


def test_exact_fit_is_single_datagram() -> None:
    assert ChunkedMessage(b"z" * 100, chunk_size=100).datagrams() == [b"z" * 100]


def test_max_chunks_is_allowed() -> None:
    chunked = ChunkedMessage(b"q" * (10 * MAX_CHUNKS), chunk_size=10)
    datagrams = chunked.datagrams()
    assert len(datagrams) == MAX_CHUNKS
    assert datagrams[-1][10] == MAX_CHUNKS - 1
    assert datagrams[-1][11] == MAX_CHUNKS


def test_too_many_chunks_is_skipped() -> None:
    with pytest.raises(RecordSkipped) as excinfo:
        ChunkedMessage(b"q" * (10 * MAX_CHUNKS + 1), chunk_size=10)
    assert excinfo.value.reason is SkipReason.TOO_MANY_CHUNKS


def test_parse_chunk_size() -> None:
    assert parse_chunk_size("wan") == CHUNK_SIZE_WAN
    assert parse_chunk_size("LAN") == CHUNK_SIZE_LAN
    assert parse_chunk_size("512") == 512
    assert parse_chunk_size(2048) == 2048
    with pytest.raises(ValueError):
        parse_chunk_size("huge")
    with pytest.raises(ValueError):
        parse_chunk_size(0)
    assert parse_chunk_size(MAX_CHUNK_SIZE) == MAX_CHUNK_SIZE
    with pytest.raises(ValueError):
        parse_chunk_size(MAX_CHUNK_SIZE + 1)
