from __future__ import annotations

import json

import pytest

from journal2graylog.config.schema import FiltersConfig
from journal2graylog.core.errors import RecordSkipped, SkipReason
from journal2graylog.core.severity import MessageSeverity, SystemSeverity
from journal2graylog.pipeline.transform import RecordTransformer, find_message_level, normalize_value


def _skip_reason(transformer: RecordTransformer, line: str) -> SkipReason:
    with pytest.raises(RecordSkipped) as excinfo:
        transformer.transform(line)
    return excinfo.value.reason


def test_full_record_is_mapped() -> None:
    line = json.dumps(
        {
            "MESSAGE": "service started",
            "_HOSTNAME": "h1",
            "PRIORITY": "5",
            "__REALTIME_TIMESTAMP": "1700000000123456",
            "_PID": "42",
            "SYSLOG_IDENTIFIER": "sshd",
            "__CURSOR": "s=abc",
            "_BOOT_ID": "b",
            "_MACHINE_ID": "m",
            "_SYSTEMD_CGROUP": "/system.slice/sshd.service",
            "_SYSTEMD_SLICE": "system.slice",
        }
    )
    message = RecordTransformer().transform(line)

    assert message.host == "h1"
    assert message.short_message == "service started"
    assert message.level is SystemSeverity.NOTICE
    assert message.timestamp == pytest.approx(1700000000.123456)
    assert message.additional == {"_PID": "42", "SYSLOG_IDENTIFIER": "sshd"}


@pytest.mark.parametrize("line", ["not json", "{\"MESSAGE\": ", "[1, 2]", "\"text\""])
def test_malformed_lines(line: str) -> None:
    assert _skip_reason(RecordTransformer(), line) is SkipReason.MALFORMED


@pytest.mark.parametrize("record", [{"_HOSTNAME": "h1"}, {"MESSAGE": None, "PRIORITY": "3"}, {}, {"MESSAGE": ""}, {"MESSAGE": "  "}])
def test_missing_message(record: dict) -> None:
    assert _skip_reason(RecordTransformer(), json.dumps(record)) is SkipReason.NO_MESSAGE


def test_host_defaults_to_undefined() -> None:
    message = RecordTransformer().transform('{"MESSAGE": "hi"}')
    assert message.host == "undefined"
    assert message.level is None
    assert message.timestamp is None


def test_system_threshold_drops_less_severe_priority() -> None:
    transformer = RecordTransformer(FiltersConfig(system_level=SystemSeverity.WARNING))
    line = '{"MESSAGE":"hello","PRIORITY":"6","_HOSTNAME":"h1"}'
    assert _skip_reason(transformer, line) is SkipReason.FILTERED_BY_SYSTEM_LEVEL


def test_system_threshold_admits_equal_priority() -> None:
    transformer = RecordTransformer(FiltersConfig(system_level=SystemSeverity.WARNING))
    message = transformer.transform('{"MESSAGE":"careful","PRIORITY":"4"}')
    assert message.level is SystemSeverity.WARNING


def test_system_filter_is_monotonic_in_threshold() -> None:
    lines = [json.dumps({"MESSAGE": f"m{p}", "PRIORITY": str(p)}) for p in range(8)]

    def admitted(threshold: SystemSeverity) -> set[str]:
        transformer = RecordTransformer(FiltersConfig(system_level=threshold))
        passed = set()
        for line in lines:
            try:
                passed.add(transformer.transform(line).short_message)
            except RecordSkipped:
                continue
        return passed

    previous: set[str] = set()
    for threshold in SystemSeverity:
        current = admitted(threshold)
        assert previous <= current
        assert len(current) == int(threshold) + 1
        previous = current


def test_out_of_range_priority_is_treated_as_debug() -> None:
    transformer = RecordTransformer(FiltersConfig(system_level=SystemSeverity.INFO))
    assert _skip_reason(transformer, '{"MESSAGE":"x","PRIORITY":"12"}') is SkipReason.FILTERED_BY_SYSTEM_LEVEL


def test_non_numeric_priority_is_ignored() -> None:
    transformer = RecordTransformer(FiltersConfig(system_level=SystemSeverity.ERROR))
    message = transformer.transform('{"MESSAGE":"x","PRIORITY":"loud"}')
    assert message.level is None


def test_message_level_more_severe_than_threshold_is_sent() -> None:
    transformer = RecordTransformer(FiltersConfig(message_level=MessageSeverity.WARNING))
    message = transformer.transform('{"MESSAGE":"level=error disk failure","_HOSTNAME":"h1"}')
    assert message.short_message == "level=error disk failure"


def test_message_level_less_severe_than_threshold_is_dropped() -> None:
    transformer = RecordTransformer(FiltersConfig(message_level=MessageSeverity.WARNING))
    line = '{"MESSAGE":"ts=1 level=debug cache warm"}'
    assert _skip_reason(transformer, line) is SkipReason.FILTERED_BY_MESSAGE_LEVEL


def test_message_without_level_token_is_not_filtered() -> None:
    transformer = RecordTransformer(FiltersConfig(message_level=MessageSeverity.EMERGENCY))
    message = transformer.transform('{"MESSAGE":"plain text"}')
    assert message.short_message == "plain text"


def test_message_level_filter_disabled_by_default() -> None:
    message = RecordTransformer().transform('{"MESSAGE":"level=debug noisy"}')
    assert message.short_message == "level=debug noisy"


def test_find_message_level() -> None:
    assert find_message_level("level=error disk failure") is MessageSeverity.ERROR
    assert find_message_level("request done level=WARN") is MessageSeverity.WARNING
    assert find_message_level("level=weird thing") is MessageSeverity.INFO
    assert find_message_level("level=error123") is None
    assert find_message_level("no token here") is None


def test_timestamp_accepts_numbers_and_ignores_garbage() -> None:
    transformer = RecordTransformer()
    numeric = transformer.transform('{"MESSAGE":"x","__REALTIME_TIMESTAMP":2500000}')
    assert numeric.timestamp == pytest.approx(2.5)
    garbage = transformer.transform('{"MESSAGE":"x","__REALTIME_TIMESTAMP":"soon"}')
    assert garbage.timestamp is None


def test_binary_message_is_decoded() -> None:
    line = json.dumps({"MESSAGE": list(b"caf\xc3\xa9 \xff")})
    message = RecordTransformer().transform(line)
    assert message.short_message == "café \ufffd"


def test_normalize_value() -> None:
    assert normalize_value("a") == "a"
    assert normalize_value(3) == 3
    assert normalize_value(True) == "true"
    assert normalize_value(["a", "b"]) == "a\nb"
    assert normalize_value({"k": 1}) == '{"k":1}'


def test_reserved_and_invalid_field_names_are_not_copied() -> None:
    line = json.dumps({"MESSAGE": "x", "id": "1", "bad key": "2", "OK_KEY": None, "GOOD": "3"})
    message = RecordTransformer().transform(line)
    assert message.additional == {"GOOD": "3"}
