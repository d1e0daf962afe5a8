"""Sequential read-transform-send loop."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping

from ..core.errors import RecordSkipped, SkipReason
from ..core.levels import TRACE_LEVEL_NUM
from ..gelf.encoder import GelfEncoder
from ..transport.resolver import TargetResolver
from ..transport.udp import UDPDispatcher
from .transform import RecordTransformer

__all__ = ["LineOutcome", "ShipperStats", "Shipper"]

logger = logging.getLogger(__name__)

_SKIP_LOG_LEVELS: Dict[SkipReason, int] = {
    SkipReason.MALFORMED: logging.DEBUG,
    SkipReason.NO_MESSAGE: logging.DEBUG,
    SkipReason.FILTERED_BY_MESSAGE_LEVEL: TRACE_LEVEL_NUM,
    SkipReason.FILTERED_BY_SYSTEM_LEVEL: TRACE_LEVEL_NUM,
    SkipReason.TOO_MANY_CHUNKS: logging.WARNING,
}


@dataclass(frozen=True, slots=True)
class LineOutcome:
    """Result of processing one input line."""

    sent: int = 0
    total: int = 0
    skipped: SkipReason | None = None

    @property
    def delivered(self) -> bool:
        return self.skipped is None and self.total > 0 and self.sent == self.total


@dataclass(slots=True)
class ShipperStats:
    lines: int = 0
    records_sent: int = 0
    datagrams_sent: int = 0
    datagram_failures: int = 0
    skipped: Counter = field(default_factory=Counter)

    def record(self, outcome: LineOutcome) -> None:
        self.lines += 1
        if outcome.skipped is not None:
            self.skipped[outcome.skipped] += 1
            return
        if outcome.total:
            self.records_sent += 1
        self.datagrams_sent += outcome.sent
        self.datagram_failures += outcome.total - outcome.sent


class Shipper:
    """Drive one record at a time from a line source to the network."""

    def __init__(
        self,
        *,
        transformer: RecordTransformer,
        encoder: GelfEncoder,
        resolver: TargetResolver,
        dispatcher: UDPDispatcher,
        static_fields: Mapping[str, Any] | None = None,
    ) -> None:
        self.transformer = transformer
        self.encoder = encoder
        self.resolver = resolver
        self.dispatcher = dispatcher
        self.static_fields = dict(static_fields or {})
        self.stats = ShipperStats()

    def process_line(self, line: str) -> LineOutcome:
        data = line.strip()
        if not data:
            return LineOutcome()
        target = self.resolver.current()
        try:
            message = self.transformer.transform(data)
            datagrams = self.encoder.datagrams(message, self.static_fields)
        except RecordSkipped as skip:
            self._log_skip(skip, data)
            return LineOutcome(skipped=skip.reason)
        sent = self.dispatcher.send(datagrams, target.address)
        return LineOutcome(sent=sent, total=len(datagrams))

    def run(self, source: Iterable[str]) -> ShipperStats:
        """Consume ``source`` until it is exhausted or raises."""

        for line in source:
            self.stats.record(self.process_line(line))
        logger.info(
            "Input exhausted after %d lines",
            self.stats.lines,
            extra={
                "records_sent": self.stats.records_sent,
                "datagrams_sent": self.stats.datagrams_sent,
                "skipped": {reason.value: count for reason, count in self.stats.skipped.items()},
            },
        )
        return self.stats

    def _log_skip(self, skip: RecordSkipped, line: str) -> None:
        level = _SKIP_LOG_LEVELS[skip.reason]
        if not logger.isEnabledFor(level):
            return
        if skip.reason is SkipReason.MALFORMED:
            logger.log(level, "Parsing error: %s, line: %s", skip.detail, line, extra={"reason": skip.reason.value})
        elif skip.reason is SkipReason.NO_MESSAGE:
            logger.log(level, "No MESSAGE field found", extra={"reason": skip.reason.value})
        else:
            logger.log(level, "Record dropped: %s", skip.detail, extra={"reason": skip.reason.value})
