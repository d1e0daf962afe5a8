"""Outbound UDP socket for GELF datagrams."""

from __future__ import annotations

import logging
import socket
from typing import Any, Iterable, Tuple

from ..core.errors import DispatchError

__all__ = ["UDPDispatcher"]

logger = logging.getLogger(__name__)


class UDPDispatcher:
    """Send datagrams from a single socket bound for the process lifetime."""

    def __init__(self, port: int = 0, family: int = socket.AF_INET) -> None:
        bind_host = "::" if family == socket.AF_INET6 else "0.0.0.0"
        try:
            self._sock = socket.socket(family, socket.SOCK_DGRAM)
        except OSError as exc:
            raise DispatchError(f"Cannot create UDP socket: {exc}") from exc
        try:
            self._sock.bind((bind_host, port))
        except OSError as exc:
            self._sock.close()
            raise DispatchError(f"Cannot bind UDP socket to {bind_host}:{port}: {exc}") from exc
        self.family = family
        logger.debug("Sender bound to %s", self._sock.getsockname())

    @property
    def local_address(self) -> Tuple[Any, ...]:
        return self._sock.getsockname()

    def send(self, datagrams: Iterable[bytes], address: Tuple[Any, ...]) -> int:
        """Send every datagram; failures are logged and do not stop the rest."""

        sent = 0
        for index, datagram in enumerate(datagrams):
            try:
                self._sock.sendto(datagram, address)
            except OSError as exc:
                logger.error("Sending datagram %d to %s failed: %s", index, address, exc)
                continue
            sent += 1
        return sent

    def close(self) -> None:
        self._sock.close()

    def __enter__(self) -> "UDPDispatcher":
        return self

    def __exit__(self, exc_type, exc: BaseException | None, tb) -> None:  # type: ignore[override]
        self.close()
