"""Destination address resolution with TTL-based refresh."""

from __future__ import annotations

import logging
import socket
from dataclasses import dataclass
from typing import Any, Callable, Tuple

from ..core.errors import ResolutionError
from ..utils.time import epoch_seconds

__all__ = ["ResolvedTarget", "TargetResolver", "parse_host_spec", "resolve"]

logger = logging.getLogger(__name__)

SocketAddress = Tuple[Any, ...]


@dataclass(frozen=True, slots=True)
class ResolvedTarget:
    address: SocketAddress
    family: int
    resolved_at: float

    def age(self, now: float) -> float:
        return now - self.resolved_at


def parse_host_spec(host_spec: str) -> Tuple[str, int]:
    """Split ``host:port`` (or ``[v6addr]:port``) into its parts."""

    spec = host_spec.strip()
    if spec.startswith("["):
        host, sep, rest = spec[1:].partition("]")
        if not sep or not rest.startswith(":"):
            raise ResolutionError(f"Malformed target address: {host_spec!r}")
        port_str = rest[1:]
    else:
        host, sep, port_str = spec.rpartition(":")
        if not sep or ":" in host:
            raise ResolutionError(f"Malformed target address: {host_spec!r}")
    if not host:
        raise ResolutionError(f"Missing host in target address: {host_spec!r}")
    if not port_str.isdigit() or not 0 < int(port_str) < 65536:
        raise ResolutionError(f"Bad port in target address: {host_spec!r}")
    return host, int(port_str)


def resolve(
    host_spec: str,
    *,
    clock: Callable[[], float] = epoch_seconds,
    family: int = socket.AF_UNSPEC,
) -> ResolvedTarget:
    """Resolve ``host_spec`` and keep the first address returned.

    ``family`` restricts the lookup, e.g. to the family the sender socket was
    bound for.
    """

    host, port = parse_host_spec(host_spec)
    try:
        infos = socket.getaddrinfo(host, port, family=family, type=socket.SOCK_DGRAM)
    except (socket.gaierror, UnicodeError) as exc:
        raise ResolutionError(f"Cannot resolve {host_spec!r}: {exc}") from exc
    if not infos:
        raise ResolutionError(f"No addresses found for {host_spec!r}")
    family, _, _, _, address = infos[0]
    return ResolvedTarget(address=tuple(address), family=int(family), resolved_at=clock())


class TargetResolver:
    """Own the cached target and refresh it once its age exceeds ``ttl``.

    Only the first resolution is fatal. Later failures keep the stale
    address and restart the TTL window, so the lookup is retried at most
    once per ``ttl`` seconds. Refreshes are restricted to the address family
    of the first resolution because the sender socket is bound for it.
    """

    def __init__(
        self,
        host_spec: str,
        ttl: float,
        *,
        clock: Callable[[], float] = epoch_seconds,
        resolver: Callable[..., ResolvedTarget] = resolve,
    ) -> None:
        self.host_spec = host_spec
        self.ttl = ttl
        self._clock = clock
        self._resolve = resolver
        self._target: ResolvedTarget | None = None

    def start(self) -> ResolvedTarget:
        self._target = self._resolve(self.host_spec, clock=self._clock)
        logger.info("Resolved %s to %s", self.host_spec, self._target.address)
        return self._target

    def current(self) -> ResolvedTarget:
        if self._target is None:
            return self.start()
        now = self._clock()
        if self._target.age(now) <= self.ttl:
            return self._target
        try:
            fresh = self._resolve(self.host_spec, clock=self._clock, family=self._target.family)
            if fresh.family != self._target.family:
                raise ResolutionError(f"{fresh.address} is not in the address family of the sender socket")
        except ResolutionError as exc:
            logger.warning(
                "Re-resolving %s failed, keeping %s: %s",
                self.host_spec,
                self._target.address,
                exc,
            )
            self._target = ResolvedTarget(self._target.address, self._target.family, now)
            return self._target
        if fresh.address != self._target.address:
            logger.info("Target %s moved from %s to %s", self.host_spec, self._target.address, fresh.address)
        self._target = fresh
        return fresh
