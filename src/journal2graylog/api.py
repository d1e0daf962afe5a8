"""Public API surface for journal2graylog."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import IO, Any, Dict

from .config.loader import load_configuration
from .config.schema import ShipperConfig
from .core.manager import GLOBAL_MANAGER
from .gelf.encoder import GelfEncoder
from .pipeline.shipper import Shipper, ShipperStats
from .pipeline.sources import JournalSource, StdinSource
from .pipeline.transform import RecordTransformer
from .transport.resolver import TargetResolver
from .transport.udp import UDPDispatcher

logger = logging.getLogger(__name__)

LineSource = JournalSource | StdinSource


def configure(overrides: Dict[str, Any] | None = None, *, config_file: str | Path | None = None) -> ShipperConfig:
    """Load configuration and install diagnostics logging."""

    config = load_configuration(overrides or {}, config_file=config_file)
    GLOBAL_MANAGER.configure(config.logging)
    return config


def build_shipper(config: ShipperConfig) -> Shipper:
    """Resolve the target and bind the sender socket.

    Both steps are fatal on failure: there is no address to fall back to
    yet and no socket to send from.
    """

    resolver = TargetResolver(config.target.address, config.target.ttl_s)
    target = resolver.start()
    dispatcher = UDPDispatcher(config.target.sender_port, family=target.family)
    return Shipper(
        transformer=RecordTransformer(config.filters),
        encoder=GelfEncoder(compression=config.gelf.compression, chunk_size=config.gelf.chunk_size),
        resolver=resolver,
        dispatcher=dispatcher,
        static_fields=config.fields,
    )


def build_source(config: ShipperConfig, *, stdin: IO[str] | None = None) -> LineSource:
    if config.source.kind == "stdin":
        return StdinSource(stdin)
    source = JournalSource(config.source.command)
    source.start()
    return source


def run(config: ShipperConfig, *, stdin: IO[str] | None = None) -> ShipperStats:
    """Ship records until the source is exhausted.

    Returns normally only for the standard input source; the journal source
    ends with :class:`~journal2graylog.core.errors.SourceClosedError`.
    """

    if config.source.kind == "journal":
        # Fail on unsupported platforms before touching the network.
        JournalSource(config.source.command).check_supported()
    shipper = build_shipper(config)
    try:
        source = build_source(config, stdin=stdin)
        try:
            logger.info(
                "Shipping %s records to %s",
                config.source.kind,
                config.target.address,
                extra={"compression": str(config.gelf.compression), "system_level": str(config.filters.system_level)},
            )
            return shipper.run(source)
        finally:
            source.close()
    finally:
        shipper.dispatcher.close()
