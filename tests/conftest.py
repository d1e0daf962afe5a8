from __future__ import annotations

import logging
import socket
from typing import Iterator, Tuple

import pytest

from journal2graylog.core.manager import GLOBAL_MANAGER, LOGGER_NAMESPACE


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    yield
    GLOBAL_MANAGER.shutdown()
    package_logger = logging.getLogger(LOGGER_NAMESPACE)
    package_logger.handlers = []
    package_logger.setLevel(logging.NOTSET)
    package_logger.propagate = True


@pytest.fixture
def receiver() -> Iterator[Tuple[socket.socket, Tuple[str, int]]]:
    """A loopback UDP socket standing in for the Graylog input."""

    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    sock.settimeout(2.0)
    try:
        yield sock, sock.getsockname()
    finally:
        sock.close()
