"""GELF message model, compression and chunked UDP framing."""

from .chunking import ChunkedMessage
from .compression import Compression
from .encoder import GelfEncoder
from .message import GELF_VERSION, GelfMessage

__all__ = ["ChunkedMessage", "Compression", "GelfEncoder", "GelfMessage", "GELF_VERSION"]
