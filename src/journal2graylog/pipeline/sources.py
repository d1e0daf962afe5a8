"""Line sources feeding the ingestion loop."""

from __future__ import annotations

import io
import logging
import subprocess
import sys
from typing import IO, Iterator, List, Sequence

from ..core.errors import SourceClosedError, SourceSpawnError, UnsupportedPlatformError

__all__ = ["JournalSource", "StdinSource", "is_platform_supported"]

logger = logging.getLogger(__name__)


def is_platform_supported() -> bool:
    return sys.platform.startswith("linux")


class StdinSource:
    """Yield lines from a text stream until end of input.

    Undecodable bytes are replaced rather than ending the stream, as for the
    journal reader's output.
    """

    def __init__(self, stream: IO[str] | None = None) -> None:
        if stream is None:
            stream = sys.stdin
            if isinstance(stream, io.TextIOWrapper):
                stream.reconfigure(encoding="utf-8", errors="replace")
        elif isinstance(stream, io.TextIOWrapper):
            stream.reconfigure(errors="replace")
        self.stream = stream

    def __iter__(self) -> Iterator[str]:
        logger.debug("Start reading from stdin")
        for line in self.stream:
            yield line
        logger.debug("Reached end of stdin")

    def close(self) -> None:
        """Standard input belongs to the process; nothing to release."""


class JournalSource:
    """Run the journal reader as a child process and yield its output lines.

    The reader is the only data source, so end of its standard output is
    fatal: iteration raises :class:`SourceClosedError` carrying whatever the
    child wrote to standard error.
    """

    def __init__(self, command: Sequence[str], *, check_platform: bool = True) -> None:
        self.command: List[str] = list(command)
        self.check_platform = check_platform
        self._process: subprocess.Popen[str] | None = None

    def check_supported(self) -> None:
        if self.check_platform and not is_platform_supported():
            raise UnsupportedPlatformError(f"Journal source is not supported on {sys.platform}")

    def start(self) -> None:
        self.check_supported()
        try:
            self._process = subprocess.Popen(
                self.command,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                bufsize=1,
            )
        except OSError as exc:
            raise SourceSpawnError(f"Cannot start {' '.join(self.command)!r}: {exc}") from exc
        logger.debug("Started %s (pid %s)", " ".join(self.command), self._process.pid)

    def __iter__(self) -> Iterator[str]:
        if self._process is None:
            self.start()
        process = self._process
        assert process is not None and process.stdout is not None

        while True:
            line = process.stdout.readline()
            if line == "":
                break
            if not line.strip():
                continue
            yield line

        stderr = process.stderr.read() if process.stderr is not None else ""
        returncode = process.wait()
        raise SourceClosedError(stderr, returncode)

    def close(self) -> None:
        process = self._process
        if process is None:
            return
        if process.poll() is None:
            process.terminate()
            try:
                process.wait(timeout=5)
            except subprocess.TimeoutExpired:
                process.kill()
                process.wait()
        for stream in (process.stdout, process.stderr):
            if stream is not None:
                stream.close()
        self._process = None
