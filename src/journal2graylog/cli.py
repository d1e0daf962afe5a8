"""Command line entry point."""

from __future__ import annotations

import argparse
import sys
from typing import Any, Dict, List, Sequence

from . import api
from .core.errors import ShipperError
from .core.levels import TRACE_LEVEL_NAME
from .core.manager import GLOBAL_MANAGER
from .core.severity import CANONICAL_NAMES
from .core.validation import MAX_FIELD_VALUE_LEN, ConfigurationError
from .version import __version__

logger = GLOBAL_MANAGER.get_logger("cli")

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130

_MESSAGE_LEVELS = ["fatal", "panic", *CANONICAL_NAMES]


def _name(value: str) -> str:
    if len(value.encode("utf-8")) > MAX_FIELD_VALUE_LEN:
        raise argparse.ArgumentTypeError("Provided name is too long")
    return value


def _field(value: str) -> tuple[str, str]:
    name, sep, field_value = value.partition("=")
    if not sep or not name.strip():
        raise argparse.ArgumentTypeError(f"Expected NAME=VALUE, got {value!r}")
    return name.strip(), _name(field_value)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="journal2graylog",
        description="Read logs from stdin/journalctl and send them to Graylog as GELF over UDP",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", metavar="PATH", help="Configuration file (TOML or YAML)")
    parser.add_argument("-s", "--source", choices=["journal", "stdin"], help="Log source")
    parser.add_argument("-t", "--target", metavar="HOST:PORT", help="Address of the Graylog GELF UDP input")
    parser.add_argument("-p", "--port", type=int, metavar="PORT", help="Local UDP port to send from (0 = any)")
    parser.add_argument("--ttl", type=float, metavar="SECS", help="Period of re-resolving the target address")
    parser.add_argument("-c", "--comp", dest="compression", choices=["none", "gzip", "zlib"], help="Message compression")
    parser.add_argument("--chunk-size", metavar="wan|lan|BYTES", help="Maximum payload bytes per datagram")
    parser.add_argument(
        "-l",
        "--sys",
        dest="system_level",
        type=str.lower,
        choices=[*CANONICAL_NAMES, "informational"],
        help="System logging level threshold",
    )
    parser.add_argument(
        "-m",
        "--msg",
        dest="message_level",
        type=str.lower,
        choices=_MESSAGE_LEVELS,
        help="Message filter logging level threshold",
    )
    parser.add_argument(
        "-f",
        "--field",
        dest="fields",
        action="append",
        type=_field,
        default=[],
        metavar="NAME=VALUE",
        help="Static additional field attached to every record (repeatable)",
    )
    parser.add_argument("--team", type=_name, help="Optional team name")
    parser.add_argument("--service", type=_name, help="Optional service name")
    parser.add_argument("--log-format", choices=["text", "jsonl"], help="Format of the shipper's own logs")
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase diagnostics verbosity (-v debug, -vv trace)",
    )
    return parser


def overrides_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    """Translate parsed arguments into a configuration override mapping."""

    overrides: Dict[str, Any] = {}

    def put(section: str, key: str, value: Any) -> None:
        if value is not None:
            overrides.setdefault(section, {})[key] = value

    put("source", "kind", args.source)
    put("target", "address", args.target)
    put("target", "sender_port", args.port)
    put("target", "ttl_s", args.ttl)
    put("gelf", "compression", args.compression)
    put("gelf", "chunk_size", args.chunk_size)
    put("filters", "system_level", args.system_level)
    put("filters", "message_level", args.message_level)
    for name, value in args.fields:
        put("fields", name, value)
    put("fields", "team", args.team)
    put("fields", "service", args.service)
    put("logging", "format", args.log_format)
    if args.verbose == 1:
        put("logging", "level", "DEBUG")
    elif args.verbose > 1:
        put("logging", "level", TRACE_LEVEL_NAME)
    return overrides


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = api.configure(overrides_from_args(args), config_file=args.config)
    except ConfigurationError as exc:
        parser.print_usage(sys.stderr)
        print(f"{parser.prog}: configuration error: {exc}", file=sys.stderr)
        return EXIT_USAGE

    try:
        api.run(config)
    except ShipperError as exc:
        logger.error("%s processing stopped: %s", config.source.kind, exc)
        return EXIT_FATAL
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return EXIT_INTERRUPTED
    finally:
        GLOBAL_MANAGER.shutdown()
    return EXIT_OK


def run(argv: List[str] | None = None) -> None:
    sys.exit(main(argv))
