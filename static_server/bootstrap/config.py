"""Server configuration and CLI argument parsing."""

import argparse
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from static_server.domain.errors import ConfigError


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value is not None else default


DEFAULT_PORT = 8084
DEFAULT_ROOT = "."
DEFAULT_HOST = os.getenv("STATIC_SERVER_HOST", "localhost")
DEFAULT_SOCKET_TIMEOUT = _env_int("STATIC_SERVER_SOCKET_TIMEOUT", 0)
DEFAULT_MAX_HEADER_BYTES = _env_int("STATIC_SERVER_MAX_HEADER_BYTES", 8192)

HTTP_VERSION = "HTTP/1.0"
LISTEN_BACKLOG = 10
RECV_CHUNK_BYTES = 4096
FILE_CHUNK_BYTES = 8192
DEFAULT_DOCUMENT = "index.html"


@dataclass(frozen=True)
class ServerConfig:
    """Immutable settings shared by the listener and the resolver."""

    host: str
    port: int
    root: str
    socket_timeout: Optional[float] = None
    max_header_bytes: int = DEFAULT_MAX_HEADER_BYTES


def _port(value: str) -> int:
    try:
        port = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid port: {value!r}") from exc
    if not 0 < port < 65536:
        raise argparse.ArgumentTypeError(f"port out of range: {port}")
    return port


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}") from exc
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {number}")
    return number


def _non_negative_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}") from exc
    if number < 0:
        raise argparse.ArgumentTypeError(f"must not be negative: {number}")
    return number


def parse_cli_args(argv: list[str]) -> argparse.Namespace:
    """Return parsed CLI arguments for server configuration."""
    parser = argparse.ArgumentParser(
        description="Serve files from a directory over HTTP/1.0"
    )
    parser.add_argument("-p", "--port", type=_port, default=DEFAULT_PORT)
    parser.add_argument(
        "-r",
        "--root",
        default=DEFAULT_ROOT,
        help="Directory to serve files from",
    )
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument(
        "--socket-timeout",
        type=_non_negative_float,
        default=DEFAULT_SOCKET_TIMEOUT,
        help="Client socket timeout in seconds (0 blocks indefinitely)",
    )
    parser.add_argument(
        "--max-header-bytes",
        type=_positive_int,
        default=DEFAULT_MAX_HEADER_BYTES,
        help="Upper bound on the size of a request head",
    )
    default_log_level = os.getenv("STATIC_SERVER_LOG_LEVEL", "INFO").upper()
    default_destination = os.getenv("STATIC_SERVER_LOG_DESTINATION", "stdout")
    default_format = os.getenv("STATIC_SERVER_LOG_FORMAT", "json").lower()
    parser.add_argument(
        "--log-level",
        default=default_log_level,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
    )
    parser.add_argument(
        "--log-destination",
        default=default_destination,
        help="stdout or a file path",
    )
    parser.add_argument(
        "--log-format",
        default=default_format,
        choices=["json", "text"],
        type=str.lower,
    )
    return parser.parse_args(argv)


def build_server_config(args: argparse.Namespace) -> ServerConfig:
    """Validate parsed arguments and freeze them into a ServerConfig."""
    root = Path(args.root)
    if not root.is_dir():
        raise ConfigError(f"root is not a directory: {args.root}")
    if not os.access(root, os.R_OK | os.X_OK):
        raise ConfigError(f"root is not readable: {args.root}")
    return ServerConfig(
        host=args.host,
        port=args.port,
        root=str(root),
        socket_timeout=args.socket_timeout or None,
        max_header_bytes=args.max_header_bytes,
    )
