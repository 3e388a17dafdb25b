"""HTTP/1.0 static file server entry point."""

import logging
import signal
import sys

from static_server.bootstrap.config import build_server_config, parse_cli_args
from static_server.bootstrap.logging_setup import configure_logging
from static_server.domain.correlation_id import CorrelationLoggerAdapter
from static_server.domain.errors import ConfigError
from static_server.lifecycle.state import ServerLifecycle
from static_server.transport.accept_loop import run_server

SERVER_LOGGER = CorrelationLoggerAdapter(logging.getLogger("static_server.server"), {})


def main(argv=None) -> int:
    """Parse arguments, configure logging and serve until signalled."""
    args = parse_cli_args(sys.argv[1:] if argv is None else argv)
    configure_logging(args.log_level, args.log_destination, args.log_format == "json")

    try:
        config = build_server_config(args)
    except ConfigError as error:
        SERVER_LOGGER.critical(
            "Invalid configuration",
            extra={"event": "config_invalid", "root": args.root, "error": str(error)},
        )
        return 1

    lifecycle = ServerLifecycle()

    def shutdown_handler(signum: int, _frame) -> None:
        SERVER_LOGGER.info(
            "Received shutdown signal",
            extra={"event": "shutdown_signal", "signal": signum},
        )
        lifecycle.request_stop()

    signal.signal(signal.SIGTERM, shutdown_handler)
    signal.signal(signal.SIGINT, shutdown_handler)

    SERVER_LOGGER.info(
        "Starting HTTP server",
        extra={
            "event": "server_starting",
            "host": config.host,
            "port": config.port,
            "root": config.root,
            "socket_timeout": config.socket_timeout,
            "max_header_bytes": config.max_header_bytes,
            "log_destination": args.log_destination,
            "log_level": args.log_level,
        },
    )
    run_server(config, lifecycle)
    return 0


if __name__ == "__main__":
    sys.exit(main())
