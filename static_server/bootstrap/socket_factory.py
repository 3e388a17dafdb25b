"""Listening socket creation."""

import logging
import socket
import sys

from static_server.bootstrap.config import LISTEN_BACKLOG, ServerConfig
from static_server.domain.correlation_id import CorrelationLoggerAdapter

SOCKET_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("static_server.socket"), {}
)

ACCEPT_POLL_SECONDS = 0.5


def create_server_socket(config: ServerConfig) -> socket.socket:
    """Bind and listen on the configured address; exit the process on failure."""
    try:
        server_socket = socket.create_server(
            (config.host, config.port), backlog=LISTEN_BACKLOG
        )
    except OSError as error:
        SOCKET_LOGGER.critical(
            "Failed to create listening socket",
            extra={
                "event": "listen_failed",
                "host": config.host,
                "port": config.port,
                "errno": error.errno,
                "error": str(error),
            },
        )
        sys.exit(1)
    server_socket.settimeout(ACCEPT_POLL_SECONDS)
    return server_socket
