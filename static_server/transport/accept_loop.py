"""Sequential connection acceptance loop."""

import logging
import socket

from static_server.bootstrap.config import ServerConfig
from static_server.bootstrap.socket_factory import create_server_socket
from static_server.domain.correlation_id import CorrelationLoggerAdapter
from static_server.lifecycle.state import (
    ConnectionLifecycle,
    ConnectionState,
    ServerLifecycle,
)
from static_server.transport.worker import handle_client

ACCEPT_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("static_server.transport.accept"), {}
)


def run_server(config: ServerConfig, lifecycle: ServerLifecycle) -> None:
    """Accept clients one at a time, serving each before the next accept."""

    server_socket = create_server_socket(config)

    ACCEPT_LOGGER.info(
        "Server listening for connections",
        extra={
            "event": "server_listening",
            "host": config.host,
            "port": config.port,
            "root": config.root,
        },
    )

    try:
        while not lifecycle.should_stop():
            connection = ConnectionLifecycle()
            try:
                client_socket, client_address = server_socket.accept()
            except socket.timeout:
                continue
            except OSError as error:
                if lifecycle.should_stop():
                    break
                ACCEPT_LOGGER.error(
                    "Socket accept failed",
                    extra={
                        "event": "accept_error",
                        "error_type": type(error).__name__,
                        "errno": error.errno,
                    },
                )
                continue

            connection.advance(ConnectionState.ACCEPTED)
            if ACCEPT_LOGGER.logger.isEnabledFor(logging.DEBUG):
                ACCEPT_LOGGER.debug(
                    "Client connection accepted",
                    extra={
                        "event": "client_accepted",
                        "client": f"{client_address[0]}:{client_address[1]}",
                    },
                )
            handle_client(client_socket, client_address, config, connection)
    finally:
        server_socket.close()
        ACCEPT_LOGGER.info(
            "Server shutdown complete", extra={"event": "server_stopped"}
        )
