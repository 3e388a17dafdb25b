"""Drive one client connection from parse to close."""

import logging
import socket
import time
from dataclasses import dataclass
from typing import Optional

from static_server.bootstrap.config import ServerConfig
from static_server.domain.correlation_id import (
    CorrelationLoggerAdapter,
    clear_correlation_id,
    generate_correlation_id,
    set_correlation_id,
)
from static_server.domain.errors import (
    ErrorKind,
    MalformedRequest,
    ReceiveFailure,
    RequestTooLarge,
    SendFailure,
)
from static_server.domain.http_types import HttpRequest, HttpResponse
from static_server.domain.response_builders import (
    bad_request_response,
    internal_error_response,
)
from static_server.handlers.file_handler import resolve_resource
from static_server.lifecycle.state import ConnectionLifecycle, ConnectionState
from static_server.pipeline.io import receive_request, send_response
from static_server.pipeline.parser import parse_request
from static_server.pipeline.validation import enforce_allowed_method

WORKER_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("static_server.transport.worker"), {}
)


@dataclass
class _ConnectionResources:
    client_socket: socket.socket
    client_addr_str: str
    request: Optional[HttpRequest] = None
    response: Optional[HttpResponse] = None


def _read_request(
    resources: _ConnectionResources, config: ServerConfig
) -> Optional[HttpResponse]:
    """Receive and parse the request; return a 400 response on failure."""
    try:
        raw = receive_request(resources.client_socket, config.max_header_bytes)
        resources.request = parse_request(raw)
    except RequestTooLarge:
        WORKER_LOGGER.warning(
            "Request head exceeded limit",
            extra={
                "event": "header_too_large",
                "client": resources.client_addr_str,
                "max_header_bytes": config.max_header_bytes,
            },
        )
        return bad_request_response()
    except MalformedRequest as error:
        WORKER_LOGGER.warning(
            "Malformed request received",
            extra={
                "event": "malformed_request",
                "client": resources.client_addr_str,
                "error": str(error),
            },
        )
        return bad_request_response()
    except ReceiveFailure as error:
        WORKER_LOGGER.error(
            "Failed to read request",
            extra={
                "event": "receive_failed",
                "client": resources.client_addr_str,
                "error_kind": error.kind.value,
                "error": str(error),
            },
        )
        return bad_request_response()
    return None


def _build_response(
    request: HttpRequest,
    config: ServerConfig,
    lifecycle: ConnectionLifecycle,
    client_addr_str: str,
) -> HttpResponse:
    rejection = enforce_allowed_method(request)
    if rejection is not None:
        WORKER_LOGGER.info(
            "Method rejected",
            extra={
                "event": "method_rejected",
                "client": client_addr_str,
                "method": request.method,
                "status_code": rejection.status_code,
            },
        )
        return rejection
    lifecycle.advance(ConnectionState.RESOLVING)
    return resolve_resource(request, config.root)


def _send(resources: _ConnectionResources) -> int:
    try:
        return send_response(resources.client_socket, resources.response)
    except SendFailure as error:
        WORKER_LOGGER.warning(
            "Failed to send response",
            extra={
                "event": "send_failed",
                "client": resources.client_addr_str,
                "error_kind": error.kind.value,
                "error": str(error),
            },
        )
        return 0


def _send_internal_error(
    resources: _ConnectionResources, lifecycle: ConnectionLifecycle
) -> None:
    """Answer with a 500 unless the response head may already be on the wire."""
    if lifecycle.state not in (ConnectionState.PARSING, ConnectionState.RESOLVING):
        return
    if resources.response is not None:
        resources.response.close()
    resources.response = internal_error_response()
    lifecycle.advance(ConnectionState.SENDING)
    _send(resources)


def _cleanup_connection(
    resources: _ConnectionResources, lifecycle: ConnectionLifecycle
) -> None:
    if resources.response is not None:
        resources.response.close()
    resources.request = None

    try:
        resources.client_socket.shutdown(socket.SHUT_WR)
    except OSError:
        pass
    resources.client_socket.close()

    if not lifecycle.closed:
        lifecycle.advance(ConnectionState.CLOSED)
    WORKER_LOGGER.debug(
        "Socket closed",
        extra={"event": "socket_closed", "client": resources.client_addr_str},
    )
    clear_correlation_id()


def handle_client(
    client_socket: socket.socket,
    client_address: tuple[str, int],
    config: ServerConfig,
    lifecycle: Optional[ConnectionLifecycle] = None,
) -> ConnectionLifecycle:
    """Serve exactly one request on ``client_socket`` and close it.

    Every exit path releases the response file and the socket once and
    leaves the lifecycle in CLOSED.
    """
    if lifecycle is None:
        lifecycle = ConnectionLifecycle(ConnectionState.ACCEPTED)
    set_correlation_id(generate_correlation_id())
    client_addr_str = f"{client_address[0]}:{client_address[1]}"
    resources = _ConnectionResources(client_socket, client_addr_str)
    started_ns = time.monotonic_ns()

    try:
        if config.socket_timeout is not None:
            client_socket.settimeout(config.socket_timeout)

        lifecycle.advance(ConnectionState.PARSING)
        resources.response = _read_request(resources, config)
        if resources.response is None:
            resources.response = _build_response(
                resources.request, config, lifecycle, client_addr_str
            )

        lifecycle.advance(ConnectionState.SENDING)
        bytes_out = _send(resources)

        WORKER_LOGGER.info(
            "Request complete",
            extra={
                "event": "request_complete",
                "client": client_addr_str,
                "method": resources.request.method if resources.request else None,
                "route": resources.request.path if resources.request else None,
                "status_code": resources.response.status_code,
                "bytes_out": bytes_out,
                "duration_ms": (time.monotonic_ns() - started_ns) / 1_000_000,
            },
        )
    except MemoryError:
        WORKER_LOGGER.error(
            "Out of memory while handling connection",
            extra={
                "event": "connection_error",
                "client": client_addr_str,
                "error_kind": ErrorKind.ALLOCATION.value,
            },
        )
    except Exception as error:  # pylint: disable=broad-except
        WORKER_LOGGER.error(
            "Unexpected error handling connection",
            extra={
                "event": "connection_error",
                "client": client_addr_str,
                "state": lifecycle.state.value,
                "error_type": type(error).__name__,
                "error": str(error),
            },
            exc_info=True,
        )
        _send_internal_error(resources, lifecycle)
    finally:
        _cleanup_connection(resources, lifecycle)
    return lifecycle
