"""HTTP Input/Output operations."""

import logging
import socket

from static_server.bootstrap.config import (
    FILE_CHUNK_BYTES,
    HTTP_VERSION,
    RECV_CHUNK_BYTES,
)
from static_server.domain.correlation_id import CorrelationLoggerAdapter
from static_server.domain.errors import ReceiveFailure, RequestTooLarge, SendFailure
from static_server.domain.http_types import HttpResponse

IO_LOGGER = CorrelationLoggerAdapter(logging.getLogger("static_server.io"), {})

HEAD_TERMINATORS = (b"\r\n\r\n", b"\n\n")
CRLF = "\r\n"


def _head_end(buffer: bytes) -> int:
    """Return the index just past the blank line, or -1."""
    ends = []
    for terminator in HEAD_TERMINATORS:
        index = buffer.find(terminator)
        if index != -1:
            ends.append(index + len(terminator))
    return min(ends) if ends else -1


def receive_request(client_socket: socket.socket, max_header_bytes: int) -> bytes:
    """Read the request head from the socket.

    Stops at the first blank line or when the peer stops sending. Raises
    RequestTooLarge once more than ``max_header_bytes`` arrive without a
    terminator and ReceiveFailure on socket errors.
    """
    buffer = b""
    while True:
        end = _head_end(buffer)
        size = end if end != -1 else len(buffer)
        if size > max_header_bytes:
            raise RequestTooLarge(f"request head exceeds {max_header_bytes} bytes")
        if end != -1:
            return buffer[:end]
        try:
            chunk = client_socket.recv(RECV_CHUNK_BYTES)
        except OSError as error:
            raise ReceiveFailure(str(error)) from error
        if not chunk:
            return buffer
        buffer += chunk


def serialize_head(response: HttpResponse) -> bytes:
    """Render the status line, headers and blank line exactly as stored."""
    lines = [f"{HTTP_VERSION} {response.status}"]
    lines.extend(f"{header.name}: {header.value}" for header in response.headers)
    return (CRLF.join(lines) + CRLF + CRLF).encode("iso-8859-1")


def send_response(
    client_socket: socket.socket,
    response: HttpResponse,
    chunk_size: int = FILE_CHUNK_BYTES,
) -> int:
    """Write the response head and, when present, the body file in chunks.

    Returns the number of bytes written. Socket or file errors are re-raised
    as SendFailure.
    """
    head = serialize_head(response)
    bytes_out = 0
    try:
        client_socket.sendall(head)
        bytes_out += len(head)
        if response.body is not None:
            while True:
                chunk = response.body.read(chunk_size)
                if not chunk:
                    break
                client_socket.sendall(chunk)
                bytes_out += len(chunk)
    except OSError as error:
        raise SendFailure(str(error)) from error

    IO_LOGGER.debug(
        "Sent response",
        extra={
            "event": "response_sent",
            "status": response.status,
            "bytes_out": bytes_out,
        },
    )
    return bytes_out
