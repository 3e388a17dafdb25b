"""Shared fixtures for unit tests."""

import logging

import pytest

from static_server.domain.correlation_id import clear_correlation_id


@pytest.fixture(autouse=True)
def enable_log_propagation():
    """Ensure logs propagate to root so caplog can catch them."""
    logger = logging.getLogger("static_server")
    old_propagate = logger.propagate
    old_level = logger.level
    old_handlers = list(logger.handlers)
    logger.propagate = True
    yield
    for handler in logger.handlers:
        if handler not in old_handlers:
            handler.close()
    logger.handlers[:] = old_handlers
    logger.setLevel(old_level)
    logger.propagate = old_propagate
    clear_correlation_id()


class FakeSocket:
    """Socket stand-in that replays inbound chunks and records outbound bytes."""

    def __init__(self, chunks=(), send_error=None, recv_error=None):
        self._chunks = [
            chunk if isinstance(chunk, bytes) else chunk.encode() for chunk in chunks
        ]
        self._send_error = send_error
        self._recv_error = recv_error
        self.sent = b""
        self.timeout = None
        self.shutdown_calls = 0
        self.close_calls = 0

    def recv(self, _size):
        """Return the next chunk or an empty bytes object when exhausted."""
        if self._recv_error is not None:
            raise self._recv_error
        if self._chunks:
            return self._chunks.pop(0)
        return b""

    def sendall(self, data):
        """Record data unless a send failure has been configured."""
        if self._send_error is not None:
            raise self._send_error
        self.sent += data

    def settimeout(self, value):
        self.timeout = value

    def shutdown(self, _how):
        self.shutdown_calls += 1

    def close(self):
        self.close_calls += 1


@pytest.fixture(name="fake_socket_factory")
def fixture_fake_socket_factory():
    """Build FakeSocket instances inside tests."""
    return FakeSocket
