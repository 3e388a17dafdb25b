"""Unit tests for the listener socket and the sequential accept loop."""

import errno
import logging
import socket
from unittest.mock import MagicMock, patch

import pytest

from static_server.bootstrap.config import LISTEN_BACKLOG, ServerConfig
from static_server.bootstrap.socket_factory import create_server_socket
from static_server.lifecycle.state import ConnectionState, ServerLifecycle
from static_server.transport.accept_loop import run_server


@pytest.fixture(name="config")
def fixture_config(tmp_path):
    """Minimal config for the accept loop."""
    return ServerConfig(host="localhost", port=8084, root=str(tmp_path))


@pytest.fixture(name="lifecycle")
def fixture_lifecycle():
    """Lifecycle mock that lets the loop run a fixed number of iterations."""
    lifecycle = MagicMock(spec=ServerLifecycle)
    lifecycle.should_stop.side_effect = [False, True]
    return lifecycle


def test_accept_loop_logs_server_listening(config, lifecycle, caplog):
    """Verify server_listening and server_stopped events are logged."""
    caplog.set_level(logging.INFO)

    with patch("static_server.transport.accept_loop.create_server_socket") as create:
        server_sock = MagicMock()
        server_sock.accept.side_effect = socket.timeout()
        create.return_value = server_sock
        run_server(config, lifecycle)

    events = [getattr(r, "event", None) for r in caplog.records]
    assert "server_listening" in events
    assert "server_stopped" in events
    listening = next(
        r for r in caplog.records if getattr(r, "event", None) == "server_listening"
    )
    assert listening.port == 8084
    server_sock.close.assert_called_once()


def test_accept_loop_serves_clients_sequentially(config, caplog):
    """Each accepted client is fully handled before the next accept."""
    caplog.set_level(logging.DEBUG)
    lifecycle = MagicMock(spec=ServerLifecycle)
    lifecycle.should_stop.side_effect = [False, False, True]
    order = []

    first, second = MagicMock(), MagicMock()
    server_sock = MagicMock()

    def accept():
        order.append("accept")
        return [(first, ("127.0.0.1", 1)), (second, ("127.0.0.1", 2))][
            order.count("accept") - 1
        ]

    server_sock.accept.side_effect = accept

    def fake_handle(client_socket, _address, _config, connection):
        assert connection.state is ConnectionState.ACCEPTED
        order.append("handled")
        return connection

    with patch(
        "static_server.transport.accept_loop.create_server_socket",
        return_value=server_sock,
    ), patch(
        "static_server.transport.accept_loop.handle_client", side_effect=fake_handle
    ) as handle:
        run_server(config, lifecycle)

    assert order == ["accept", "handled", "accept", "handled"]
    assert [call.args[0] for call in handle.call_args_list] == [first, second]
    accepted = [
        r.client
        for r in caplog.records
        if getattr(r, "event", None) == "client_accepted"
    ]
    assert accepted == ["127.0.0.1:1", "127.0.0.1:2"]


def test_accept_loop_survives_accept_errors(config, caplog):
    """A failed accept is logged and the loop keeps going."""
    caplog.set_level(logging.ERROR)
    lifecycle = MagicMock(spec=ServerLifecycle)
    lifecycle.should_stop.side_effect = [False, False, False, True]
    client = MagicMock()
    server_sock = MagicMock()
    server_sock.accept.side_effect = [
        OSError(errno.EMFILE, "Too many open files"),
        (client, ("127.0.0.1", 9)),
    ]

    with patch(
        "static_server.transport.accept_loop.create_server_socket",
        return_value=server_sock,
    ), patch("static_server.transport.accept_loop.handle_client") as handle:
        run_server(config, lifecycle)

    handle.assert_called_once()
    record = next(
        r for r in caplog.records if getattr(r, "event", None) == "accept_error"
    )
    assert record.errno == errno.EMFILE


def test_create_server_socket_binds_with_backlog(config):
    """The listener is bound with the fixed backlog and a poll timeout."""
    with patch("socket.create_server") as create_server:
        sock = create_server_socket(config)
    create_server.assert_called_once_with(("localhost", 8084), backlog=LISTEN_BACKLOG)
    sock.settimeout.assert_called_once()


def test_create_server_socket_exits_on_bind_failure(config, caplog):
    """Failure to establish the listener is fatal."""
    caplog.set_level(logging.CRITICAL)
    with patch(
        "socket.create_server", side_effect=OSError(errno.EADDRINUSE, "in use")
    ), pytest.raises(SystemExit) as excinfo:
        create_server_socket(config)
    assert excinfo.value.code == 1
    record = next(
        r for r in caplog.records if getattr(r, "event", None) == "listen_failed"
    )
    assert record.errno == errno.EADDRINUSE
