"""Server and per-connection lifecycle state management."""

import logging
import threading
from enum import Enum

from static_server.domain.correlation_id import CorrelationLoggerAdapter

LIFECYCLE_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("static_server.lifecycle"), {}
)


class ConnectionState(str, Enum):
    """Stages a single client connection moves through."""

    LISTENING = "listening"
    ACCEPTED = "accepted"
    PARSING = "parsing"
    RESOLVING = "resolving"
    SENDING = "sending"
    CLOSED = "closed"


_TRANSITIONS = {
    ConnectionState.LISTENING: {ConnectionState.ACCEPTED},
    ConnectionState.ACCEPTED: {ConnectionState.PARSING},
    ConnectionState.PARSING: {ConnectionState.RESOLVING, ConnectionState.SENDING},
    ConnectionState.RESOLVING: {ConnectionState.SENDING},
    ConnectionState.SENDING: set(),
    ConnectionState.CLOSED: set(),
}


class IllegalTransition(RuntimeError):
    """Raised when a connection is moved to a state it cannot reach."""


class ConnectionLifecycle:
    """Tracks one connection from accept to close.

    Any state other than CLOSED may jump straight to CLOSED so failures at
    any stage still terminate cleanly. CLOSED is terminal.
    """

    def __init__(self, initial: ConnectionState = ConnectionState.LISTENING) -> None:
        self._state = initial
        self._history = [initial]

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def history(self) -> list[ConnectionState]:
        return list(self._history)

    @property
    def closed(self) -> bool:
        return self._state is ConnectionState.CLOSED

    def advance(self, next_state: ConnectionState) -> None:
        """Move to ``next_state`` or raise IllegalTransition."""
        allowed = _TRANSITIONS[self._state]
        if next_state is ConnectionState.CLOSED and not self.closed:
            allowed = allowed | {ConnectionState.CLOSED}
        if next_state not in allowed:
            raise IllegalTransition(f"{self._state.value} -> {next_state.value}")
        self._state = next_state
        self._history.append(next_state)
        if LIFECYCLE_LOGGER.logger.isEnabledFor(logging.DEBUG):
            LIFECYCLE_LOGGER.debug(
                "Connection state changed",
                extra={"event": "state_changed", "state": next_state.value},
            )


class ServerLifecycle:
    """Stop flag shared between signal handlers and the accept loop."""

    def __init__(self) -> None:
        self._stop_event = threading.Event()

    def should_stop(self) -> bool:
        """Check if the server should stop accepting new connections."""
        return self._stop_event.is_set()

    def request_stop(self) -> None:
        """Ask the accept loop to exit after the current connection."""
        self._stop_event.set()
        LIFECYCLE_LOGGER.info("Stop requested", extra={"event": "stop_requested"})
