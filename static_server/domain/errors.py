"""Error taxonomy shared by every server component."""

from enum import Enum


class ErrorKind(str, Enum):
    """Broad failure classes used for logging and response selection."""

    TRANSPORT = "transport"
    PROTOCOL = "protocol"
    RESOURCE = "resource"
    ALLOCATION = "allocation"
    CONFIG = "config"


class ServerError(Exception):
    """Base class for failures raised by server components."""

    kind: ErrorKind


class TransportError(ServerError):
    """Socket level failure while talking to a client."""

    kind = ErrorKind.TRANSPORT


class ReceiveFailure(TransportError):
    """Raised when reading the request from the client socket fails."""


class SendFailure(TransportError):
    """Raised when writing the response (or reading its body) fails."""


class ProtocolError(ServerError):
    """The client sent bytes that do not form an acceptable request."""

    kind = ErrorKind.PROTOCOL


class MalformedRequest(ProtocolError):
    """Raised when the request line or a header line cannot be parsed."""


class RequestTooLarge(ProtocolError):
    """Raised when the request head exceeds the configured size bound."""


class ResourceError(ServerError):
    """The requested resource cannot be served."""

    kind = ErrorKind.RESOURCE


class ForbiddenPath(ResourceError):
    """Raised when a requested path escapes the configured root."""


class ConfigError(ServerError):
    """Raised when startup configuration is unusable."""

    kind = ErrorKind.CONFIG
