"""Request validation utilities for HTTP server."""

from typing import Optional

from static_server.domain.http_types import HttpRequest, HttpResponse
from static_server.domain.response_builders import (
    ALLOWED_METHODS,
    method_not_allowed_response,
    not_implemented_response,
)

KNOWN_METHODS = frozenset(
    {"GET", "HEAD", "POST", "PUT", "DELETE", "OPTIONS", "TRACE", "CONNECT", "PATCH"}
)


def enforce_allowed_method(request: HttpRequest) -> Optional[HttpResponse]:
    """Return an error response unless the method may be resolved.

    Recognised but unsupported methods get 405, anything else 501.
    """
    if request.method in ALLOWED_METHODS:
        return None
    if request.method in KNOWN_METHODS:
        return method_not_allowed_response()
    return not_implemented_response()
