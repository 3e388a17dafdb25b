"""Pure HTTP response builders."""

from typing import BinaryIO

from static_server.domain.http_types import Header, HttpResponse

ALLOWED_METHODS = ("GET",)


def _empty_headers() -> list[Header]:
    return [Header("Content-Length", "0"), Header("Connection", "close")]


def file_response(body: BinaryIO, content_type: str, size: int) -> HttpResponse:
    """Return a 200 response that streams ``body`` after the head."""
    headers = [
        Header("Content-Type", content_type),
        Header("Content-Length", str(size)),
        Header("Connection", "close"),
    ]
    return HttpResponse("200 OK", headers, body)


def bad_request_response() -> HttpResponse:
    """Produce a 400 response for unparseable requests."""
    return HttpResponse("400 Bad Request", _empty_headers())


def forbidden_response() -> HttpResponse:
    """Produce a 403 response for paths outside the root."""
    return HttpResponse("403 Forbidden", _empty_headers())


def not_found_response() -> HttpResponse:
    """Return a 404 response without a body handle."""
    return HttpResponse("404 Not Found", _empty_headers())


def method_not_allowed_response() -> HttpResponse:
    """Produce a 405 response enumerating the supported HTTP methods."""
    headers = [Header("Allow", ", ".join(ALLOWED_METHODS)), *_empty_headers()]
    return HttpResponse("405 Method Not Allowed", headers)


def not_implemented_response() -> HttpResponse:
    """Produce a 501 response for methods the server does not recognise."""
    return HttpResponse("501 Not Implemented", _empty_headers())


def internal_error_response() -> HttpResponse:
    """Produce a 500 response when the connection fails before sending."""
    return HttpResponse("500 Internal Server Error", _empty_headers())
