"""Convert a raw request head into an HttpRequest."""

import logging
from typing import Union

from static_server.domain.correlation_id import CorrelationLoggerAdapter
from static_server.domain.errors import MalformedRequest
from static_server.domain.http_types import Header, HttpRequest

PARSER_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("static_server.pipeline.parser"), {}
)

# HTTP heads are ISO-8859-1; every byte maps to a code point.
HEAD_ENCODING = "iso-8859-1"


def _split_lines(text: str) -> list[str]:
    return [line[:-1] if line.endswith("\r") else line for line in text.split("\n")]


def parse_request_line(request_line: str) -> tuple[str, str, str]:
    """Split ``METHOD PATH VERSION`` on single spaces, keeping tokens verbatim."""
    tokens = request_line.split(" ")
    if len(tokens) != 3 or not all(tokens):
        raise MalformedRequest(f"Invalid request line: {request_line!r}")
    method, path, version = tokens
    if not path.startswith("/"):
        raise MalformedRequest(f"Request path must start with '/': {path!r}")
    return method, path, version


def parse_header_line(line: str) -> Header:
    """Parse a single ``Name: Value`` line.

    Both parts must be non-empty and printable; tabs are allowed inside the
    value only.
    """
    name, colon, value = line.partition(":")
    if not colon:
        raise MalformedRequest(f"Header line without colon: {line!r}")
    if not name or not name.isprintable() or any(ch.isspace() for ch in name):
        raise MalformedRequest(f"Invalid header name: {name!r}")
    value = value.strip()
    if not value or not value.replace("\t", " ").isprintable():
        raise MalformedRequest(f"Invalid value for header {name!r}")
    return Header(name, value)


def parse_headers(lines: list[str]) -> list[Header]:
    """Parse header lines in order until the first blank line."""
    headers = []
    for line in lines:
        if not line:
            break
        headers.append(parse_header_line(line))
    return headers


def parse_request(raw: Union[bytes, str]) -> HttpRequest:
    """Parse a complete request head.

    Raises MalformedRequest for an empty buffer, a request line that is not
    exactly three tokens, a path without a leading slash, or a header line
    without a colon. Unknown methods are accepted and recorded as-is.
    """
    text = raw.decode(HEAD_ENCODING) if isinstance(raw, bytes) else raw
    if not text.strip():
        raise MalformedRequest("Empty request")

    lines = _split_lines(text)
    method, path, version = parse_request_line(lines[0])
    headers = parse_headers(lines[1:])

    if PARSER_LOGGER.logger.isEnabledFor(logging.DEBUG):
        PARSER_LOGGER.debug(
            "Request parsed",
            extra={
                "event": "request_parsed",
                "method": method,
                "route": path,
                "header_count": len(headers),
            },
        )
    return HttpRequest(method, path, version, headers)
