"""Shared HTTP type definitions to avoid circular imports."""

from dataclasses import dataclass, field
from typing import BinaryIO, Optional


@dataclass(frozen=True)
class Header:
    """A single name/value pair from a request or response head."""

    name: str
    value: str


def _find_header(headers: list[Header], name: str) -> Optional[str]:
    wanted = name.lower()
    for header in headers:
        if header.name.lower() == wanted:
            return header.value
    return None


@dataclass
class HttpRequest:
    """Represents a parsed HTTP request."""

    method: str
    path: str
    version: str
    headers: list[Header] = field(default_factory=list)

    def get_header(self, name: str) -> Optional[str]:
        """Return the first header value matching ``name`` case-insensitively."""
        return _find_header(self.headers, name)


@dataclass
class HttpResponse:
    """Represents an HTTP response to be sent to a client.

    ``body`` is an open file owned by the response; ``close`` releases it.
    """

    status: str
    headers: list[Header] = field(default_factory=list)
    body: Optional[BinaryIO] = None

    @property
    def status_code(self) -> int:
        """Numeric status code parsed from the status string."""
        return int(self.status.split(" ", 1)[0])

    def get_header(self, name: str) -> Optional[str]:
        return _find_header(self.headers, name)

    def close(self) -> None:
        """Close the body file if one is attached. Safe to call repeatedly."""
        body, self.body = self.body, None
        if body is not None and not body.closed:
            body.close()
