"""Map request paths to files under the served root."""

import logging
import os
import stat
import urllib.parse
from pathlib import Path

from static_server.bootstrap.config import DEFAULT_DOCUMENT
from static_server.domain.correlation_id import CorrelationLoggerAdapter
from static_server.domain.errors import ForbiddenPath
from static_server.domain.http_types import HttpRequest, HttpResponse
from static_server.domain.response_builders import (
    file_response,
    forbidden_response,
    not_found_response,
)
from static_server.domain.sandbox import resolve_sandbox_path

FILE_LOGGER = CorrelationLoggerAdapter(
    logging.getLogger("static_server.handlers.file"), {}
)

DEFAULT_CONTENT_TYPE = "application/octet-stream"

CONTENT_TYPES = {
    ".html": "text/html",
    ".htm": "text/html",
    ".css": "text/css",
    ".js": "text/javascript",
    ".mjs": "text/javascript",
    ".json": "application/json",
    ".txt": "text/plain",
    ".xml": "application/xml",
    ".csv": "text/csv",
    ".md": "text/markdown",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
    ".webp": "image/webp",
    ".pdf": "application/pdf",
    ".wasm": "application/wasm",
    ".zip": "application/zip",
}


def content_type_for_path(filepath: Path) -> str:
    """Look up the MIME type for the file extension."""
    return CONTENT_TYPES.get(filepath.suffix.lower(), DEFAULT_CONTENT_TYPE)


def request_target_path(target: str) -> str:
    """Drop query and fragment from the request target and percent-decode it.

    The target is always origin-form, so a leading "//" is part of the path.
    """
    path = target.split("?", 1)[0].split("#", 1)[0]
    return urllib.parse.unquote(path)


def _not_found(request: HttpRequest, path: str) -> HttpResponse:
    FILE_LOGGER.info(
        "File not found",
        extra={"event": "file_not_found", "path": path, "method": request.method},
    )
    return not_found_response()


def resolve_resource(request: HttpRequest, root: str) -> HttpResponse:
    """Turn a parsed request into a response backed by a file under ``root``.

    The returned response owns the opened file; the caller must close it.
    """
    user_path = request_target_path(request.path)
    try:
        resolved_path = resolve_sandbox_path(root, user_path)
        if resolved_path.is_dir():
            # Re-check: the default document may itself be a symlink.
            resolved_path = resolve_sandbox_path(
                root, f"{user_path.rstrip('/')}/{DEFAULT_DOCUMENT}"
            )
        if not resolved_path.is_file():
            return _not_found(request, resolved_path.as_posix())
        file_handle = open(resolved_path, "rb")  # pylint: disable=consider-using-with
    except ForbiddenPath:
        FILE_LOGGER.warning(
            "Forbidden path access blocked",
            extra={
                "event": "forbidden_path",
                "path": user_path,
                "method": request.method,
            },
        )
        return forbidden_response()
    except OSError:
        return _not_found(request, user_path)

    try:
        file_stat = os.fstat(file_handle.fileno())
    except OSError:
        file_handle.close()
        return _not_found(request, resolved_path.as_posix())
    if not stat.S_ISREG(file_stat.st_mode):
        file_handle.close()
        return _not_found(request, resolved_path.as_posix())

    FILE_LOGGER.info(
        "Serving file",
        extra={
            "event": "file_served",
            "path": resolved_path.as_posix(),
            "bytes_out": file_stat.st_size,
        },
    )
    return file_response(
        file_handle, content_type_for_path(resolved_path), file_stat.st_size
    )
