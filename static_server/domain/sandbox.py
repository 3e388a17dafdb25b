"""Filesystem sandbox utilities for safe path resolution."""

import errno
from pathlib import Path

from static_server.domain.errors import ForbiddenPath


def resolve_sandbox_path(root: str, user_path: str) -> Path:
    """Resolve a decoded request path inside ``root``.

    Raises ForbiddenPath for NUL bytes, any ``..`` segment, or a location
    (after following symlinks) outside the root. A symlink loop surfaces as
    an ``ELOOP`` OSError. Nothing is opened here.
    """
    if "\x00" in user_path:
        raise ForbiddenPath(user_path)

    root_dir = Path(root).resolve()
    relative_part = user_path.lstrip("/")
    if not relative_part:
        return root_dir

    if ".." in relative_part.replace("\\", "/").split("/"):
        raise ForbiddenPath(user_path)

    try:
        target = (root_dir / relative_part).resolve()
    except RuntimeError as error:
        # Older pathlib reports symlink loops as RuntimeError.
        raise OSError(errno.ELOOP, "Symlink loop", user_path) from error
    if target != root_dir and root_dir not in target.parents:
        raise ForbiddenPath(user_path)
    return target
