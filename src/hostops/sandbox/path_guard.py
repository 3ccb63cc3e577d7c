"""PathGuard — confine caller-supplied paths to a sandbox root.

Pure path arithmetic: nothing here touches the disk. Containment is checked
on the normalized absolute path, segment by segment, so a sibling such as
``/sandbox2`` never passes for ``/sandbox``.
"""

from __future__ import annotations

import os

from hostops.operations.errors import InvalidArgumentError, PathEscapeError


def normalize_root(root: str) -> str:
    return os.path.normpath(os.path.abspath(root))


def is_within(root: str, candidate: str, sep: str = os.sep) -> bool:
    if root == sep:
        return candidate.startswith(sep)
    return candidate == root or candidate.startswith(root + sep)


def resolve_in_sandbox(root: str, user_path: str) -> str:
    """Return the absolute path for ``user_path`` inside ``root``.

    Raises PathEscapeError when the normalized result lies outside ``root``.
    ``root`` is expected to be absolute and normalized already.
    """
    if "\x00" in user_path:
        raise InvalidArgumentError("Path must not contain NUL bytes.")
    resolved = os.path.normpath(os.path.join(root, user_path))
    if not is_within(root, resolved):
        raise PathEscapeError(user_path)
    return resolved
