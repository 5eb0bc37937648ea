"""Filesystem and path helpers shared by the resolvers."""
from __future__ import annotations

import os
import re
from typing import Iterable, Optional

from ..constants import Constants
from ..errors import NotFoundError

_MULTI_SLASH = re.compile(r"/+")
_WINDOWS_DRIVE = re.compile(r"^[a-zA-Z]:[/\\]")


def join_paths(*segments: str) -> str:
    """Join segments with ``/``, skipping empty ones and collapsing repeats.

    Unlike ``os.path.join`` a segment starting with ``/`` does not discard
    the segments before it, which is what alias targets and URL paths need.
    """
    return _MULTI_SLASH.sub("/", "/".join(s for s in segments if s))


def dirname(path: str) -> str:
    """Directory part of a ``/``-separated path, ``.`` when there is none."""
    normalized = path.replace("\\", "/")
    idx = normalized.rfind("/")
    if idx > 0:
        return normalized[:idx]
    if idx == 0:
        return "/"
    return "."


def normalize_path(path: str) -> str:
    """Collapse ``.`` and ``..`` segments of a ``/``-separated path.

    A leading ``/`` is preserved and ``..`` never climbs above it; relative
    paths keep leading ``..`` segments. An empty result becomes ``.``.
    """
    absolute = path.startswith("/")
    result = []
    for part in path.split("/"):
        if not part or part == ".":
            continue
        if part == "..":
            if result and result[-1] != "..":
                result.pop()
            elif not absolute:
                result.append("..")
            continue
        result.append(part)
    normalized = "/".join(result)
    if absolute:
        normalized = "/" + normalized
    return normalized or "."


def is_absolute_path(path: str) -> bool:
    """True for POSIX absolute paths and Windows drive paths."""
    return path.startswith("/") or bool(_WINDOWS_DRIVE.match(path))


def ensure_dir(path: str) -> None:
    """Create ``path`` and any missing parents."""
    os.makedirs(path, mode=0o755, exist_ok=True)


def read_text(path: str) -> str:
    with open(path, encoding="utf-8") as fh:
        return fh.read()


def write_bytes(path: str, data: bytes) -> None:
    """Write ``data`` to ``path``, creating the parent directory first."""
    parent = os.path.dirname(path)
    if parent:
        ensure_dir(parent)
    with open(path, "wb") as fh:
        fh.write(data)


def write_text(path: str, text: str) -> None:
    write_bytes(path, text.encode("utf-8"))


def try_resolve_file(
    base_path: str,
    extensions: Optional[Iterable[str]] = None,
    index_extensions: Optional[Iterable[str]] = None,
) -> str:
    """Find the file a module path refers to.

    Probing order: the path itself when it is a file; ``<path>/index`` when
    it is a directory (probed again with the same rules); ``<path><ext>``
    for each resolve extension; ``<path>/index<ext>`` for each index
    extension.

    Raises:
        NotFoundError: When every candidate is exhausted.
    """
    exts = list(extensions if extensions is not None else Constants.RESOLVE_EXTENSIONS)
    index_exts = list(
        index_extensions if index_extensions is not None else Constants.INDEX_EXTENSIONS
    )
    original = base_path
    current = base_path
    while True:
        if os.path.isfile(current):
            return current
        if os.path.isdir(current):
            current = join_paths(current, "index")
            continue
        break

    for ext in exts:
        candidate = current + ext
        if os.path.isfile(candidate):
            return candidate

    for ext in index_exts:
        candidate = join_paths(current, f"index{ext}")
        if os.path.isfile(candidate):
            return candidate

    raise NotFoundError(original)
