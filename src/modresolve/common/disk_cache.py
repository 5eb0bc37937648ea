"""On-disk cache store rooted at the configured cache directory.

Files are written once and read many times. JSON documents may carry a
fetch timestamp (``_cachedAt``, epoch milliseconds) that is checked against
a TTL on read; an expired, missing or unreadable document reads as a miss
and the caller re-fetches and overwrites it in place.
"""

from __future__ import annotations

import json
import logging
import os
import time
from typing import Any, Dict, Optional

from ..constants import Constants
from .fs_utils import join_paths, read_text, write_bytes, write_text
from .logging_utils import extra_context, is_debug_enabled

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


def is_expired(cached_at_ms: float, ttl_seconds: float) -> bool:
    """Check whether a document stamped at ``cached_at_ms`` outlived its TTL."""
    return now_ms() - cached_at_ms > ttl_seconds * 1000


class DiskCache:
    """Maps cache keys (path segments) to files under ``root``."""

    def __init__(self, root: str):
        self.root = root

    def path(self, *parts: str) -> str:
        """Return the file path for a key made of ``parts``."""
        return join_paths(self.root, *parts)

    def exists(self, path: str) -> bool:
        return os.path.isfile(path)

    def read_bytes(self, path: str) -> bytes:
        with open(path, "rb") as fh:
            return fh.read()

    def write_bytes(self, path: str, data: bytes) -> str:
        write_bytes(path, data)
        return path

    def read_json(self, path: str, ttl_seconds: Optional[float] = None) -> Optional[Dict[str, Any]]:
        """Read a cached JSON document.

        Args:
            path: Document location.
            ttl_seconds: When given, the document must carry a fresh
                ``_cachedAt`` stamp; documents without one count as expired.

        Returns:
            The parsed mapping, or None on miss, corruption or expiry.
        """
        if not os.path.isfile(path):
            return None
        try:
            data = json.loads(read_text(path))
        except (OSError, ValueError):
            logger.debug("Discarding unreadable cache document %s", path)
            return None
        if not isinstance(data, dict):
            return None
        if ttl_seconds is not None:
            cached_at = data.get(Constants.CACHED_AT_KEY)
            if not isinstance(cached_at, (int, float)) or is_expired(cached_at, ttl_seconds):
                if is_debug_enabled(logger):
                    logger.debug(
                        "Cache document expired",
                        extra=extra_context(event="cache_expired", component="disk_cache", target=path),
                    )
                return None
        return data

    def write_json(self, path: str, data: Dict[str, Any], stamp: bool = False) -> None:
        """Persist ``data``; with ``stamp`` the current time is attached."""
        payload = dict(data)
        if stamp:
            payload[Constants.CACHED_AT_KEY] = now_ms()
        write_text(path, json.dumps(payload, indent=2))

    def write_raw(self, path: str, text: str) -> None:
        """Persist an already-serialized document verbatim."""
        write_text(path, text)
