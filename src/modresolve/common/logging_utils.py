"""Logging helpers shared by every module.

Modules log through ``logging.getLogger(__name__)`` and attach structured
fields with ``extra=extra_context(...)``. Nothing here installs handlers
except ``configure_logging``, which the CLI calls once.
"""
from __future__ import annotations

import logging
import os
import time
from typing import Any, Dict, Optional
from urllib.parse import urlsplit, urlunsplit

from ..constants import Constants

_SENSITIVE_QUERY_KEYS = ("token", "key", "secret", "password", "auth", "sig")


def configure_logging(level: Optional[str] = None) -> None:
    """Install a single stream handler on the package logger.

    Args:
        level: Level name; falls back to MODRESOLVE_LOG_LEVEL, then INFO.
    """
    level_name = (level or os.environ.get(Constants.LOG_LEVEL_ENV) or "INFO").upper()
    level_value = getattr(logging, level_name, logging.INFO)

    root = logging.getLogger("modresolve")
    if not any(getattr(h, "_modresolve", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
        handler._modresolve = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    root.setLevel(level_value)


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when DEBUG records would be emitted by ``logger``."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build an ``extra`` mapping, dropping fields whose value is None."""
    return {k: v for k, v in fields.items() if v is not None}


def redact(value: str) -> str:
    """Mask a credential-like value."""
    if not value:
        return value
    return "[REDACTED]"


def safe_url(url: str) -> str:
    """Return ``url`` with userinfo and credential-like query values masked."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return url
    netloc = parts.netloc
    if "@" in netloc:
        netloc = "[REDACTED]@" + netloc.rsplit("@", 1)[1]
    query = parts.query
    if query:
        pairs = []
        for pair in query.split("&"):
            name, sep, val = pair.partition("=")
            if sep and any(s in name.lower() for s in _SENSITIVE_QUERY_KEYS):
                val = redact(val)
            pairs.append(f"{name}{sep}{val}")
        query = "&".join(pairs)
    return urlunsplit((parts.scheme, netloc, parts.path, query, parts.fragment))


class Timer:
    """Context manager measuring wall-clock duration in milliseconds."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, *exc: Any) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> int:
        end = self._end if self._end is not None else time.perf_counter()
        return int((end - self._start) * 1000)
