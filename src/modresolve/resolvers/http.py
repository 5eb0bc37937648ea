"""HTTP(S) module resolver.

Remote modules are content-addressed under ``<cache>/http/<host>/<hash>/``
and keep the URL itself as their identity.
"""

from __future__ import annotations

import hashlib
import logging
import os
from typing import Dict
from urllib.parse import urlsplit

from ..common.fs_utils import dirname, join_paths, normalize_path, write_bytes
from ..common.http_client import fetch_bytes
from ..common.logging_utils import extra_context, safe_url
from ..config import ResolverConfig
from ..constants import Constants
from ..errors import InvalidSpecifierError

logger = logging.getLogger(__name__)


def url_basename(url: str) -> str:
    """Last path segment of ``url`` without query or fragment."""
    path = urlsplit(url).path
    base = path.rsplit("/", 1)[-1] if "/" in path else path
    if base in ("", ".", ".."):
        return Constants.HTTP_DEFAULT_BASENAME
    return base


class HttpResolver:
    """Fetches and caches remote modules addressed by URL."""

    def __init__(self, config: ResolverConfig):
        self.config = config
        self._local_paths: Dict[str, str] = {}

    def resolve(self, url: str) -> str:
        """Make ``url`` available on disk and return it as the identity.

        Raises:
            FetchError: On any status other than 200 or a transport failure.
        """
        cache_path = self.cache_path(url)
        if os.path.isfile(cache_path):
            self._local_paths[url] = cache_path
            return url

        if not self.config.silent:
            logger.info("Downloading %s", safe_url(url))
        body = fetch_bytes(url, context="http", timeout=self.config.request_timeout)
        write_bytes(cache_path, body)
        logger.debug(
            "Cached remote module",
            extra=extra_context(event="cache_write", component="http", target=safe_url(url), path=cache_path),
        )
        self._local_paths[url] = cache_path
        return url

    def resolve_relative(self, relative_path: str, parent_url: str) -> str:
        """Resolve ``relative_path`` against the directory of ``parent_url``."""
        parts = urlsplit(parent_url)
        if not parts.scheme or not parts.netloc:
            raise InvalidSpecifierError(parent_url, "not an absolute URL")
        parent_dir = dirname(parts.path or "/")
        resolved = normalize_path(join_paths(parent_dir, relative_path))
        return self.resolve(f"{parts.scheme}://{parts.netloc}{resolved}")

    def get_local_path(self, url: str) -> str:
        """Return the on-disk file backing ``url``."""
        mapped = self._local_paths.get(url)
        if mapped is not None:
            return mapped
        return self.cache_path(url)

    def is_cached(self, url: str) -> bool:
        return url in self._local_paths or os.path.isfile(self.cache_path(url))

    def cache_path(self, url: str) -> str:
        """Deterministic cache location: ``http/<host>/<hash>/<basename>``."""
        parts = urlsplit(url)
        if not parts.netloc:
            raise InvalidSpecifierError(url, "missing host")
        host = parts.netloc.rsplit("@", 1)[-1].replace(":", "_")
        digest = hashlib.sha256(url.encode("utf-8")).hexdigest()[: Constants.HTTP_HASH_LENGTH]
        return join_paths(self.config.cache_dir, "http", host, digest, url_basename(url))

