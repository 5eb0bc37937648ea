"""JSR module resolver.

Resolves ``jsr:@scope/name[@range][/path]`` specifiers to canonical
identities of the form ``jsr:@scope/name@version/path``. Package metadata
is cached with a TTL; version documents and downloaded files are cached
permanently because published versions are immutable.

Cache layout under ``<cache>/jsr/<scope>/<name>/``::

    meta.json                 package metadata + _cachedAt
    <version>/meta.json       version manifest and exports
    <version>/<path...>       downloaded source files
"""

from __future__ import annotations

import json
import logging
import re
from typing import Dict

from ..common.disk_cache import DiskCache
from ..common.fs_utils import dirname, join_paths, normalize_path
from ..common.http_client import fetch_bytes
from ..common.logging_utils import extra_context, is_debug_enabled
from ..config import ResolverConfig
from ..constants import Constants, Protocols
from ..errors import FetchError, InvalidSpecifierError, NotFoundError, VersionUnsatisfiableError
from ..versioning.semver import compare_versions, match_latest_version
from .models import JsrPackageMeta, JsrVersionMeta, ParsedJsrSpecifier

logger = logging.getLogger(__name__)

_SPECIFIER_RE = re.compile(r"^@([^/]+)/([^@/]+)(?:@([^/]+))?(/.*)?$")


def parse_specifier(specifier: str) -> ParsedJsrSpecifier:
    """Split a ``jsr:`` specifier or identity into its components.

    Raises:
        InvalidSpecifierError: When the text does not start with ``@scope/name``.
    """
    prefix = Protocols.JSR.value
    rest = specifier[len(prefix):] if specifier.startswith(prefix) else specifier
    if not rest.startswith("@"):
        raise InvalidSpecifierError(specifier, "must start with @scope/name")
    m = _SPECIFIER_RE.match(rest)
    if not m:
        raise InvalidSpecifierError(specifier, "expected jsr:@scope/name[@version][/path]")
    scope, name, version, path = m.groups()
    for part in (scope, name, version):
        if part in (".", ".."):
            raise InvalidSpecifierError(specifier, "dot segments are not allowed in scope, name or version")
    return ParsedJsrSpecifier(scope=scope, name=name, version=version or None, path=path or "")


def build_identity(scope: str, name: str, version: str, path: str) -> str:
    return f"{Protocols.JSR.value}@{scope}/{name}@{version}/{path.lstrip('/')}"


def resolve_file(parsed: ParsedJsrSpecifier, version: str, meta: JsrVersionMeta) -> str:
    """Map a requested subpath to a package-relative file path.

    The returned path has no leading slash.

    Raises:
        NotFoundError: When neither the export map nor the manifest has a match.
    """
    package = f"{parsed.package}@{version}"
    path = parsed.path
    if path in ("", "/", "."):
        entry = meta.exports.get(".") or meta.exports.get("./mod.ts")
        if entry:
            return normalize_path("/" + entry).lstrip("/")
        raise NotFoundError(package, f"No entry point found for {package}")

    normalized = normalize_path(path if path.startswith("/") else "/" + path)

    export_target = meta.exports.get("." + normalized)
    if export_target:
        return normalize_path("/" + export_target).lstrip("/")

    if normalized in meta.manifest:
        return normalized.lstrip("/")

    for ext in Constants.JSR_EXTENSIONS:
        candidate = normalized + ext
        if candidate in meta.manifest:
            return candidate.lstrip("/")

    for ext in Constants.JSR_EXTENSIONS:
        candidate = f"{normalized}/index{ext}"
        if candidate in meta.manifest:
            return candidate.lstrip("/")

    raise NotFoundError(f"{package}{normalized}", f"Cannot find {path} in {package}")


class JsrResolver:
    """Resolves and downloads modules from a JSR registry."""

    def __init__(self, config: ResolverConfig):
        self.config = config
        self.registry = config.jsr_registry
        self.cache = DiskCache(config.cache_dir)
        self._local_paths: Dict[str, str] = {}

    def resolve(self, specifier: str, parent: str = "") -> str:
        """Resolve ``specifier`` to a versioned identity, downloading the file."""
        parsed = parse_specifier(specifier)
        version = self.resolve_version(parsed)
        meta = self.get_version_meta(parsed.scope, parsed.name, version)
        file_path = resolve_file(parsed, version, meta)
        local_path = self.download_file(parsed.scope, parsed.name, version, file_path)

        identity = build_identity(parsed.scope, parsed.name, version, file_path)
        self._local_paths[identity] = local_path
        if is_debug_enabled(logger):
            logger.debug(
                "JSR module resolved",
                extra=extra_context(
                    event="resolve",
                    component="jsr",
                    specifier=specifier,
                    parent=parent or None,
                    identity=identity,
                ),
            )
        return identity

    def resolve_relative(self, relative_path: str, parent: str) -> str:
        """Join ``relative_path`` against the package directory of ``parent``.

        The result stays inside the parent's package@version; the file is
        fetched on the following ``get_local_path`` call.
        """
        parsed = parse_specifier(parent)
        if not parsed.version:
            raise InvalidSpecifierError(parent, "version required in parent identity")
        parent_dir = dirname("/" + parsed.path.lstrip("/"))
        joined = normalize_path(join_paths(parent_dir, relative_path))
        return build_identity(parsed.scope, parsed.name, parsed.version, joined)

    def get_local_path(self, identity: str) -> str:
        """Return the downloaded file for a versioned identity.

        Raises:
            InvalidSpecifierError: When the identity carries no version or path.
        """
        mapped = self._local_paths.get(identity)
        if mapped is not None:
            return mapped
        parsed = parse_specifier(identity)
        if not parsed.version:
            raise InvalidSpecifierError(identity, "version required in protocol path")
        file_path = normalize_path("/" + parsed.path.lstrip("/")).lstrip("/")
        if not file_path:
            raise InvalidSpecifierError(identity, "file path required in protocol path")
        local_path = self.download_file(parsed.scope, parsed.name, parsed.version, file_path)
        self._local_paths[identity] = local_path
        return local_path

    def is_cached_module(self, path: str) -> bool:
        """True when ``path`` lives under the JSR cache directory."""
        return path.startswith(self.cache.path("jsr") + "/")

    def resolve_version(self, parsed: ParsedJsrSpecifier) -> str:
        """Pick the concrete version for a parsed specifier."""
        meta = self.get_package_meta(parsed.scope, parsed.name)
        available = meta.available()

        if not parsed.version:
            latest = meta.latest
            if latest and not meta.versions.get(latest, False):
                chosen = latest
            elif available:
                chosen = available[0]
                for candidate in available[1:]:
                    if compare_versions(candidate, chosen) > 0:
                        chosen = candidate
                logger.warning("Latest pointer of %s is missing or yanked; using %s", parsed.package, chosen)
            else:
                raise VersionUnsatisfiableError(parsed.package, None, [])
            if not self.config.silent:
                logger.info("Using latest version: %s@%s", parsed.package, chosen)
            return chosen

        if not available:
            raise VersionUnsatisfiableError(parsed.package, None, [])
        matched = match_latest_version(available, parsed.version)
        if matched is None:
            raise VersionUnsatisfiableError(parsed.package, parsed.version, available)
        return matched

    def get_package_meta(self, scope: str, name: str) -> JsrPackageMeta:
        """Load package metadata from cache, re-fetching after the TTL."""
        meta_file = self.cache.path("jsr", scope, name, Constants.META_FILE)
        cached = self.cache.read_json(meta_file, ttl_seconds=self.config.jsr_cache_ttl)
        if cached is not None:
            return JsrPackageMeta.from_json(cached)

        url = f"{self.registry}/@{scope}/{name}/{Constants.META_FILE}"
        data = self._fetch_json(url)
        self.cache.write_json(meta_file, data, stamp=True)
        return JsrPackageMeta.from_json(data)

    def get_version_meta(self, scope: str, name: str, version: str) -> JsrVersionMeta:
        """Load the manifest/export document for one version."""
        meta_file = self.cache.path("jsr", scope, name, version, Constants.META_FILE)
        cached = self.cache.read_json(meta_file)
        if cached is not None:
            return JsrVersionMeta.from_json(cached)

        if not self.config.silent:
            logger.info("Fetching metadata for @%s/%s@%s", scope, name, version)
        url = f"{self.registry}/@{scope}/{name}/{version}_meta.json"
        body = fetch_bytes(url, context="jsr", timeout=self.config.request_timeout)
        data = self._decode(url, body)
        self.cache.write_raw(meta_file, body.decode("utf-8"))
        return JsrVersionMeta.from_json(data)

    def download_file(self, scope: str, name: str, version: str, file_path: str) -> str:
        """Download one package file unless it is already cached."""
        file_path = file_path.lstrip("/")
        local_path = self.cache.path("jsr", scope, name, version, file_path)
        if self.cache.exists(local_path):
            return local_path

        if not self.config.silent:
            logger.info("Downloading @%s/%s@%s/%s", scope, name, version, file_path)
        url = f"{self.registry}/@{scope}/{name}/{version}/{file_path}"
        body = fetch_bytes(url, context="jsr", timeout=self.config.request_timeout)
        return self.cache.write_bytes(local_path, body)

    def _fetch_json(self, url: str) -> Dict:
        return self._decode(url, fetch_bytes(url, context="jsr", timeout=self.config.request_timeout))

    @staticmethod
    def _decode(url: str, body: bytes) -> Dict:
        try:
            data = json.loads(body)
        except ValueError as exc:
            raise FetchError(url, 200, "response is not valid JSON") from exc
        if not isinstance(data, dict):
            raise FetchError(url, 200, "expected a JSON object")
        return data
