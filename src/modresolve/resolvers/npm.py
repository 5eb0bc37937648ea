"""npm package resolver with automatic installation.

Bare specifiers are looked up in ancestor ``node_modules`` directories, the
working directory's ``node_modules`` and the global install cache
(``<cache>/npm``). A package missing from all of them is fetched from the
registry (latest dist-tag) and unpacked into the global cache.

Install failures are reported as "not found": ``auto_install`` returns None
for a network error, a missing version or a corrupt tarball alike, so the
caller produces one uniform error whether a package was absent or failed
to install.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
from typing import Any, Dict, List, Optional

from ..archive import TarEntry, untar_gz
from ..common.fs_utils import ensure_dir, join_paths, normalize_path, read_text, try_resolve_file, write_bytes
from ..common.http_client import fetch_bytes, get_json
from ..common.logging_utils import extra_context, safe_url
from ..config import ResolverConfig
from ..constants import Constants
from ..errors import InvalidSpecifierError, NotFoundError, ResolverError
from .models import NpmPackageMetadata, ParsedPackageName

logger = logging.getLogger(__name__)

_REMOTE_PREFIXES = ("http://", "https://", "jsr:", "node:")


def parse_package_name(name: str) -> ParsedPackageName:
    """Split ``name`` into package name and ``./``-prefixed subpath."""
    if not name:
        raise InvalidSpecifierError(name, "empty package name")
    parts = name.split("/")
    if name.startswith("@"):
        if len(parts) < 2 or not parts[1]:
            raise InvalidSpecifierError(name, "scoped package needs @scope/name")
        package_name = f"{parts[0]}/{parts[1]}"
        rest = parts[2:]
    else:
        package_name = parts[0]
        rest = parts[1:]
    if any(part in (".", "..") for part in package_name.split("/")) or ".." in rest:
        raise InvalidSpecifierError(name, "dot segments are not allowed in package names or subpaths")
    subpath = "/".join(rest)
    return ParsedPackageName(package_name=package_name, subpath=f"./{subpath}" if subpath else "")


def _package_file(package_dir: str, rel: str) -> str:
    return normalize_path(join_paths(package_dir, rel))


def _pick_condition(value: Any) -> Optional[str]:
    """First string target among the import/default/require conditions."""
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        for key in Constants.EXPORT_CONDITIONS:
            target = _pick_condition(value.get(key))
            if target:
                return target
    return None


def read_package_json(package_dir: str) -> Optional[Dict[str, Any]]:
    """Parsed ``package.json`` of ``package_dir``, or None if absent/unreadable."""
    path = join_paths(package_dir, Constants.PACKAGE_JSON_FILE)
    if not os.path.isfile(path):
        return None
    try:
        data = json.loads(read_text(path))
    except (OSError, ValueError) as exc:
        logger.debug("Ignoring unreadable %s: %s", path, exc)
        return None
    return data if isinstance(data, dict) else None


def resolve_package_exports(package_dir: str, subpath: str) -> Optional[str]:
    """Apply the ``exports`` field of ``package_dir`` to ``subpath``.

    A string ``exports`` only answers the package root. An object is looked
    up by the exact subpath and then by its ``./``-prefixed form; an object
    with no ``.``-keys is the condition map of the root entry.
    """
    pkg = read_package_json(package_dir)
    if not pkg:
        return None
    exports = pkg.get("exports")
    if not exports:
        return None

    if isinstance(exports, str):
        if subpath in ("", "."):
            return _package_file(package_dir, exports)
        return None

    if not isinstance(exports, dict):
        return None

    if not any(key.startswith(".") for key in exports):
        exports = {".": exports}

    keys = ["."] if not subpath else [subpath]
    if subpath and not subpath.startswith("./") and subpath != ".":
        keys.append(f"./{subpath}")
    for key in keys:
        target = _pick_condition(exports.get(key))
        if target:
            return _package_file(package_dir, target)
    return None


def resolve_package_main(package_dir: str) -> str:
    """Entry point precedence: exports, module, main, then ``index``."""
    pkg = read_package_json(package_dir) or {}

    if pkg.get("exports"):
        exported = resolve_package_exports(package_dir, ".")
        if exported:
            try:
                return try_resolve_file(exported)
            except NotFoundError:
                logger.debug("exports target %s missing in %s", exported, package_dir)

    module = pkg.get("module")
    if isinstance(module, str) and module:
        module_path = _package_file(package_dir, module)
        if os.path.isfile(module_path):
            return module_path

    main = pkg.get("main")
    if isinstance(main, str) and main:
        try:
            return try_resolve_file(_package_file(package_dir, main))
        except NotFoundError:
            logger.debug("main target %s missing in %s", main, package_dir)

    return try_resolve_file(join_paths(package_dir, "index"))


class NpmResolver:
    """Resolves bare package specifiers to files on disk."""

    def __init__(self, config: ResolverConfig):
        self.config = config
        self.global_cache_dir = join_paths(config.cache_dir, "npm")
        self._registry: Optional[str] = None

    def resolve(self, name: str, parent: str = "") -> str:
        """Resolve ``name`` (package plus optional subpath) to a file path.

        Raises:
            NotFoundError: When the package is neither installed nor installable,
                or the requested file does not exist in it.
        """
        parsed = parse_package_name(name)
        package_dir = self.find_package_dir(parsed.package_name, parent)
        if package_dir is None:
            package_dir = self.auto_install(parsed.package_name)
        if package_dir is None:
            raise NotFoundError(
                parsed.package_name,
                f'Package "{parsed.package_name}" not found and auto-install failed',
            )

        if parsed.subpath:
            exported = resolve_package_exports(package_dir, parsed.subpath)
            if exported:
                return exported
            return try_resolve_file(_package_file(package_dir, parsed.subpath))

        return resolve_package_main(package_dir)

    def module_search_paths(self, parent: str = "") -> List[str]:
        """Candidate ``node_modules`` directories, nearest first."""
        paths: List[str] = []
        if parent and not parent.startswith(_REMOTE_PREFIXES):
            current = os.path.dirname(os.path.abspath(parent))
            while True:
                candidate = os.path.join(current, Constants.NODE_MODULES_DIR)
                if os.path.isdir(candidate) and candidate not in paths:
                    paths.append(candidate)
                parent_dir = os.path.dirname(current)
                if parent_dir == current:
                    break
                current = parent_dir

        cwd_modules = os.path.join(os.getcwd(), Constants.NODE_MODULES_DIR)
        if cwd_modules not in paths:
            paths.append(cwd_modules)

        if self.global_cache_dir not in paths and os.path.isdir(self.global_cache_dir):
            paths.append(self.global_cache_dir)
        return paths

    def find_package_dir(self, package_name: str, parent: str = "") -> Optional[str]:
        for search_path in self.module_search_paths(parent):
            candidate = join_paths(search_path, package_name)
            if os.path.isdir(candidate):
                return candidate
        return None

    def registry_url(self) -> str:
        """npm registry: NPM_CONFIG_REGISTRY, then ~/.npmrc, then the public one."""
        if self._registry is not None:
            return self._registry

        env_registry = os.environ.get(Constants.ENV_NPM_REGISTRY, "").strip()
        if env_registry:
            self._registry = env_registry.rstrip("/")
            return self._registry

        npmrc = os.path.join(os.path.expanduser("~"), Constants.NPMRC_FILE)
        if os.path.isfile(npmrc):
            try:
                for line in read_text(npmrc).splitlines():
                    stripped = line.strip()
                    if stripped.startswith("registry="):
                        value = stripped[len("registry="):].strip()
                        if value:
                            self._registry = value.rstrip("/")
                            return self._registry
            except OSError as exc:
                logger.debug("Cannot read %s: %s", npmrc, exc)

        self._registry = Constants.REGISTRY_URL_NPM
        return self._registry

    def fetch_package_metadata(self, package_name: str) -> NpmPackageMetadata:
        encoded = package_name.replace("/", "%2F")
        url = f"{self.registry_url()}/{encoded}"
        data = get_json(url, context="npm", timeout=self.config.request_timeout)
        if not isinstance(data, dict):
            raise NotFoundError(package_name, f"Malformed registry metadata for {package_name}")
        return NpmPackageMetadata.from_json(data)

    def auto_install(self, package_name: str) -> Optional[str]:
        """Install the latest release of ``package_name`` into the global cache.

        Returns:
            The package directory, or None on any failure.
        """
        package_dir = join_paths(self.global_cache_dir, package_name)
        if os.path.isdir(package_dir):
            return package_dir
        try:
            if not self.config.silent:
                logger.info("Installing %s", package_name)
            metadata = self.fetch_package_metadata(package_name)
            version = metadata.latest
            if not version:
                raise NotFoundError(package_name, f"No latest version found for {package_name}")
            tarball_url = metadata.tarball_url(version)
            if not tarball_url:
                raise NotFoundError(package_name, f"Version {version} not found in metadata")

            if not self.config.silent:
                logger.info("Downloading %s@%s", package_name, version)
            tarball = fetch_bytes(tarball_url, context="npm", timeout=self.config.request_timeout)
            entries = untar_gz(tarball)
            self._install_entries(package_dir, entries)
            if not self.config.silent:
                logger.info("%s@%s installed to %s", package_name, version, package_dir)
            return package_dir
        except (ResolverError, OSError) as exc:
            if not self.config.silent:
                logger.warning(
                    "Failed to auto-install %s: %s",
                    package_name,
                    exc,
                    extra=extra_context(
                        event="npm_install",
                        outcome="failed",
                        package=package_name,
                        registry=safe_url(self.registry_url()),
                    ),
                )
            return None

    def _install_entries(self, package_dir: str, entries: List[TarEntry]) -> None:
        """Write archive entries into ``package_dir`` with ``package/`` stripped.

        Files land in a staging directory that is moved into place at the end,
        so an interrupted install never leaves a partial package behind.
        """
        parent = os.path.dirname(package_dir)
        ensure_dir(parent)
        staging = tempfile.mkdtemp(prefix=".install-", dir=parent)
        try:
            os.chmod(staging, 0o755)
            for entry in entries:
                rel = normalize_path(entry.path.replace("\\", "/"))
                if rel == "package" or rel.startswith("package/"):
                    rel = rel[len("package/"):]
                if not rel or rel == "." or rel.startswith("..") or rel.startswith("/"):
                    continue
                target = join_paths(staging, rel)
                if entry.type == "dir":
                    ensure_dir(target)
                elif entry.type == "file":
                    write_bytes(target, entry.content)
                else:
                    logger.debug("Skipping %s entry %s", entry.type, entry.path)
            try:
                os.replace(staging, package_dir)
            except OSError:
                if not os.path.isdir(package_dir):
                    raise
                # Another process finished the same install first.
                shutil.rmtree(staging, ignore_errors=True)
        except BaseException:
            shutil.rmtree(staging, ignore_errors=True)
            raise
