"""Module resolver: classifies specifiers and routes them to a protocol resolver.

``resolve(specifier, parent)`` returns a canonical identity: a URL for
HTTP(S) modules, ``jsr:@scope/name@version/path`` for JSR modules, and a
filesystem path for local, npm and ``node:`` modules.
``get_local_path(identity)`` maps that identity to the file to load.
"""

from __future__ import annotations

import logging
import os
import time
from typing import Dict, Optional, Tuple

from .common.fs_utils import dirname, is_absolute_path, join_paths, normalize_path, try_resolve_file
from .common.logging_utils import extra_context, is_debug_enabled
from .config import ResolverConfig
from .constants import Protocols
from .errors import NotFoundError, ProtocolDisabledError, ResolutionError, ResolverError
from .resolvers import HttpResolver, JsrResolver, NodeModuleResolver, NpmResolver
from .resolvers.models import CacheEntry, NodeResolverCallback

logger = logging.getLogger(__name__)

_HTTP_PREFIXES = (Protocols.HTTP.value, Protocols.HTTPS.value)


def _strip_glob(pattern: str) -> str:
    return pattern[:-2] if pattern.endswith("/*") else pattern


class ModuleResolver:
    """Session-scoped resolver owning the config and one resolver per protocol."""

    def __init__(self, config: ResolverConfig):
        self.config = config
        self.http_resolver = HttpResolver(config)
        self.jsr_resolver = JsrResolver(config)
        self.node_resolver = NodeModuleResolver(config)
        self.npm_resolver = NpmResolver(config)
        self._memo: Dict[Tuple[str, str], CacheEntry] = {}

    def register_node_resolver(self, callback: Optional[NodeResolverCallback]) -> None:
        self.node_resolver.register_resolver(callback)

    def clear_cache(self) -> None:
        """Forget memoized resolutions; on-disk caches are left untouched."""
        self._memo.clear()

    def resolve(self, specifier: str, parent: str = "") -> str:
        """Resolve ``specifier`` imported from ``parent`` to an identity.

        Raises:
            ResolutionError: Wrapping the protocol error as ``__cause__``.
        """
        key = (specifier, parent or "")
        entry = self._memo.get(key)
        if entry is not None:
            return entry.resolved

        try:
            resolved = self._dispatch(self.apply_import_map(specifier), parent or "")
        except (ResolverError, OSError) as exc:
            raise ResolutionError(specifier, parent or "", exc) from exc

        self._memo[key] = CacheEntry(resolved=resolved, timestamp=time.time())
        if is_debug_enabled(logger):
            logger.debug(
                "Resolved module",
                extra=extra_context(event="resolve", specifier=specifier, parent=parent or None, resolved=resolved),
            )
        return resolved

    def get_local_path(self, identity: str) -> str:
        """Return the filesystem path backing a resolved identity."""
        if identity.startswith(Protocols.JSR.value):
            return self.jsr_resolver.get_local_path(identity)
        if identity.startswith(_HTTP_PREFIXES):
            return self.http_resolver.get_local_path(identity)
        return identity

    def apply_import_map(self, specifier: str) -> str:
        """Rewrite via the import map: exact key first, then longest ``/`` prefix."""
        import_map = self.config.import_map
        if not import_map:
            return specifier
        exact = import_map.get(specifier)
        if exact:
            return exact
        best = None
        for key in import_map:
            if key.endswith("/") and specifier.startswith(key):
                if best is None or len(key) > len(best):
                    best = key
        if best is None:
            return specifier
        return import_map[best] + specifier[len(best):]

    def apply_path_alias(self, path: str) -> str:
        """Rewrite ``path`` with the first matching tsconfig-style alias."""
        for alias, targets in self.config.path_aliases.items():
            clean_alias = _strip_glob(alias)
            if not path.startswith(clean_alias):
                continue
            if not targets or not targets[0]:
                continue
            clean_target = _strip_glob(targets[0])
            remainder = path[len(clean_alias):]
            if self.config.base_url:
                return join_paths(self.config.base_url, clean_target, remainder)
            return join_paths(clean_target, remainder)
        return path

    def _dispatch(self, name: str, parent: str) -> str:
        if name.startswith(Protocols.NODE.value):
            if not self.config.enable_node:
                raise ProtocolDisabledError("node", "Node.js compatibility layer is disabled")
            return self.node_resolver.resolve(name)

        if name.startswith(_HTTP_PREFIXES):
            if not self.config.enable_http:
                raise ProtocolDisabledError("http", "HTTP module loading is disabled")
            return self.http_resolver.resolve(name)

        if name.startswith(Protocols.JSR.value):
            if not self.config.enable_jsr:
                raise ProtocolDisabledError("jsr", "JSR module loading is disabled")
            return self.jsr_resolver.resolve(name, parent)

        if name.startswith(("./", "../")):
            return self._resolve_relative(name, parent)

        if is_absolute_path(name):
            return self._resolve_absolute(name)

        return self._resolve_package(name, parent)

    def _resolve_relative(self, name: str, parent: str) -> str:
        if parent.startswith(Protocols.JSR.value):
            if not self.config.enable_jsr:
                raise ProtocolDisabledError("jsr", "JSR module loading is disabled")
            return self.jsr_resolver.resolve_relative(name, parent)
        if parent.startswith(_HTTP_PREFIXES):
            if not self.config.enable_http:
                raise ProtocolDisabledError("http", "HTTP module loading is disabled")
            return self.http_resolver.resolve_relative(name, parent)

        parent_dir = dirname(parent) if parent else os.getcwd()
        return self._resolve_absolute(normalize_path(join_paths(parent_dir, name)))

    def _resolve_absolute(self, name: str) -> str:
        return try_resolve_file(self.apply_path_alias(name))

    def _resolve_package(self, name: str, parent: str) -> str:
        aliased = self.apply_path_alias(name)
        if aliased != name:
            try:
                return try_resolve_file(aliased)
            except NotFoundError:
                logger.debug("Alias %s -> %s matched nothing; trying npm", name, aliased)
        return self.npm_resolver.resolve(name, parent)
