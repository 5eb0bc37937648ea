"""Resolver for ``node:`` builtin module specifiers."""

from __future__ import annotations

import logging
from typing import Optional

from ..common.fs_utils import join_paths, try_resolve_file
from ..config import ResolverConfig
from ..constants import Protocols
from ..errors import NotFoundError
from .models import NodeResolverCallback

logger = logging.getLogger(__name__)


class NodeModuleResolver:
    """Maps builtin names to host-provided files or ``<cache>/node`` shims."""

    def __init__(self, config: ResolverConfig):
        self.config = config
        self._callback: Optional[NodeResolverCallback] = None

    def register_resolver(self, callback: Optional[NodeResolverCallback]) -> None:
        """Install (or with None, remove) the host mapping callback."""
        self._callback = callback

    def resolve(self, specifier: str) -> str:
        prefix = Protocols.NODE.value
        module_name = specifier[len(prefix):] if specifier.startswith(prefix) else specifier

        if self._callback is not None:
            resolved = self._callback(module_name)
            if resolved:
                return resolved

        node_dir = join_paths(self.config.cache_dir, "node")
        try:
            return try_resolve_file(join_paths(node_dir, module_name))
        except NotFoundError as exc:
            raise NotFoundError(
                specifier,
                f'Node.js module "{module_name}" not found. '
                f"Install it to {node_dir}/ or register a custom resolver "
                f"with register_node_resolver()",
            ) from exc

    def has(self, module_name: str) -> bool:
        """Whether ``node:<module_name>`` currently resolves."""
        try:
            self.resolve(f"{Protocols.NODE.value}{module_name}")
        except NotFoundError:
            return False
        return True
