"""modresolve - module resolution and dependency fetch engine.

Resolves import specifiers for a standalone script runtime across local
files, HTTP(S) URLs, the JSR registry, the npm registry and ``node:``
builtins, caching everything it downloads under one cache directory.
"""

from .config import ResolverConfig, build_config
from .errors import (
    ArchiveError,
    ConfigError,
    FetchError,
    InvalidSpecifierError,
    NotFoundError,
    ProtocolDisabledError,
    ResolutionError,
    ResolverError,
    VersionUnsatisfiableError,
)
from .resolver import ModuleResolver

__version__ = "0.1.0"

__all__ = [
    "ArchiveError",
    "ConfigError",
    "FetchError",
    "InvalidSpecifierError",
    "ModuleResolver",
    "NotFoundError",
    "ProtocolDisabledError",
    "ResolutionError",
    "ResolverConfig",
    "ResolverError",
    "VersionUnsatisfiableError",
    "build_config",
]
