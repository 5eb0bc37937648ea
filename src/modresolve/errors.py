"""Error types raised by the resolvers.

Protocol resolvers raise the specific subclasses; the dispatcher wraps them
in ``ResolutionError`` so the top-level message always names the specifier
and its parent, with the protocol error chained as ``__cause__``.
"""

from __future__ import annotations

from typing import List, Optional


class ResolverError(Exception):
    """Base class for every error raised by this package."""


class ConfigError(ResolverError, ValueError):
    """Invalid configuration input."""


class ProtocolDisabledError(ResolverError):
    """A feature flag turned off the requested protocol."""

    def __init__(self, protocol: str, message: Optional[str] = None):
        self.protocol = protocol
        super().__init__(message or f"{protocol} module loading is disabled")


class InvalidSpecifierError(ResolverError, ValueError):
    """Malformed ``jsr:`` or package-name syntax."""

    def __init__(self, specifier: str, reason: str = ""):
        self.specifier = specifier
        msg = f"Invalid specifier: {specifier}"
        if reason:
            msg = f"{msg} ({reason})"
        super().__init__(msg)


class NotFoundError(ResolverError):
    """A file, version or package is absent after full probing."""

    def __init__(self, target: str, message: Optional[str] = None):
        self.target = target
        super().__init__(message or f"Cannot find module: {target}")


class VersionUnsatisfiableError(NotFoundError):
    """A version range matched nothing among the available versions."""

    def __init__(self, package: str, version_range: Optional[str], available: List[str]):
        self.package = package
        self.version_range = version_range
        self.available = list(available)
        if version_range is None:
            message = f"No available versions for {package}"
        else:
            message = (
                f"No version of {package} satisfies {version_range}. "
                f"Available versions: {', '.join(self.available) or '(none)'}"
            )
        super().__init__(package, message)


class FetchError(ResolverError):
    """Non-200 HTTP status or transport failure."""

    def __init__(self, url: str, status: Optional[int] = None, reason: str = ""):
        self.url = url
        self.status = status
        detail = f"HTTP {status}" if status is not None else "connection error"
        if reason:
            detail = f"{detail}: {reason}"
        super().__init__(f"Failed to fetch {url}: {detail}")


class ArchiveError(ResolverError):
    """Gzip or TAR parse failure."""


class ResolutionError(ResolverError):
    """Top-level failure to resolve a specifier from a parent module."""

    def __init__(self, specifier: str, parent: str, cause: Optional[BaseException] = None):
        self.specifier = specifier
        self.parent = parent
        msg = f'Cannot resolve module "{specifier}" from "{parent}"'
        if cause is not None:
            msg = f"{msg}: {cause}"
        super().__init__(msg)
