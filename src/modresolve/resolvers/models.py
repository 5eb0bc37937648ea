"""Data models shared by the protocol resolvers."""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional


@dataclass
class CacheEntry:
    """Dispatcher memo value for one (specifier, parent) pair."""
    resolved: str
    timestamp: float


@dataclass(frozen=True)
class ParsedJsrSpecifier:
    """Components of ``jsr:@scope/name[@range][/path]``."""
    scope: str
    name: str
    version: Optional[str]
    path: str

    @property
    def package(self) -> str:
        return f"@{self.scope}/{self.name}"


@dataclass
class JsrPackageMeta:
    """Per-package document: version → yanked flag, plus the latest pointer."""
    versions: Dict[str, bool]
    latest: Optional[str] = None

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "JsrPackageMeta":
        versions = {}
        for version, meta in (data.get("versions") or {}).items():
            versions[version] = bool((meta or {}).get("yanked", False))
        return cls(versions=versions, latest=data.get("latest"))

    def available(self):
        """Non-yanked versions, in document order."""
        return [v for v, yanked in self.versions.items() if not yanked]


@dataclass
class JsrVersionMeta:
    """Per-version document: file manifest and optional export map."""
    manifest: Dict[str, Dict[str, Any]]
    exports: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "JsrVersionMeta":
        manifest = {}
        for key, info in (data.get("manifest") or {}).items():
            if key.startswith("./"):
                key = key[1:]
            elif not key.startswith("/"):
                key = "/" + key
            manifest[key] = info or {}
        exports = {k: v for k, v in (data.get("exports") or {}).items() if isinstance(v, str)}
        return cls(manifest=manifest, exports=exports)


@dataclass(frozen=True)
class ParsedPackageName:
    """npm package name (scope included) and ``./``-prefixed subpath."""
    package_name: str
    subpath: str


@dataclass
class NpmPackageMetadata:
    """The parts of an npm packument used for auto-install."""
    name: str
    versions: Dict[str, Dict[str, Any]]
    dist_tags: Dict[str, str]

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "NpmPackageMetadata":
        return cls(
            name=data.get("name", ""),
            versions=data.get("versions") or {},
            dist_tags=data.get("dist-tags") or {},
        )

    @property
    def latest(self) -> Optional[str]:
        return self.dist_tags.get("latest")

    def tarball_url(self, version: str) -> Optional[str]:
        dist = (self.versions.get(version) or {}).get("dist") or {}
        return dist.get("tarball")


# Host-supplied mapping from a builtin name to a file path, or None.
NodeResolverCallback = Callable[[str], Optional[str]]
