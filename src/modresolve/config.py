"""Resolver configuration.

``build_config`` is the single construction step. Precedence, lowest to
highest: built-in defaults, an explicitly named YAML settings file,
``MODRESOLVE_*`` environment variables, caller overrides.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

import yaml

from .common.fs_utils import ensure_dir
from .constants import Constants
from .errors import ConfigError

logger = logging.getLogger(__name__)

_TRUE_VALUES = ("1", "true", "yes", "on")
_SECONDS_PER_DAY = 24 * 60 * 60


def default_cache_dir() -> str:
    return os.path.join(os.path.expanduser("~"), Constants.DEFAULT_CACHE_DIRNAME)


@dataclass(frozen=True)
class ResolverConfig:
    """Immutable settings shared read-only by every protocol resolver."""
    cache_dir: str
    enable_http: bool = True
    enable_jsr: bool = True
    enable_node: bool = True
    silent: bool = False
    jsr_cache_ttl: float = Constants.JSR_CACHE_TTL_SEC
    path_aliases: Mapping[str, List[str]] = field(default_factory=dict)
    base_url: Optional[str] = None
    import_map: Mapping[str, str] = field(default_factory=dict)
    jsr_registry: str = Constants.REGISTRY_URL_JSR
    request_timeout: float = Constants.REQUEST_TIMEOUT

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "path_aliases",
            MappingProxyType({k: list(v) for k, v in dict(self.path_aliases or {}).items()}),
        )
        object.__setattr__(self, "import_map", MappingProxyType(dict(self.import_map or {})))
        object.__setattr__(self, "jsr_registry", self.jsr_registry.rstrip("/"))


_FIELD_NAMES = {f.name for f in fields(ResolverConfig)}


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in _TRUE_VALUES


def load_config_file(path: str) -> Dict[str, Any]:
    """Read a YAML settings file whose top level maps field names to values."""
    try:
        with open(path, encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def env_config(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Collect settings from MODRESOLVE_* environment variables."""
    env = os.environ if environ is None else environ
    prefix = Constants.ENV_PREFIX
    out: Dict[str, Any] = {}

    cache_dir = env.get(f"{prefix}CACHE_DIR")
    if cache_dir:
        out["cache_dir"] = cache_dir
    for key in ("enable_http", "enable_jsr", "enable_node", "silent"):
        raw = env.get(f"{prefix}{key.upper()}")
        if raw is not None:
            out[key] = _parse_bool(raw)
    ttl_days = env.get(f"{prefix}JSR_CACHE_TTL")
    if ttl_days:
        try:
            out["jsr_cache_ttl"] = float(ttl_days) * _SECONDS_PER_DAY
        except ValueError as exc:
            raise ConfigError(f"{prefix}JSR_CACHE_TTL must be a number of days: {ttl_days!r}") from exc
    return out


def _check_keys(source: str, values: Mapping[str, Any]) -> None:
    unknown = sorted(set(values) - _FIELD_NAMES)
    if unknown:
        raise ConfigError(f"Unknown configuration keys in {source}: {', '.join(unknown)}")


def build_config(
    overrides: Optional[Mapping[str, Any]] = None,
    *,
    config_file: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ResolverConfig:
    """Merge defaults, config file, environment and overrides into a config.

    The cache directory is expanded and created.
    """
    merged: Dict[str, Any] = {}
    if config_file:
        file_values = load_config_file(config_file)
        _check_keys(config_file, file_values)
        merged.update(file_values)
    merged.update(env_config(environ))
    if overrides:
        _check_keys("overrides", overrides)
        merged.update({k: v for k, v in overrides.items() if v is not None})

    cache_dir = os.path.abspath(os.path.expanduser(merged.pop("cache_dir", None) or default_cache_dir()))
    ensure_dir(cache_dir)
    logger.debug("Using cache directory %s", cache_dir)

    try:
        return ResolverConfig(cache_dir=cache_dir, **merged)
    except TypeError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
