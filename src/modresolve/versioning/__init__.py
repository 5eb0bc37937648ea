"""Version comparison and range matching."""

from .semver import compare_versions, match_latest_version, match_versions, satisfies

__all__ = [
    "compare_versions",
    "match_latest_version",
    "match_versions",
    "satisfies",
]
