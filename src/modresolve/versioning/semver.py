"""Semver range matcher for registry version selection.

Versions are dot-separated numeric strings. Each component is read as its
leading integer (``"3-beta"`` reads as 3, non-numeric reads as 0) and the
shorter version is padded with zeros, so ``"1.2"`` equals ``"1.2.0"``.

Supported ranges, checked in this order:

- exact version (no operator characters)
- ``^base`` and ``~base``
- wildcards ``1.x``, ``1.2.*``, ``1.X``
- hyphen ranges ``low - high`` (inclusive)
- ``>=``, ``>``, ``<=``, ``<``, ``=`` comparators
"""

import re
from typing import Iterable, List, Optional

_LEADING_INT = re.compile(r"\s*(\d+)")
_OPERATOR_CHARS = set("^~*xX><-=")
_WILDCARDS = ("x", "X", "*")


def _component(part: str) -> int:
    m = _LEADING_INT.match(part)
    return int(m.group(1)) if m else 0


def _parts(version: str) -> List[int]:
    return [_component(p) for p in version.split(".")]


def compare_versions(a: str, b: str) -> int:
    """Compare two versions; returns -1, 0 or 1."""
    pa, pb = _parts(a), _parts(b)
    width = max(len(pa), len(pb))
    pa += [0] * (width - len(pa))
    pb += [0] * (width - len(pb))
    for x, y in zip(pa, pb):
        if x > y:
            return 1
        if x < y:
            return -1
    return 0


def _in_half_open(version: str, low: str, high: str) -> bool:
    return compare_versions(version, low) >= 0 and compare_versions(version, high) < 0


def _caret(version: str, base: str) -> bool:
    parts = _parts(base) + [0, 0]
    major, minor = parts[0], parts[1]
    if major == 0:
        # Pre-1.0: the minor component acts as the breaking-change boundary.
        upper = f"0.{minor + 1}.0"
    else:
        upper = f"{major + 1}.0.0"
    return _in_half_open(version, base, upper)


def _tilde(version: str, base: str) -> bool:
    parts = _parts(base) + [0, 0]
    return _in_half_open(version, base, f"{parts[0]}.{parts[1] + 1}.0")


def _wildcard(version: str, pattern: str) -> bool:
    version_parts = version.split(".")
    for i, pattern_part in enumerate(pattern.split(".")):
        if pattern_part in _WILDCARDS:
            continue
        if i >= len(version_parts) or pattern_part != version_parts[i]:
            return False
    return True


def satisfies(version: str, version_range: str) -> bool:
    """Test ``version`` against ``version_range``."""
    rng = version_range.strip()
    if not _OPERATOR_CHARS.intersection(rng):
        return compare_versions(version, rng) == 0

    if rng.startswith("^"):
        return _caret(version, rng[1:])
    if rng.startswith("~"):
        return _tilde(version, rng[1:])

    if any(w in rng for w in _WILDCARDS):
        return _wildcard(version, rng)

    if " - " in rng:
        low, high = (p.strip() for p in rng.split(" - ", 1))
        return compare_versions(version, low) >= 0 and compare_versions(version, high) <= 0

    if rng.startswith(">="):
        return compare_versions(version, rng[2:]) >= 0
    if rng.startswith(">"):
        return compare_versions(version, rng[1:]) > 0
    if rng.startswith("<="):
        return compare_versions(version, rng[2:]) <= 0
    if rng.startswith("<"):
        return compare_versions(version, rng[1:]) < 0
    if rng.startswith("="):
        return compare_versions(version, rng[1:]) == 0

    return False


def match_versions(versions: Iterable[str], version_range: str) -> List[str]:
    """Return the versions satisfying ``version_range``, in input order."""
    return [v for v in versions if satisfies(v, version_range)]


def match_latest_version(versions: Iterable[str], version_range: str) -> Optional[str]:
    """Return the highest version satisfying ``version_range``, or None.

    Ties keep the first version encountered.
    """
    matched = match_versions(versions, version_range)
    if not matched:
        return None
    latest = matched[0]
    for current in matched[1:]:
        if compare_versions(current, latest) > 0:
            latest = current
    return latest
