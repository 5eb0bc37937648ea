"""Tests for the semver range matcher."""

import pytest

from modresolve.versioning.semver import (
    compare_versions,
    match_latest_version,
    match_versions,
    satisfies,
)


class TestCompareVersions:
    """compare_versions ordering."""

    def test_equal_after_padding(self):
        """Test that missing components compare as zero."""
        assert compare_versions("1.2", "1.2.0") == 0
        assert compare_versions("1.2.0.0", "1.2") == 0

    def test_component_order(self):
        """Test numeric component ordering."""
        assert compare_versions("1.10.0", "1.9.9") == 1
        assert compare_versions("0.9.0", "1.0.0") == -1
        assert compare_versions("2.0.0", "2.0.1") == -1

    def test_non_numeric_reads_as_zero(self):
        """Test that non-numeric components read as zero."""
        assert compare_versions("1.x.0", "1.0.0") == 0

    def test_leading_digits_are_used(self):
        """Test that leading digits of a component are used."""
        assert compare_versions("1.0.3-beta", "1.0.3") == 0
        assert compare_versions("1.0.4-beta", "1.0.3") == 1

    def test_antisymmetric(self):
        """Test that swapping arguments flips the sign."""
        pairs = [("1.0.0", "1.0.1"), ("3.1", "2.9.9"), ("0.0.1", "0.1")]
        for a, b in pairs:
            assert compare_versions(a, b) == -compare_versions(b, a)


class TestSatisfies:
    """Range grammar."""

    @pytest.mark.parametrize("version,rng,expected", [
        ("1.1.0", "^1.0.0", True),
        ("2.0.0", "^1.0.0", False),
        ("0.1.5", "^0.1.0", True),
        ("0.2.0", "^0.1.0", False),
        ("1.2.5", "~1.2.3", True),
        ("1.3.0", "~1.2.3", False),
        ("1.2.2", "~1.2.3", False),
        ("1.5.0", "1.x", True),
        ("2.5.0", "1.x", False),
        ("1.2.9", "1.2.*", True),
        ("1.3.0", "1.2.X", False),
        ("1.5.0", "1.0.0 - 2.0.0", True),
        ("2.0.0", "1.0.0 - 2.0.0", True),
        ("2.0.1", "1.0.0 - 2.0.0", False),
        ("1.0.0", ">=1.0.0", True),
        ("0.9.0", ">=1.0.0", False),
        ("1.0.1", ">1.0.0", True),
        ("1.0.0", ">1.0.0", False),
        ("1.0.0", "<=1.0.0", True),
        ("0.9.9", "<1.0.0", True),
        ("1.0.0", "<1.0.0", False),
        ("1.2.3", "=1.2.3", True),
        ("1.2.4", "=1.2.3", False),
        ("1.2.3", "1.2.3", True),
        ("1.2.4", "1.2.3", False),
        ("1.2.0", "1.2", True),
    ])
    def test_ranges(self, version, rng, expected):
        """Test range operators."""
        assert satisfies(version, rng) is expected

    def test_unknown_operator_form_never_matches(self):
        """Test that unrecognized range forms match nothing."""
        assert satisfies("1.0.0", "1.0.0-beta") is False

    def test_surrounding_whitespace_is_ignored(self):
        """Test whitespace around a range."""
        assert satisfies("1.4.0", " ^1.0.0 ")


class TestMatchLatestVersion:
    """Selecting the highest satisfying version."""

    def test_picks_highest_match(self):
        """Test selection of the highest match."""
        versions = ["1.0.0", "1.4.2", "2.0.0", "1.10.0", "0.9.0"]
        assert match_latest_version(versions, "^1.0.0") == "1.10.0"

    def test_returns_none_without_match(self):
        """Test None when nothing matches."""
        assert match_latest_version(["1.0.0", "1.1.0"], "^2.0.0") is None
        assert match_latest_version([], "*") is None

    def test_tie_keeps_first_encountered(self):
        """Test that ties keep the first version."""
        assert match_latest_version(["1.2", "1.2.0"], ">=1.0.0") == "1.2"

    def test_result_is_a_maximal_satisfying_member(self):
        """Test maximality of the selected version."""
        versions = ["0.1.0", "0.1.7", "0.2.0", "0.1.3"]
        result = match_latest_version(versions, "^0.1.0")
        assert result in versions
        matched = match_versions(versions, "^0.1.0")
        assert all(compare_versions(v, result) <= 0 for v in matched)
        assert result == "0.1.7"
