"""Tests for version normalization."""

import pytest

from common.errors import InvalidVersionFormat
from versioning.models import CanonicalVersion
from versioning.normalizer import canonical_string, normalize, try_normalize


class TestNormalize:
    """Conversion of distribution version strings."""

    @pytest.mark.parametrize("raw, expected", [
        ("17", "17.0.0"),
        ("21.0", "21.0.0"),
        ("17.0.9", "17.0.9"),
        ("22.0.0.2", "22.0.0-2"),
        ("23.1.1.0-Final", "23.1.1-0-Final"),
        ("24-ea", "24.0.0-ea"),
        ("24.0.0-ea.10", "24.0.0-ea.10"),
        ("25.0.0-ea.05", "25.0.0-ea.5"),
        ("17.0.7+7", "17.0.7+7"),
        ("21+35", "21.0.0+35"),
    ])
    def test_known_inputs(self, raw, expected):
        assert canonical_string(normalize(raw)) == expected

    @pytest.mark.parametrize("raw", ["17", "22.0.0.2", "23.1.1.0-Final", "22.0-ea.1", "17.0.7+7", "24-ea"])
    def test_idempotent(self, raw):
        once = normalize(raw)
        assert normalize(str(once)) == once

    @pytest.mark.parametrize("raw", ["", "latest", "dev", "abc", "a.b.c", "a.b.c.d", "-ea"])
    def test_rejects_inputs_without_numbers(self, raw):
        with pytest.raises(InvalidVersionFormat) as excinfo:
            normalize(raw)
        assert "to semantic version" in str(excinfo.value)

    @pytest.mark.parametrize("raw, expected", [
        ("22.0.0.2", CanonicalVersion(22, 0, 0, prerelease="2")),
        ("21.3.0.1", CanonicalVersion(21, 3, 0, prerelease="1")),
        ("20.3.10.0", CanonicalVersion(20, 3, 10, prerelease="0")),
        ("19.3.6.01", CanonicalVersion(19, 3, 6, prerelease="1")),
    ])
    def test_fourth_component_becomes_prerelease(self, raw, expected):
        assert normalize(raw) == expected

    def test_try_normalize_returns_none(self):
        assert try_normalize("dev") is None
        assert try_normalize("21") == CanonicalVersion(21, 0, 0)


class TestCanonicalOrdering:
    """Ordering of canonical versions."""

    def test_numeric_components(self):
        assert normalize("17.0.10") > normalize("17.0.9")

    def test_prerelease_before_release(self):
        assert normalize("24-ea") < normalize("24")

    def test_build_metadata_breaks_ties(self):
        assert normalize("17.0.7+7") < normalize("17.0.7+10")
        assert normalize("17.0.7+7") != normalize("17.0.7+10")

    def test_release_without_build_sorts_first(self):
        assert normalize("17.0.7") < normalize("17.0.7+1")
