"""Tests for highest-matching-tag selection."""

from versioning.normalizer import try_normalize
from versioning.tag_match import TagMatcher, parse_semver


def _refs(*tags):
    return [{"ref": f"refs/tags/{tag}"} for tag in tags]


class TestParseSemver:
    """Strict semantic version parsing."""

    def test_accepts_full_versions(self):
        assert str(parse_semver("17.0.9")) == "17.0.9"
        assert str(parse_semver("17.0.7+7")) == "17.0.7+7"

    def test_rejects_partial_versions(self):
        assert parse_semver("17") is None
        assert parse_semver("17.0") is None
        assert parse_semver("v17.0.1") is None
        assert parse_semver("17.0.01") is None


class TestTagMatcher:
    """Prefix matching with the numeric anti-aliasing rule."""

    def test_pattern_does_not_alias_longer_number(self):
        matcher = TagMatcher("jdk-")
        refs = _refs("jdk-17.0.1", "jdk-17.0.10", "jdk-17.0.1+12")
        assert matcher.find_highest(refs, "17.0.1") == "17.0.1+12"

    def test_major_pattern_picks_highest(self):
        matcher = TagMatcher("jdk-")
        refs = _refs("jdk-17.0.2", "jdk-17.0.9", "jdk-11.0.1", "jdk-171.0.0")
        assert matcher.find_highest(refs, "17") == "17.0.9"

    def test_build_metadata_ordering(self):
        matcher = TagMatcher("jdk-")
        refs = _refs("jdk-21.0.1+12", "jdk-21.0.1+9", "jdk-21.0.1")
        assert matcher.find_highest(refs, "21") == "21.0.1+12"

    def test_no_match_returns_none(self):
        matcher = TagMatcher("jdk-")
        assert matcher.find_highest(_refs("jdk-11.0.1"), "17") is None
        assert matcher.find_highest([], "17") is None

    def test_skips_other_prefixes_and_unparseable_tags(self):
        matcher = TagMatcher("jdk-")
        refs = _refs("vm-17.0.9", "jdk-17", "jdk-17.0.3")
        assert matcher.find_highest(refs, "17") == "17.0.3"

    def test_custom_parser_accepts_mandrel_versions(self):
        matcher = TagMatcher("mandrel-", parse=try_normalize)
        refs = _refs("mandrel-23.1.1.0-Final", "mandrel-23.1.2.0-Final", "mandrel-23.10.0.0-Final")
        assert matcher.find_highest(refs, "23.1") == "23.1.2.0-Final"

    def test_strip_accepts_plain_strings(self):
        matcher = TagMatcher("jdk-")
        assert matcher.strip("jdk-21.0.1") == "21.0.1"
        assert matcher.strip("refs/tags/vm-22.3.3") is None
