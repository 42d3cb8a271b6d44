"""Matching of version patterns against repository tags.

Provides the "highest matching tag" selection shared by the GraalVM
Community, Mandrel and Liberica resolvers.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, Optional, Union

from .models import CanonicalVersion
from .normalizer import try_normalize

REF_TAGS_PREFIX = "refs/tags/"


def parse_semver(version: str) -> Optional[CanonicalVersion]:
    """Parse a strictly valid semantic version, returning None otherwise."""
    if version.count(".") != 2 or not version[:1].isdigit():
        return None
    parsed = try_normalize(version)
    if parsed is None or str(parsed) != version:
        return None
    return parsed


class TagMatcher:
    """Selects the highest tag matching a version pattern.

    A tag matches when, after removing ``refs/tags/`` and the
    distribution-specific prefix, it starts with the pattern and the
    character right after the pattern (if any) is not a digit. The pattern
    ``17.0.1`` therefore matches ``17.0.1+12`` but never ``17.0.10``.
    """

    def __init__(
        self,
        prefix: str,
        parse: Callable[[str], Optional[CanonicalVersion]] = parse_semver,
    ):
        """Initialize the matcher.

        Args:
            prefix: Tag prefix that is not part of the version (e.g. "jdk-").
            parse: Parser for the un-prefixed version; None means "skip this tag".
        """
        self.prefix = prefix
        self.parse = parse

    def strip(self, ref: Union[str, Dict[str, Any]]) -> Optional[str]:
        """Return the version part of a tag ref, or None if it is not ours."""
        name = ref.get("ref", "") if isinstance(ref, dict) else str(ref)
        if name.startswith(REF_TAGS_PREFIX):
            name = name[len(REF_TAGS_PREFIX):]
        if not name.startswith(self.prefix):
            return None
        return name[len(self.prefix):]

    @staticmethod
    def matches_pattern(version: str, pattern: str) -> bool:
        """Prefix match with the numeric anti-aliasing rule."""
        if not version.startswith(pattern):
            return False
        return len(version) == len(pattern) or not version[len(pattern)].isdigit()

    def find_highest(
        self,
        refs: Iterable[Union[str, Dict[str, Any]]],
        pattern: str,
    ) -> Optional[str]:
        """Find the highest parseable version among the refs matching ``pattern``.

        Returns:
            The un-prefixed version string, or None if nothing matched.
        """
        best_version: Optional[str] = None
        best_key: Optional[CanonicalVersion] = None
        for ref in refs:
            version = self.strip(ref)
            if version is None or not self.matches_pattern(version, pattern):
                continue
            parsed = self.parse(version)
            if parsed is None:
                continue
            if best_key is None or parsed > best_key:
                best_version, best_key = version, parsed
        return best_version
