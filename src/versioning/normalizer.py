"""Conversion of distribution-specific version strings to semantic versions.

The result is only ever used as a tool-cache key and for ordering. Whether
two distribution-specific strings denote the same release is decided by the
resolvers, never by comparing normalized versions.
"""

import re

import semantic_version

from common.errors import InvalidVersionFormat
from .models import CanonicalVersion

# Loose equivalent of "coerce": the first run of up to three dotted numbers.
_COERCE_PATTERN = re.compile(r"(\d{1,16})(?:\.(\d{1,16}))?(?:\.(\d{1,16}))?")


def _coerce(text: str):
    match = _COERCE_PATTERN.search(text)
    if not match:
        return None
    major, minor, patch = (int(group) if group else 0 for group in match.groups())
    return major, minor, patch


def _strip_leading_zeroes(prerelease: str) -> str:
    """Semver forbids leading zeroes in numeric pre-release identifiers (ea.05)."""
    return ".".join(str(int(part)) if part.isdigit() else part for part in prerelease.split("."))


def normalize(version: str) -> CanonicalVersion:
    """Convert ``version`` into a ``CanonicalVersion``.

    Legacy four-component GraalVM versions (``22.0.0.2``) fold the fourth
    component into the pre-release slot (``22.0.0-2``). Otherwise a ``-``
    suffix is kept as pre-release, ``+`` build metadata is kept as build and
    the numeric part is padded to ``major.minor.patch``.

    Raises:
        InvalidVersionFormat: If no numeric prefix can be recognized.
    """
    raw = (version or "").strip()
    parts = raw.split(".")
    if len(parts) == 4 and all(part.isdigit() for part in parts[:3]):
        candidate = f"{parts[0]}.{parts[1]}.{parts[2]}-{_strip_leading_zeroes(parts[3])}"
    else:
        remainder, _, build = raw.partition("+")
        numeric, sep, suffix = remainder.partition("-")
        coerced = _coerce(numeric)
        if coerced is None:
            raise InvalidVersionFormat(f"Unable to convert '{version}' to semantic version.")
        candidate = "{}.{}.{}".format(*coerced)
        if sep:
            candidate += f"-{_strip_leading_zeroes(suffix)}"
        if build:
            candidate += f"+{build}"

    try:
        parsed = semantic_version.Version(candidate)
    except ValueError as exc:
        raise InvalidVersionFormat(
            f"Unable to convert '{version}' to semantic version."
        ) from exc

    return CanonicalVersion(
        major=parsed.major,
        minor=parsed.minor,
        patch=parsed.patch,
        prerelease=".".join(parsed.prerelease) or None,
        build=".".join(parsed.build) or None,
    )


def canonical_string(version: CanonicalVersion) -> str:
    """Render a ``CanonicalVersion`` the way it is used as a cache key."""
    return str(version)


def try_normalize(version: str):
    """Like ``normalize`` but return None instead of raising."""
    try:
        return normalize(version)
    except InvalidVersionFormat:
        return None
