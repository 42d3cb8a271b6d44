"""Data models for version resolution and acquisition."""

from __future__ import annotations

import functools
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

import semantic_version


class Distribution(Enum):
    """Enum for supported distributions."""
    GRAALVM_JDK = "graalvm"
    GRAALVM_CE = "graalvm-community"
    GRAALVM_EE = "graalvm-ee"
    MANDREL = "mandrel"
    LIBERICA = "liberica"


@dataclass(frozen=True)
class VersionDescriptor:
    """One resolution request.

    ``version`` is the Java version for GraalVM for JDK, GraalVM Community
    and Liberica. For GraalVM EE, Mandrel and legacy GraalVM Community
    releases it is the release version and ``java_version`` names the JDK.
    """
    distribution: Distribution
    version: str
    java_version: Optional[str] = None
    java_package: Optional[str] = None


def _build_key(identifier: str) -> Tuple[int, Union[int, str]]:
    """Order numeric build identifiers numerically and before alphanumeric ones."""
    if identifier.isdigit():
        return 0, int(identifier)
    return 1, identifier


@functools.total_ordering
@dataclass(frozen=True)
class CanonicalVersion:
    """Semver-normalized version used for cache keys and ordering only."""
    major: int
    minor: int
    patch: int
    prerelease: Optional[str] = None
    build: Optional[str] = None

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += f"-{self.prerelease}"
        if self.build:
            text += f"+{self.build}"
        return text

    def to_semver(self) -> semantic_version.Version:
        return semantic_version.Version(str(self))

    def _sort_key(self):
        precedence = semantic_version.Version(str(self).split("+", 1)[0])
        build = tuple(_build_key(part) for part in self.build.split(".")) if self.build else ()
        return precedence, build

    def __lt__(self, other: "CanonicalVersion") -> bool:
        if not isinstance(other, CanonicalVersion):
            return NotImplemented
        return self._sort_key() < other._sort_key()


@dataclass(frozen=True)
class Artifact:
    """A fetchable reference to one concrete release build.

    ``version`` is the concrete release version the resolver settled on. It
    is None for builds that must not be cached (dev builds).
    """
    download_url: str
    id: Optional[str] = None
    checksum: Optional[str] = None
    version: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)
    name: Optional[str] = None

    @property
    def file_name(self) -> str:
        """Display name of the download, defaulting to the last URL segment."""
        if self.name:
            return self.name
        return self.download_url.rstrip("/").rsplit("/", 1)[-1]


@dataclass(frozen=True)
class CacheEntry:
    """A published tool-cache entry."""
    tool_name: str
    canonical_version: CanonicalVersion
    path: Path
