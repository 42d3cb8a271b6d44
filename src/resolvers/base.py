"""Base class for distribution-specific source resolvers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from constants import Constants
from common.http_client import HttpClient
from common.platform import PlatformInfo
from versioning.models import Artifact, Distribution, VersionDescriptor

from .github import GitHubClient

SYMBOLIC_VERSIONS = ("", Constants.VERSION_DEV, Constants.VERSION_LATEST, Constants.VERSION_LATEST_EA)


class SourceResolver(ABC):
    """Turns a version descriptor into a fetchable ``Artifact``.

    Subclasses implement one distribution. ``cache_version`` lets the
    orchestrator consult the tool cache before any network traffic when the
    descriptor already names a concrete release.
    """

    def __init__(
        self,
        http: HttpClient,
        platform: PlatformInfo,
        github: Optional[GitHubClient] = None,
    ):
        """Initialize resolver.

        Args:
            http: Shared HTTP client for API requests.
            platform: Target platform of the JDK.
            github: GitHub client (built from ``http`` when omitted).
        """
        self.http = http
        self.platform = platform
        self.github = github or GitHubClient(http)

    @property
    @abstractmethod
    def distribution(self) -> Distribution:
        """Distribution handled by this resolver."""

    @abstractmethod
    def tool_name(self, descriptor: VersionDescriptor) -> str:
        """Tool-cache name; encodes distribution, platform and architecture."""

    def requested_version(self, descriptor: VersionDescriptor) -> Optional[str]:
        """Version string that must be well-formed before resolving.

        Symbolic requests (empty, ``dev``, ``latest``, ``latest-ea`` and
        ``<major>-ea``) return None; they only get a concrete version from
        the upstream.
        """
        version = descriptor.version
        if version in SYMBOLIC_VERSIONS or version.endswith(Constants.EA_SUFFIX):
            return None
        return version

    def cache_version(self, descriptor: VersionDescriptor) -> Optional[str]:
        """Concrete version usable as cache key without resolving, if any."""
        return None

    @abstractmethod
    async def resolve(self, descriptor: VersionDescriptor) -> Artifact:
        """Resolve ``descriptor`` to an artifact.

        Raises:
            VersionNotFound, AmbiguousVersion, UpstreamUnavailable
        """
