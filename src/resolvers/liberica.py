"""Liberica Native Image Kit releases published by BellSoft."""

from __future__ import annotations

import logging
from typing import Optional

from constants import Constants
from common.errors import UpstreamUnavailable, VersionNotFound
from versioning.models import Artifact, Distribution, VersionDescriptor
from versioning.tag_match import TagMatcher, parse_semver

from .base import SourceResolver

logger = logging.getLogger(__name__)


class LibericaResolver(SourceResolver):
    """Resolver for Liberica NIK.

    Versions carry build metadata (``17.0.7+7``), which takes part in both
    the ordering of candidate tags and the cache key.
    """

    @property
    def distribution(self) -> Distribution:
        return Distribution.LIBERICA

    @staticmethod
    def variant_part(java_package: Optional[str]) -> str:
        return "full-" if java_package and "+fx" in java_package else ""

    def platform_part(self) -> str:
        if self.platform.musl:
            return f"linux-{self.platform.jdk_arch}-musl"
        return f"{self.platform.jdk_platform}-{self.platform.graalvm_arch}"

    def tool_name(self, descriptor: VersionDescriptor) -> str:
        return (
            f"{Constants.LIBERICA_VM_PREFIX}{self.variant_part(descriptor.java_package)}"
            f"{self.platform_part()}"
        )

    def cache_version(self, descriptor: VersionDescriptor) -> Optional[str]:
        parsed = parse_semver(descriptor.version)
        if parsed is None or parsed.build is None:
            return None
        return descriptor.version

    async def resolve(self, descriptor: VersionDescriptor) -> Artifact:
        resolved = await self.find_latest_java_version(descriptor.version)
        url = await self.find_url(resolved, descriptor.java_package)
        return Artifact(download_url=url, version=resolved)

    async def find_latest_java_version(self, java_version: str) -> str:
        """Highest ``jdk-`` tag matching ``java_version``, build metadata included."""
        refs = await self.github.get_matching_tags(
            Constants.LIBERICA_GH_USER,
            Constants.LIBERICA_RELEASES_REPO,
            f"{Constants.LIBERICA_JDK_TAG_PREFIX}{java_version}",
        )
        highest = TagMatcher(Constants.LIBERICA_JDK_TAG_PREFIX).find_highest(refs, java_version)
        if highest is None:
            raise VersionNotFound(
                f"Unable to find the latest version for JDK{java_version}. "
                f"Please make sure the java-version is set correctly. {Constants.ERROR_HINT}"
            )
        logger.debug("Resolved Liberica %s to %s", java_version, highest)
        return highest

    async def find_url(self, java_version: str, java_package: Optional[str]) -> str:
        release = await self.github.get_tagged_release(
            Constants.LIBERICA_GH_USER,
            Constants.LIBERICA_RELEASES_REPO,
            f"{Constants.LIBERICA_JDK_TAG_PREFIX}{java_version}",
        )
        platform = self.platform_part()
        asset_prefix = (
            f"{Constants.LIBERICA_VM_PREFIX}{self.variant_part(java_package)}openjdk{java_version}"
        )
        asset_suffix = f"-{platform}{self.platform.file_extension}"
        for asset in release.get("assets") or []:
            name = asset.get("name", "")
            if name.startswith(asset_prefix) and name.endswith(asset_suffix):
                return asset["browser_download_url"]
        raise UpstreamUnavailable(
            f"Unable to find asset for java-version: {java_version}, java-package: {java_package}, "
            f"platform: {platform}. {Constants.ERROR_REQUEST}"
        )
