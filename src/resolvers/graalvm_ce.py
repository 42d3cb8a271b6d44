"""GraalVM Community resolver.

Covers three kinds of releases published by the graalvm organization:

* GraalVM Community for JDK 17 and later (``jdk-<version>`` tags),
* legacy GraalVM CE 22.x and earlier (``vm-<version>`` tags), selected when
  the descriptor carries a separate ``java_version``,
* dev builds from the latest release of the dev-builds repository.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Optional

from constants import Constants
from common.errors import InvalidVersionFormat, UpstreamUnavailable, VersionNotFound
from versioning.models import Artifact, Distribution, VersionDescriptor
from versioning.tag_match import TagMatcher

from .base import SourceResolver
from .github import GitHubClient, find_asset_url

logger = logging.getLogger(__name__)

LEGACY_LOCKED_VERSION = "22.3.3"
LEGACY_LOCKED_VERSION_JAVA19 = "22.3.1"


def locked_legacy_version(java_version: str) -> str:
    """Last GraalVM 22.x release published for ``java_version``."""
    return LEGACY_LOCKED_VERSION_JAVA19 if java_version == "19" else LEGACY_LOCKED_VERSION


async def find_latest_jdk_version(github: GitHubClient, major_java_version: str) -> str:
    """Find the highest GraalVM Community release for a Java major version.

    Raises:
        VersionNotFound: If no ``jdk-<major>`` tag with a valid version exists.
        UpstreamUnavailable: If the tag list cannot be fetched.
    """
    prefix = Constants.GRAALVM_JDK_TAG_PREFIX
    refs = await github.get_matching_tags(
        Constants.GRAALVM_GH_USER,
        Constants.GRAALVM_RELEASES_REPO,
        f"{prefix}{major_java_version}",
    )
    highest = TagMatcher(prefix).find_highest(refs, major_java_version)
    if highest is None:
        raise VersionNotFound(
            f"Unable to find the latest Java version for '{major_java_version}'. "
            f"Please make sure the java-version is set correctly. {Constants.ERROR_HINT}"
        )
    logger.debug("Resolved Java %s to GraalVM release %s", major_java_version, highest)
    return highest


class GraalVMCommunityResolver(SourceResolver):
    """Resolver for GraalVM Community releases and dev builds."""

    @property
    def distribution(self) -> Distribution:
        return Distribution.GRAALVM_CE

    @staticmethod
    def is_legacy(descriptor: VersionDescriptor) -> bool:
        return bool(descriptor.java_version)

    def tool_name(self, descriptor: VersionDescriptor) -> str:
        if self.is_legacy(descriptor):
            return f"{self._legacy_tool_name('ce', descriptor.java_version)}-{self.platform.graalvm_arch}"
        return f"graalvm-community-jdk_{self.platform.jdk_platform}-{self.platform.jdk_arch}_bin"

    def cache_version(self, descriptor: VersionDescriptor) -> Optional[str]:
        version = descriptor.version
        if version in (Constants.VERSION_DEV, Constants.VERSION_LATEST):
            return None
        if self.is_legacy(descriptor):
            return version
        return version if len(version.split(".")) == 3 else None

    async def resolve(self, descriptor: VersionDescriptor) -> Artifact:
        if descriptor.version == Constants.VERSION_DEV:
            return await self.resolve_dev_build()
        if self.is_legacy(descriptor):
            return await self._resolve_legacy(descriptor.version, descriptor.java_version)
        return await self._resolve_jdk(descriptor.version)

    async def _resolve_jdk(self, java_version: str) -> Artifact:
        resolved = java_version
        if "." not in resolved:
            resolved = await find_latest_jdk_version(self.github, resolved)
        if len(resolved.split(".")) != 3:
            raise InvalidVersionFormat(
                f"java-version set to '{java_version}', which was resolved to '{resolved}'. "
                f"Please make sure the java-version is set correctly. {Constants.ERROR_HINT}"
            )
        file_name = (
            f"graalvm-community-jdk-{resolved}_{self.platform.jdk_platform}-"
            f"{self.platform.jdk_arch}_bin{self.platform.file_extension}"
        )
        url = f"{Constants.GRAALVM_CE_DL_BASE}/{Constants.GRAALVM_JDK_TAG_PREFIX}{resolved}/{file_name}"
        return Artifact(download_url=url, version=resolved)

    async def _resolve_legacy(self, version: str, java_version: str) -> Artifact:
        if version == Constants.VERSION_LATEST:
            release = await self.github.get_tagged_release(
                Constants.GRAALVM_GH_USER,
                Constants.GRAALVM_RELEASES_REPO,
                f"{Constants.GRAALVM_TAG_PREFIX}{locked_legacy_version(java_version)}",
            )
            version = find_graalvm_version(release)
        identifier = self._legacy_identifier("ce", version, java_version)
        url = (
            f"{Constants.GRAALVM_CE_DL_BASE}/{Constants.GRAALVM_TAG_PREFIX}{version}/"
            f"{identifier}{self.platform.file_extension}"
        )
        return Artifact(download_url=url, version=version)

    async def resolve_dev_build(self) -> Artifact:
        """Resolve the dev build with the highest Java version."""
        release = await self.github.get_latest_release(
            Constants.GRAALVM_GH_USER, Constants.GRAALVM_REPO_DEV_BUILDS
        )
        java_version = self.find_highest_java_version(release, Constants.VERSION_DEV)
        expected = (
            f"{self._legacy_identifier('community', Constants.VERSION_DEV, java_version)}"
            f"{self.platform.file_extension}"
        )
        url = find_asset_url(release, expected)
        if url is None:
            raise VersionNotFound(
                f"Could not find GraalVM dev build for Java {java_version}. It may no longer be "
                f"available, so please consider upgrading the Java version. {Constants.ERROR_HINT}"
            )
        return Artifact(download_url=url, version=None)

    def find_highest_java_version(self, release: Dict[str, Any], version: str) -> str:
        """Find the highest Java version among the release assets for ``version``."""
        infix = "community" if version == Constants.VERSION_DEV else "ce"
        expected = re.compile(
            "^"
            + re.escape(f"graalvm-{infix}-java")
            + r"(\d+)"
            + re.escape(
                f"-{self.platform.graalvm_platform}-{self.platform.graalvm_arch}-{version}"
                f"{self.platform.file_extension}"
            )
            + "$"
        )
        highest = 0
        for asset in release.get("assets") or []:
            match = expected.match(asset.get("name", ""))
            if match:
                highest = max(highest, int(match.group(1)))
        if highest == 0:
            raise UpstreamUnavailable(
                f"Could not find highest Java version. {Constants.ERROR_REQUEST}"
            )
        return str(highest)

    def _legacy_tool_name(self, infix: str, java_version: str) -> str:
        return f"graalvm-{infix}-java{java_version}-{self.platform.graalvm_platform}"

    def _legacy_identifier(self, infix: str, version: str, java_version: str) -> str:
        return f"{self._legacy_tool_name(infix, java_version)}-{self.platform.graalvm_arch}-{version}"


def find_graalvm_version(release: Dict[str, Any]) -> str:
    """Extract the GraalVM version from a ``vm-<version>`` release."""
    tag_name = release.get("tag_name") or ""
    if not tag_name.startswith(Constants.GRAALVM_TAG_PREFIX):
        raise UpstreamUnavailable(f"Could not find latest GraalVM release: {tag_name}")
    return tag_name[len(Constants.GRAALVM_TAG_PREFIX):]
