"""Mandrel releases: explicit versions, tag patterns and the latest release."""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import Any, Optional
from urllib.parse import urlencode

from constants import Constants
from common.errors import InvalidVersionFormat, UpstreamUnavailable, VersionNotFound
from versioning.models import Artifact, Distribution, VersionDescriptor
from versioning.normalizer import try_normalize
from versioning.tag_match import TagMatcher

from .base import SourceResolver

logger = logging.getLogger(__name__)

# e.g. 23.1.1.0-Final
_FULL_VERSION = re.compile(r"^\d+\.\d+\.\d+\.\d+-[0-9A-Za-z]+$")


def strip_mandrel_namespace(version: str) -> str:
    """Remove a leading ``mandrel-`` from ``version``."""
    if version.startswith(Constants.MANDREL_NAMESPACE):
        return version[len(Constants.MANDREL_NAMESPACE):]
    return version


def tag_from_uri(uri: str) -> str:
    """Return the release tag of a ``.../releases/download/<tag>/<file>`` URL."""
    parts = uri.rstrip("/").split("/")
    if len(parts) < 2 or not parts[-2]:
        raise UpstreamUnavailable(f"Failed to extract tag from URI {uri}")
    return parts[-2]


def _first_result(data: Any) -> Optional[dict]:
    if not isinstance(data, dict):
        return None
    result = data.get("result")
    if not isinstance(result, list) or not result or not isinstance(result[0], dict):
        return None
    return result[0]


class MandrelResolver(SourceResolver):
    """Resolver for Mandrel, keyed by Mandrel version plus Java version."""

    @property
    def distribution(self) -> Distribution:
        return Distribution.MANDREL

    def tool_name(self, descriptor: VersionDescriptor) -> str:
        return (
            f"mandrel-java{descriptor.java_version}-"
            f"{self.platform.graalvm_platform}-{self.platform.graalvm_arch}"
        )

    def requested_version(self, descriptor: VersionDescriptor) -> Optional[str]:
        version = strip_mandrel_namespace(descriptor.version)
        return super().requested_version(replace(descriptor, version=version))

    def cache_version(self, descriptor: VersionDescriptor) -> Optional[str]:
        version = strip_mandrel_namespace(descriptor.version)
        return version if _FULL_VERSION.match(version) else None

    async def resolve(self, descriptor: VersionDescriptor) -> Artifact:
        if not descriptor.java_version:
            raise InvalidVersionFormat("Mandrel requires a java-version to be set.")
        version = strip_mandrel_namespace(descriptor.version)
        if version in ("", Constants.VERSION_LATEST):
            return await self.resolve_latest(descriptor.java_version)
        if not _FULL_VERSION.match(version):
            version = await self.find_latest_matching_version(version)
        return self.release_artifact(version, descriptor.java_version)

    def release_artifact(self, version: str, java_version: str) -> Artifact:
        identifier = (
            f"mandrel-java{java_version}-{self.platform.graalvm_platform}-"
            f"{self.platform.graalvm_arch}-{version}"
        )
        url = (
            f"{Constants.MANDREL_DL_BASE}/{Constants.MANDREL_NAMESPACE}{version}/"
            f"{identifier}{self.platform.file_extension}"
        )
        return Artifact(download_url=url, version=version)

    async def find_latest_matching_version(self, pattern: str) -> str:
        """Highest ``mandrel-`` tag whose version starts with ``pattern``."""
        refs = await self.github.get_matching_tags(
            Constants.GRAALVM_GH_USER,
            Constants.MANDREL_REPO,
            f"{Constants.MANDREL_NAMESPACE}{pattern}",
        )
        highest = TagMatcher(Constants.MANDREL_NAMESPACE, parse=try_normalize).find_highest(refs, pattern)
        if highest is None:
            raise VersionNotFound(
                f"Unable to find a Mandrel release matching '{pattern}'. "
                f"Please make sure the version is set correctly. {Constants.ERROR_HINT}"
            )
        return highest

    def disco_url(self, java_version: str) -> str:
        params = [
            ("jdk_version", java_version),
            ("distribution", Distribution.MANDREL.value),
            ("architecture", self.platform.jdk_arch),
            ("operating_system", self.platform.jdk_platform),
            ("latest", "per_distro"),
        ]
        return f"{Constants.DISCO_API_BASE}?{urlencode(params)}"

    async def get_latest_release_url(self, java_version: str) -> str:
        """Ask the Disco API for the download URL of the latest Mandrel release.

        Raises:
            UpstreamUnavailable: If either lookup fails or a link is missing.
        """
        status, _, data = await self.http.get_json(self.disco_url(java_version), context="disco")
        if status != 200:
            raise UpstreamUnavailable(
                f"Failed to fetch latest Mandrel release for Java {java_version} "
                f"from DISCO API: HTTP {status}"
            )
        result = _first_result(data)
        pkg_info_uri = ((result or {}).get("links") or {}).get("pkg_info_uri")
        if not pkg_info_uri:
            raise UpstreamUnavailable(
                f"Failed to get latest Mandrel release for Java {java_version} from DISCO API: "
                f"missing package info link"
            )

        status, _, data = await self.http.get_json(pkg_info_uri, context="disco")
        if status != 200:
            raise UpstreamUnavailable(
                f"Failed to fetch package info of latest Mandrel release for Java {java_version} "
                f"from DISCO API: HTTP {status}"
            )
        download_uri = (_first_result(data) or {}).get("direct_download_uri")
        if not download_uri:
            raise UpstreamUnavailable(
                f"Failed to get download URI of latest Mandrel release for Java {java_version} "
                f"from DISCO API"
            )
        return download_uri

    async def resolve_latest(self, java_version: str) -> Artifact:
        url = await self.get_latest_release_url(java_version)
        version = strip_mandrel_namespace(tag_from_uri(url))
        logger.info("Latest Mandrel release for Java %s is %s", java_version, version)
        return Artifact(download_url=url, version=version)
