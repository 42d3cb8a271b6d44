"""Oracle GraalVM for JDK 17 and later."""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Union

from constants import Constants
from common.errors import InvalidVersionFormat, UpstreamUnavailable
from versioning.models import Artifact, Distribution, VersionDescriptor
from versioning.tag_match import parse_semver

from .base import SourceResolver
from .graalvm_ce import GraalVMCommunityResolver, find_latest_jdk_version

logger = logging.getLogger(__name__)

_EA_FILE_VERSION = re.compile(r"^graalvm-jdk-(\d[0-9A-Za-z.+-]*?)_")


class GraalVMResolver(SourceResolver):
    """Resolver for Oracle GraalVM for JDK.

    Stable releases come from the script-friendly archive URLs, early-access
    builds from the JSON manifests of the EA builds repository.
    """

    @property
    def distribution(self) -> Distribution:
        return Distribution.GRAALVM_JDK

    def tool_name(self, descriptor: VersionDescriptor) -> str:
        return f"graalvm-jdk_{self.platform.jdk_platform}-{self.platform.jdk_arch}_bin"

    def cache_version(self, descriptor: VersionDescriptor) -> Union[str, None]:
        version = descriptor.version
        if version.endswith(Constants.EA_SUFFIX) or version == Constants.VERSION_DEV:
            return None
        return version if parse_semver(version) is not None else None

    async def resolve(self, descriptor: VersionDescriptor) -> Artifact:
        java_version = descriptor.version
        if java_version == Constants.VERSION_DEV:
            community = GraalVMCommunityResolver(self.http, self.platform, github=self.github)
            return await community.resolve_dev_build()
        if java_version.endswith(Constants.EA_SUFFIX):
            return await self.find_latest_ea_build(java_version)
        if "." not in java_version:
            # Oracle may publish newer updates than GraalVM Community has tagged
            resolved = await find_latest_jdk_version(self.github, java_version)
            logger.info(
                "Resolved java-version %s to %s using the GraalVM Community release tags. "
                "Set a full java-version to select a newer Oracle GraalVM update.",
                java_version,
                resolved,
            )
            java_version = resolved
        return self._archive_artifact(java_version)

    def _download_name(self, java_version: str) -> str:
        return f"graalvm-jdk-{java_version}_{self.platform.jdk_platform}-{self.platform.jdk_arch}_bin"

    def _archive_artifact(self, java_version: str) -> Artifact:
        parsed = parse_semver(java_version)
        if parsed is None:
            raise InvalidVersionFormat(
                f"java-version set to '{java_version}'. Please make sure the java-version is set "
                f"correctly. {Constants.ERROR_HINT}"
            )
        download_name = self._download_name(java_version)
        if parsed.minor == 0 and parsed.patch == 0:
            # GA archives are named after the major version only
            download_name = self._download_name(str(parsed.major))
        url = (
            f"{Constants.GRAALVM_DL_BASE}/{parsed.major}/archive/"
            f"{download_name}{self.platform.file_extension}"
        )
        return Artifact(download_url=url, version=java_version)

    async def find_latest_ea_build(self, java_ea_version: str) -> Artifact:
        """Resolve an EA build (``<major>-ea`` or ``latest-ea``) from its manifest.

        Raises:
            VersionNotFound: If there is no manifest for the requested version.
            UpstreamUnavailable: If the manifest has no usable entry for this platform.
        """
        version_data = await self.github.get_json_file(
            Constants.GRAALVM_GH_USER,
            Constants.ORACLE_GRAALVM_REPO_EA_BUILDS,
            f"versions/{java_ea_version}.json",
            not_found=(
                f"Unable to resolve download URL for '{java_ea_version}'. Please make sure the "
                f"java-version is set correctly. {Constants.ERROR_HINT}"
            ),
        )
        latest = self._select_latest(version_data, java_ea_version)
        file_entry = next(
            (
                f for f in latest.get("files") or []
                if f.get("arch") == self.platform.jdk_arch
                and f.get("platform") == self.platform.graalvm_platform
            ),
            None,
        )
        if not file_entry or not str(file_entry.get("filename", "")).startswith("graalvm-jdk-"):
            raise UpstreamUnavailable(
                f"Unable to find file metadata for '{java_ea_version}'. {Constants.ERROR_REQUEST}"
            )
        filename = file_entry["filename"]
        match = _EA_FILE_VERSION.match(filename)
        if not match:
            raise UpstreamUnavailable(
                f"Unable to determine resolved version based on '{filename}'. {Constants.ERROR_REQUEST}"
            )
        url = f"{latest.get('download_base_url', '')}{filename}"
        logger.info("Resolved %s to early access build %s", java_ea_version, match.group(1))
        return Artifact(download_url=url, version=match.group(1))

    @staticmethod
    def _select_latest(version_data: Union[Dict[str, Any], List[Dict[str, Any]]], java_ea_version: str) -> Dict[str, Any]:
        if java_ea_version == Constants.VERSION_LATEST_EA:
            if isinstance(version_data, dict):
                return version_data
        elif isinstance(version_data, list):
            for entry in version_data:
                if isinstance(entry, dict) and entry.get("latest"):
                    return entry
        raise UpstreamUnavailable(
            f"Unable to find latest version for '{java_ea_version}'. {Constants.ERROR_REQUEST}"
        )
