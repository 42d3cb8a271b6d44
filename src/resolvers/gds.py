"""GraalVM Enterprise Edition (legacy) through the GraalVM Download Service."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional
from urllib.parse import urlencode

from constants import Constants
from common.errors import AmbiguousVersion, AuthRejected, UpstreamUnavailable, VersionNotFound
from common.http_client import HttpClient
from common.platform import PlatformInfo
from versioning.models import Artifact, Distribution, VersionDescriptor

from .base import SourceResolver
from .github import GitHubClient

logger = logging.getLogger(__name__)


class GDSResolver(SourceResolver):
    """Resolver querying the GDS artifact catalog.

    The catalog answers with artifact ids and checksums; the artifact content
    endpoint requires a download token which travels with the ``Artifact``.
    """

    def __init__(
        self,
        http: HttpClient,
        platform: PlatformInfo,
        github: Optional[GitHubClient] = None,
        gds_token: Optional[str] = None,
        base_url: Optional[str] = None,
    ):
        super().__init__(http, platform, github=github)
        self.gds_token = gds_token
        self.base_url = (base_url or Constants.GDS_BASE).rstrip("/")

    @property
    def distribution(self) -> Distribution:
        return Distribution.GRAALVM_EE

    def tool_name(self, descriptor: VersionDescriptor) -> str:
        return (
            f"graalvm-ee-java{descriptor.java_version}-"
            f"{self.platform.graalvm_platform}-{self.platform.graalvm_arch}"
        )

    def cache_version(self, descriptor: VersionDescriptor) -> Optional[str]:
        if descriptor.version == Constants.VERSION_LATEST:
            return None
        return descriptor.version

    def catalog_url(self, version: str, java_version: str, metadata: str = "isBase:True") -> str:
        """Build the catalog query for one base artifact."""
        if version == Constants.VERSION_LATEST:
            # latest and only one item
            version_filter = [("sortBy", "displayName"), ("sortOrder", "DESC"), ("limit", "1")]
        else:
            version_filter = [("metadata", f"version:{version}")]
        params = (
            [("productId", Constants.GDS_GRAALVM_PRODUCT_ID)]
            + version_filter
            + [
                ("metadata", f"java:jdk{java_version}"),
                ("metadata", f"os:{self.platform.gds_os}"),
                ("metadata", f"arch:{self.platform.graalvm_arch}"),
                ("metadata", metadata),
                ("status", "PUBLISHED"),
                ("responseFields", "id"),
                ("responseFields", "checksum"),
            ]
        )
        return f"{self.base_url}/artifacts?{urlencode(params, safe=':')}"

    async def fetch_artifact(self, version: str, java_version: str) -> Dict[str, Any]:
        """Look up the single catalog item for ``version`` and ``java_version``.

        Raises:
            VersionNotFound: If the catalog has no matching item or rejects the query.
            AmbiguousVersion: If more than one item matches.
        """
        url = self.catalog_url(version, java_version)
        logger.debug("Requesting %s", url)
        status, _, data = await self.http.get_json(url, context="gds")
        if status == 0:
            raise UpstreamUnavailable("Unable to reach the GraalVM Download Service.")
        if status != 200:
            raise VersionNotFound(f"Unable to find JDK{java_version}-based GraalVM EE {version}")
        items = (data or {}).get("items") if isinstance(data, dict) else None
        if not isinstance(items, list):
            raise UpstreamUnavailable(
                f"Unexpected response from the GraalVM Download Service. {Constants.ERROR_REQUEST}"
            )
        if len(items) > 1:
            raise AmbiguousVersion("Found more than one GDS artifact.")
        if not items:
            raise VersionNotFound(
                f"Unable to find GDS artifact. Are you sure version: '{version}' is correct?"
            )
        return items[0]

    async def resolve(self, descriptor: VersionDescriptor) -> Artifact:
        if not self.gds_token:
            raise AuthRejected(
                "A 'gds-token' is required to download GraalVM Enterprise Edition."
            )
        item = await self.fetch_artifact(descriptor.version, descriptor.java_version)
        artifact_id = item.get("id")
        if not artifact_id:
            raise UpstreamUnavailable(
                f"GDS artifact without id. {Constants.ERROR_REQUEST}"
            )
        version = None if descriptor.version == Constants.VERSION_LATEST else descriptor.version
        return Artifact(
            download_url=f"{self.base_url}/artifacts/{artifact_id}/content",
            id=artifact_id,
            checksum=item.get("checksum"),
            version=version,
            headers={"accept": "application/x-yaml", "x-download-token": self.gds_token},
            name=f"{self.tool_name(descriptor)}-{descriptor.version}{self.platform.file_extension}",
        )
