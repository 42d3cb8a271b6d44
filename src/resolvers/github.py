"""GitHub API client for release and tag lookups.

Provides a small async REST client for the read-only endpoints the
resolvers need: latest release, release by tag, matching tag refs and
repository contents.
"""
from __future__ import annotations

import base64
import json
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from constants import Constants
from common.errors import UpstreamUnavailable, VersionNotFound
from common.http_client import HttpClient

logger = logging.getLogger(__name__)


class GitHubClient:
    """Lightweight REST client for GitHub API operations.

    Supports optional authentication via a bearer token for higher rate limits.
    """

    def __init__(
        self,
        http: HttpClient,
        token: Optional[str] = None,
        base_url: Optional[str] = None,
    ):
        """Initialize GitHub client.

        Args:
            http: Shared HTTP client
            token: GitHub token (optional)
            base_url: Base URL for the GitHub API (defaults to Constants.GITHUB_API_BASE)
        """
        self.http = http
        self.token = token
        self.base_url = (base_url or Constants.GITHUB_API_BASE).rstrip("/")

    def _get_headers(self) -> Dict[str, str]:
        """Get request headers including authorization if token is available."""
        headers = {"Accept": "application/vnd.github+json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _get(self, path: str, *, not_found: Optional[str] = None) -> Any:
        """GET ``path`` and return the decoded JSON body.

        Raises:
            VersionNotFound: On 404 when ``not_found`` is given.
            UpstreamUnavailable: On transport errors, other statuses or unparseable bodies.
        """
        url = f"{self.base_url}{path}"
        status, _, data = await self.http.get_json(url, headers=self._get_headers(), context="github")
        if status == 404 and not_found is not None:
            raise VersionNotFound(not_found)
        if status == 0:
            raise UpstreamUnavailable(f"Unable to reach the GitHub API ({path}).")
        if status != 200 or data is None:
            raise UpstreamUnavailable(
                f"Unexpected response from the GitHub API ({path}): HTTP {status}."
            )
        return data

    async def get_latest_release(self, owner: str, repo: str) -> Dict[str, Any]:
        """Fetch the latest release of ``owner/repo``."""
        return await self._get(f"/repos/{owner}/{repo}/releases/latest")

    async def get_tagged_release(self, owner: str, repo: str, tag: str) -> Dict[str, Any]:
        """Fetch the release for ``tag``.

        Raises:
            VersionNotFound: If there is no release for the tag.
        """
        return await self._get(
            f"/repos/{owner}/{repo}/releases/tags/{quote(tag, safe='')}",
            not_found=f"Unable to find release '{tag}' in {owner}/{repo}.",
        )

    async def get_matching_tags(self, owner: str, repo: str, tag_prefix: str) -> List[Dict[str, Any]]:
        """Fetch all tag refs starting with ``tag_prefix``.

        An empty list means no tag matched; it is not an error.
        """
        data = await self._get(
            f"/repos/{owner}/{repo}/git/matching-refs/tags/{quote(tag_prefix, safe='')}"
        )
        if not isinstance(data, list):
            raise UpstreamUnavailable(
                f"Unexpected response when listing tags of {owner}/{repo}. {Constants.ERROR_REQUEST}"
            )
        return data

    async def get_json_file(self, owner: str, repo: str, path: str, *, not_found: str) -> Any:
        """Fetch a JSON file through the contents API and decode it.

        Raises:
            VersionNotFound: If the file does not exist.
            UpstreamUnavailable: If the response is not a base64 encoded file.
        """
        data = await self._get(f"/repos/{owner}/{repo}/contents/{path}", not_found=not_found)
        if isinstance(data, list) or data.get("type") != "file" or not data.get("content"):
            raise UpstreamUnavailable(
                f"Unexpected response when reading {path} from {owner}/{repo}. {Constants.ERROR_REQUEST}"
            )
        try:
            return json.loads(base64.b64decode(data["content"]).decode("utf-8"))
        except (ValueError, UnicodeDecodeError) as exc:
            raise UpstreamUnavailable(
                f"Unable to decode {path} from {owner}/{repo}: {exc}"
            ) from exc


def find_asset_url(release: Dict[str, Any], name: str) -> Optional[str]:
    """Return the download URL of the asset called ``name``, if present."""
    for asset in release.get("assets") or []:
        if asset.get("name") == name:
            return asset.get("browser_download_url")
    return None
