"""Tests for the GitHub API client."""

import asyncio
import base64
import json

import pytest

from common.errors import UpstreamUnavailable, VersionNotFound
from resolvers.github import GitHubClient, find_asset_url

from http_stubs import StubHttp

API = "https://api.github.com"


def _encoded(payload):
    return {"type": "file", "content": base64.b64encode(json.dumps(payload).encode()).decode()}


class TestGitHubClient:
    """Endpoint wrappers and status handling."""

    def test_authorization_header(self):
        http = StubHttp({f"{API}/repos/graalvm/graalvm-ce-builds/releases/latest": (200, {}, {"tag_name": "jdk-21.0.1"})})
        client = GitHubClient(http, token="secret")

        release = asyncio.run(client.get_latest_release("graalvm", "graalvm-ce-builds"))

        assert release["tag_name"] == "jdk-21.0.1"
        assert http.json_calls[0][1]["Authorization"] == "Bearer secret"

    def test_matching_tags_url(self):
        url = f"{API}/repos/graalvm/graalvm-ce-builds/git/matching-refs/tags/jdk-17"
        http = StubHttp({url: (200, {}, [{"ref": "refs/tags/jdk-17.0.9"}])})

        refs = asyncio.run(GitHubClient(http).get_matching_tags("graalvm", "graalvm-ce-builds", "jdk-17"))

        assert refs == [{"ref": "refs/tags/jdk-17.0.9"}]
        assert "Authorization" not in http.json_calls[0][1]

    def test_matching_tags_rejects_non_list(self):
        url = f"{API}/repos/graalvm/graalvm-ce-builds/git/matching-refs/tags/jdk-17"
        http = StubHttp({url: (200, {}, {"message": "odd"})})

        with pytest.raises(UpstreamUnavailable):
            asyncio.run(GitHubClient(http).get_matching_tags("graalvm", "graalvm-ce-builds", "jdk-17"))

    def test_missing_release_is_version_not_found(self):
        http = StubHttp()

        with pytest.raises(VersionNotFound):
            asyncio.run(GitHubClient(http).get_tagged_release("bell-sw", "LibericaNIK", "jdk-17.0.7+7"))

        assert http.json_calls[0][0].endswith("/releases/tags/jdk-17.0.7%2B7")

    def test_transport_error_is_upstream_unavailable(self):
        http = StubHttp({API: (0, {}, None)})

        with pytest.raises(UpstreamUnavailable):
            asyncio.run(GitHubClient(http).get_latest_release("graalvm", "graalvm-ce-dev-builds"))

    def test_json_file_is_decoded(self):
        url = f"{API}/repos/graalvm/oracle-graalvm-ea-builds/contents/versions/latest-ea.json"
        http = StubHttp({url: (200, {}, _encoded({"version": "25-ea"}))})

        data = asyncio.run(GitHubClient(http).get_json_file(
            "graalvm", "oracle-graalvm-ea-builds", "versions/latest-ea.json", not_found="missing"
        ))

        assert data == {"version": "25-ea"}

    def test_json_file_not_found_message(self):
        with pytest.raises(VersionNotFound) as excinfo:
            asyncio.run(GitHubClient(StubHttp()).get_json_file(
                "graalvm", "oracle-graalvm-ea-builds", "versions/99-ea.json", not_found="no such EA"
            ))
        assert str(excinfo.value) == "no such EA"


class TestFindAssetUrl:
    """Asset lookup by exact name."""

    def test_found_and_missing(self):
        release = {"assets": [{"name": "a.tar.gz", "browser_download_url": "https://x/a.tar.gz"}]}
        assert find_asset_url(release, "a.tar.gz") == "https://x/a.tar.gz"
        assert find_asset_url(release, "b.tar.gz") is None
        assert find_asset_url({}, "a.tar.gz") is None
