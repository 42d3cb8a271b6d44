"""In-memory stand-ins for the HTTP and GitHub clients used by the tests."""

from contextlib import asynccontextmanager

from common.errors import VersionNotFound
from common.platform import Architecture, OperatingSystem, PlatformInfo

LINUX_X64 = PlatformInfo(OperatingSystem.LINUX, Architecture.X64)
MACOS_AARCH64 = PlatformInfo(OperatingSystem.MACOS, Architecture.AARCH64)
WINDOWS_X64 = PlatformInfo(OperatingSystem.WINDOWS, Architecture.X64)


class _DummyContent:
    def __init__(self, body, error=None):
        self._body = body
        self._error = error

    async def iter_chunked(self, size):
        for start in range(0, len(self._body), size):
            yield self._body[start:start + size]
        if self._error is not None:
            raise self._error


class _DummyResponse:
    def __init__(self, status, body=b"", headers=None, reason="", error=None):
        self.status = status
        self.headers = headers or {}
        self.reason = reason
        self.content = _DummyContent(body, error)
        self._body = body

    async def text(self):
        return self._body.decode("utf-8")


class StubHttp:
    """Serves canned JSON by URL and canned streamed responses in order."""

    def __init__(self, json_responses=None, downloads=None):
        self.json_responses = dict(json_responses or {})
        self.downloads = list(downloads or [])
        self.json_calls = []
        self.download_calls = []

    async def get_json(self, url, *, headers=None, context=""):
        self.json_calls.append((url, headers))
        for key, value in self.json_responses.items():
            if url == key or url.startswith(key):
                return value
        return 404, {}, {"message": "Not Found"}

    @asynccontextmanager
    async def open_response(self, url, headers=None, timeout=None):
        self.download_calls.append((url, headers))
        item = self.downloads.pop(0)
        if isinstance(item, BaseException):
            raise item
        yield item


class StubGitHub:
    """GitHubClient replacement backed by dictionaries."""

    def __init__(self, tags=None, releases=None, latest=None, files=None):
        self.tags = tags or {}
        self.releases = releases or {}
        self.latest = latest or {}
        self.files = files or {}
        self.calls = []

    async def get_matching_tags(self, owner, repo, tag_prefix):
        self.calls.append(("tags", owner, repo, tag_prefix))
        return [
            {"ref": f"refs/tags/{tag}"}
            for tag in self.tags.get((owner, repo), [])
            if tag.startswith(tag_prefix)
        ]

    async def get_tagged_release(self, owner, repo, tag):
        self.calls.append(("release", owner, repo, tag))
        try:
            return self.releases[(owner, repo, tag)]
        except KeyError:
            raise VersionNotFound(f"Unable to find release '{tag}' in {owner}/{repo}.") from None

    async def get_latest_release(self, owner, repo):
        self.calls.append(("latest", owner, repo))
        return self.latest[(owner, repo)]

    async def get_json_file(self, owner, repo, path, *, not_found):
        self.calls.append(("file", owner, repo, path))
        if (owner, repo, path) not in self.files:
            raise VersionNotFound(not_found)
        return self.files[(owner, repo, path)]
