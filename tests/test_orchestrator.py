"""Tests for the acquisition orchestrator."""

import asyncio
import io
import shutil
import tarfile

import pytest

from acquisition.cache import LocalCache
from acquisition.config import AcquisitionConfig
from acquisition.downloader import Downloader
from acquisition.orchestrator import AcquisitionOrchestrator
from acquisition.retry import RetryPolicy
from common.errors import InvalidVersionFormat, NotFound, UnexpectedArchiveLayout
from resolvers.base import SourceResolver
from resolvers.graalvm_ce import GraalVMCommunityResolver
from resolvers.liberica import LibericaResolver
from resolvers.mandrel import MandrelResolver
from versioning.models import Artifact, Distribution, VersionDescriptor
from versioning.normalizer import normalize

from http_stubs import LINUX_X64, StubGitHub, StubHttp, _DummyResponse

TOOL = "graalvm-jdk_linux-x64_bin"


def _tarball(path, top_levels=("graalvm-jdk-21.0.2",)):
    with tarfile.open(path, "w:gz") as tar:
        for top in top_levels:
            data = b"#!/bin/sh\n"
            info = tarfile.TarInfo(f"{top}/bin/java")
            info.size = len(data)
            info.mode = 0o755
            tar.addfile(info, io.BytesIO(data))
    return path


class _FakeResolver(SourceResolver):
    def __init__(self, artifact, cache_version=None):
        super().__init__(StubHttp(), LINUX_X64, github=StubGitHub())
        self.artifact = artifact
        self._cache_version = cache_version
        self.resolve_calls = 0

    @property
    def distribution(self):
        return Distribution.GRAALVM_JDK

    def tool_name(self, descriptor):
        return TOOL

    def cache_version(self, descriptor):
        return self._cache_version

    async def resolve(self, descriptor):
        self.resolve_calls += 1
        return self.artifact


class _FakeDownloader:
    def __init__(self, archive, temp_dir):
        self.archive = archive
        self.temp_dir = temp_dir
        self.calls = 0

    async def fetch(self, artifact):
        self.calls += 1
        self.temp_dir.mkdir(parents=True, exist_ok=True)
        dest = self.temp_dir / f"download-{self.calls}"
        shutil.copy(self.archive, dest)
        return dest


def _config(tmp_path):
    return AcquisitionConfig(
        tool_cache_dir=tmp_path / "cache",
        temp_dir=tmp_path / "tmp",
        platform=LINUX_X64,
        retry=RetryPolicy(max_attempts=1, min_backoff=0, max_backoff=0),
    )


def _orchestrator(tmp_path, resolver, downloader=None, http=None):
    config = _config(tmp_path)
    return AcquisitionOrchestrator(
        config,
        http or StubHttp(),
        downloader=downloader,
        resolver_factory=lambda descriptor: resolver,
    )


class TestCacheShortCircuit:
    """Cache hits skip resolution and download."""

    def test_hit_before_resolution(self, tmp_path):
        cached = tmp_path / "cache" / TOOL / "21.0.2" / "graalvm-jdk-21.0.2"
        cached.mkdir(parents=True)
        resolver = _FakeResolver(Artifact(download_url="https://x/a.tar.gz", version="21.0.2"), "21.0.2")
        downloader = _FakeDownloader(_tarball(tmp_path / "a.tar.gz"), tmp_path / "tmp")
        orchestrator = _orchestrator(tmp_path, resolver, downloader)

        home = asyncio.run(orchestrator.acquire(VersionDescriptor(Distribution.GRAALVM_JDK, "21.0.2")))

        assert home == cached
        assert resolver.resolve_calls == 0
        assert downloader.calls == 0

    def test_hit_after_pattern_resolution(self, tmp_path):
        cached = tmp_path / "cache" / "graalvm-community-jdk_linux-x64_bin" / "17.0.9" / "graalvm-community-openjdk-17.0.9"
        cached.mkdir(parents=True)
        github = StubGitHub(tags={("graalvm", "graalvm-ce-builds"): ["jdk-17.0.2", "jdk-17.0.9", "jdk-11.0.1"]})
        resolver = GraalVMCommunityResolver(StubHttp(), LINUX_X64, github=github)
        downloader = _FakeDownloader(_tarball(tmp_path / "a.tar.gz"), tmp_path / "tmp")
        orchestrator = _orchestrator(tmp_path, resolver, downloader)

        home = asyncio.run(orchestrator.acquire(VersionDescriptor(Distribution.GRAALVM_CE, "17")))

        assert home == cached
        assert downloader.calls == 0


class TestInstall:
    """Download, extraction and publishing."""

    def test_miss_installs_then_hits(self, tmp_path):
        resolver = _FakeResolver(Artifact(download_url="https://x/a.tar.gz", version="21.0.2"), "21.0.2")
        downloader = _FakeDownloader(_tarball(tmp_path / "a.tar.gz"), tmp_path / "tmp")
        orchestrator = _orchestrator(tmp_path, resolver, downloader)
        descriptor = VersionDescriptor(Distribution.GRAALVM_JDK, "21.0.2")

        first = asyncio.run(orchestrator.acquire(descriptor))
        second = asyncio.run(orchestrator.acquire(descriptor))

        assert first == tmp_path / "cache" / TOOL / "21.0.2" / "graalvm-jdk-21.0.2"
        assert (first / "bin" / "java").exists()
        assert second == first
        assert downloader.calls == 1
        assert resolver.resolve_calls == 1
        assert list((tmp_path / "tmp").iterdir()) == []
        assert list((tmp_path / "cache" / ".tmp").iterdir()) == []

    def test_resolved_version_is_the_cache_key(self, tmp_path):
        resolver = _FakeResolver(Artifact(download_url="https://x/a.tar.gz", version="21.0.2"))
        downloader = _FakeDownloader(_tarball(tmp_path / "a.tar.gz"), tmp_path / "tmp")
        orchestrator = _orchestrator(tmp_path, resolver, downloader)

        asyncio.run(orchestrator.acquire(VersionDescriptor(Distribution.GRAALVM_JDK, "21")))

        assert LocalCache(tmp_path / "cache").lookup(TOOL, normalize("21.0.2")) is not None

    def test_uncacheable_artifact_bypasses_cache(self, tmp_path):
        resolver = _FakeResolver(Artifact(download_url="https://x/dev.tar.gz", version=None))
        downloader = _FakeDownloader(_tarball(tmp_path / "a.tar.gz"), tmp_path / "tmp")
        orchestrator = _orchestrator(tmp_path, resolver, downloader)

        home = asyncio.run(orchestrator.acquire(VersionDescriptor(Distribution.GRAALVM_CE, "dev")))

        assert (home / "bin" / "java").exists()
        assert (tmp_path / "tmp") in home.parents
        assert not (tmp_path / "cache" / TOOL).exists()

    def test_unexpected_layout_publishes_nothing(self, tmp_path):
        archive = _tarball(tmp_path / "a.tar.gz", top_levels=("one", "two"))
        resolver = _FakeResolver(Artifact(download_url="https://x/a.tar.gz", version="21.0.2"), "21.0.2")
        downloader = _FakeDownloader(archive, tmp_path / "tmp")
        orchestrator = _orchestrator(tmp_path, resolver, downloader)

        with pytest.raises(UnexpectedArchiveLayout) as excinfo:
            asyncio.run(orchestrator.acquire(VersionDescriptor(Distribution.GRAALVM_JDK, "21.0.2")))

        assert "Unexpected amount of directory items found: 2" in str(excinfo.value)
        assert not (tmp_path / "cache" / TOOL / "21.0.2").exists()
        assert list((tmp_path / "tmp").iterdir()) == []

    def test_invalid_cache_version_fails_before_network(self, tmp_path):
        resolver = _FakeResolver(Artifact(download_url="https://x/a.tar.gz"), "not-a-version")
        orchestrator = _orchestrator(tmp_path, resolver, _FakeDownloader(None, tmp_path / "tmp"))

        with pytest.raises(InvalidVersionFormat) as excinfo:
            asyncio.run(orchestrator.acquire(VersionDescriptor(Distribution.GRAALVM_JDK, "x")))

        assert resolver.resolve_calls == 0
        assert excinfo.value.distribution == "graalvm"
        assert excinfo.value.version == "x"


class TestErrorContext:
    """Errors carry the descriptor that failed."""

    def test_mandrel_not_found_names_both_versions(self, tmp_path):
        http = StubHttp(downloads=[_DummyResponse(404)])
        config = _config(tmp_path)
        orchestrator = AcquisitionOrchestrator(
            config,
            http,
            downloader=Downloader(http, config),
            resolver_factory=lambda descriptor: MandrelResolver(http, LINUX_X64, github=StubGitHub()),
        )
        descriptor = VersionDescriptor(Distribution.MANDREL, "23.1.1.0-Final", java_version="17")

        with pytest.raises(NotFound) as excinfo:
            asyncio.run(orchestrator.acquire(descriptor))

        message = str(excinfo.value)
        assert "Failed to download mandrel-java17-linux-amd64-23.1.1.0-Final.tar.gz." in message
        assert "Are you sure version: '23.1.1.0-Final' and java-version: '17' are correct?" in message
        assert len(http.download_calls) == 1

    def test_java_only_hint(self, tmp_path):
        http = StubHttp(downloads=[_DummyResponse(404)])
        config = _config(tmp_path)
        resolver = _FakeResolver(
            Artifact(download_url="https://x/graalvm-jdk-21.0.2_linux-x64_bin.tar.gz", version="21.0.2"),
            "21.0.2",
        )
        orchestrator = AcquisitionOrchestrator(
            config, http, downloader=Downloader(http, config), resolver_factory=lambda d: resolver
        )

        with pytest.raises(NotFound) as excinfo:
            asyncio.run(orchestrator.acquire(VersionDescriptor(Distribution.GRAALVM_JDK, "21.0.2")))

        assert "Are you sure java-version: '21.0.2' is correct?" in str(excinfo.value)


class TestMalformedVersions:
    """Malformed versions fail before any upstream request."""

    @pytest.mark.parametrize("version", ["abc", "a.b.c", "a.b.c.d"])
    def test_rejected_without_network(self, tmp_path, version):
        github = StubGitHub(tags={("bell-sw", "LibericaNIK"): ["jdk-21.0.2+14"]})
        http = StubHttp()
        resolver = LibericaResolver(http, LINUX_X64, github=github)
        downloader = _FakeDownloader(None, tmp_path / "tmp")
        orchestrator = _orchestrator(tmp_path, resolver, downloader, http=http)

        with pytest.raises(InvalidVersionFormat) as excinfo:
            asyncio.run(orchestrator.acquire(VersionDescriptor(Distribution.LIBERICA, version)))

        assert github.calls == []
        assert http.json_calls == []
        assert downloader.calls == 0
        assert excinfo.value.distribution == "liberica"

    def test_fake_resolver_is_not_consulted(self, tmp_path):
        resolver = _FakeResolver(Artifact(download_url="https://x/a.tar.gz", version="21.0.2"))
        orchestrator = _orchestrator(tmp_path, resolver, _FakeDownloader(None, tmp_path / "tmp"))

        with pytest.raises(InvalidVersionFormat):
            asyncio.run(orchestrator.acquire(VersionDescriptor(Distribution.GRAALVM_JDK, "abc")))

        assert resolver.resolve_calls == 0

    @pytest.mark.parametrize("version", ["mandrel-latest", "", "mandrel-abc"])
    def test_mandrel_namespace_is_stripped(self, version):
        resolver = MandrelResolver(StubHttp(), LINUX_X64, github=StubGitHub())
        descriptor = VersionDescriptor(Distribution.MANDREL, version, java_version="21")
        expected = "abc" if version == "mandrel-abc" else None
        assert resolver.requested_version(descriptor) == expected

    @pytest.mark.parametrize("version", ["dev", "latest", "latest-ea", "25-ea"])
    def test_symbolic_versions_are_not_validated(self, version):
        resolver = LibericaResolver(StubHttp(), LINUX_X64, github=StubGitHub())
        assert resolver.requested_version(VersionDescriptor(Distribution.LIBERICA, version)) is None
