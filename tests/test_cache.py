"""Tests for the local tool cache."""

import os
from unittest.mock import patch

from acquisition.cache import LocalCache
from versioning.normalizer import normalize


def _populate(directory, marker="java"):
    (directory / "graalvm-jdk-21" / "bin").mkdir(parents=True)
    (directory / "graalvm-jdk-21" / "bin" / marker).write_text("x")
    return directory


class TestLocalCache:
    """Lookup, publishing and listing of cache entries."""

    def test_lookup_miss(self, tmp_path):
        cache = LocalCache(tmp_path)
        assert cache.lookup("graalvm-jdk_linux-x64_bin", normalize("21.0.1")) is None

    def test_store_then_lookup(self, tmp_path):
        cache = LocalCache(tmp_path / "cache")
        version = normalize("21.0.1")
        with cache.workspace() as workspace:
            source = _populate(workspace / "content")
            stored = cache.store("graalvm-jdk_linux-x64_bin", version, source)

        assert stored == tmp_path / "cache" / "graalvm-jdk_linux-x64_bin" / "21.0.1"
        assert cache.lookup("graalvm-jdk_linux-x64_bin", version) == stored
        assert (stored / "graalvm-jdk-21" / "bin" / "java").exists()
        assert not source.exists()

    def test_workspace_is_removed(self, tmp_path):
        cache = LocalCache(tmp_path)
        with cache.workspace() as workspace:
            (workspace / "file").write_text("x")
        assert not workspace.exists()

    def test_build_metadata_keeps_entries_apart(self, tmp_path):
        cache = LocalCache(tmp_path)
        tool = "bellsoft-liberica-vm-linux-amd64"
        with cache.workspace() as workspace:
            cache.store(tool, normalize("17.0.7+7"), _populate(workspace / "a"))
        assert cache.lookup(tool, normalize("17.0.7+10")) is None
        assert cache.lookup(tool, normalize("17.0.7+7")) is not None

    def test_concurrent_store_keeps_first_entry(self, tmp_path):
        cache = LocalCache(tmp_path)
        tool = "graalvm-jdk_linux-x64_bin"
        version = normalize("21.0.1")
        with cache.workspace() as workspace:
            first = cache.store(tool, version, _populate(workspace / "first", marker="first"))
            second = cache.store(tool, version, _populate(workspace / "second", marker="second"))

        assert first == second
        assert (first / "graalvm-jdk-21" / "bin" / "first").exists()
        assert not (first / "graalvm-jdk-21" / "bin" / "second").exists()
        leftovers = [p.name for p in (tmp_path / tool).iterdir()]
        assert leftovers == ["21.0.1"]

    def test_failed_publish_leaves_no_staging(self, tmp_path):
        cache = LocalCache(tmp_path)
        tool = "graalvm-jdk_linux-x64_bin"
        with cache.workspace() as workspace:
            source = _populate(workspace / "content")
            with patch("acquisition.cache.os.rename", side_effect=PermissionError(13, "denied")):
                try:
                    cache.store(tool, normalize("21.0.1"), source)
                except PermissionError:
                    pass
                else:
                    raise AssertionError("store should have failed")

        assert list((tmp_path / tool).iterdir()) == []
        assert cache.lookup(tool, normalize("21.0.1")) is None

    def test_entries_are_sorted(self, tmp_path):
        cache = LocalCache(tmp_path)
        tool = "graalvm-community-jdk_linux-x64_bin"
        for version in ("21.0.1", "17.0.9", "21.0.10"):
            os.makedirs(tmp_path / tool / version)
        os.makedirs(tmp_path / tool / ".staging-abc")

        versions = [str(entry.canonical_version) for entry in cache.entries(tool)]

        assert versions == ["17.0.9", "21.0.1", "21.0.10"]
