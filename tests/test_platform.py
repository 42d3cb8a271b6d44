"""Tests for platform detection and naming."""

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from common.platform import (
    Architecture,
    ArchiveFormat,
    OperatingSystem,
    PlatformInfo,
    detect_arch,
    detect_os,
    is_musl_based_linux,
)


class TestPlatformInfo:
    """Vendor-specific spellings."""

    def test_linux_x64(self):
        info = PlatformInfo(OperatingSystem.LINUX, Architecture.X64)
        assert (info.jdk_platform, info.graalvm_platform, info.gds_os) == ("linux", "linux", "linux")
        assert (info.jdk_arch, info.graalvm_arch) == ("x64", "amd64")
        assert info.archive_format is ArchiveFormat.TAR_GZ
        assert info.jdk_home_suffix == ""

    def test_macos_aarch64(self):
        info = PlatformInfo(OperatingSystem.MACOS, Architecture.AARCH64)
        assert (info.jdk_platform, info.graalvm_platform, info.gds_os) == ("macos", "darwin", "macos")
        assert info.graalvm_arch == "aarch64"
        assert info.jdk_home_suffix == "Contents/Home"

    def test_windows(self):
        info = PlatformInfo(OperatingSystem.WINDOWS, Architecture.X64)
        assert info.file_extension == ".zip"
        assert info.executable_suffix == ".exe"


class TestDetection:
    """Mapping of interpreter platform strings."""

    @pytest.mark.parametrize("system, expected", [
        ("Linux", OperatingSystem.LINUX),
        ("Darwin", OperatingSystem.MACOS),
        ("Windows", OperatingSystem.WINDOWS),
    ])
    def test_detect_os(self, system, expected):
        assert detect_os(system) is expected

    @pytest.mark.parametrize("machine, expected", [
        ("x86_64", Architecture.X64),
        ("AMD64", Architecture.X64),
        ("arm64", Architecture.AARCH64),
        ("aarch64", Architecture.AARCH64),
    ])
    def test_detect_arch(self, machine, expected):
        assert detect_arch(machine) is expected

    def test_unsupported(self):
        with pytest.raises(ValueError):
            detect_os("SunOS")
        with pytest.raises(ValueError):
            detect_arch("ppc64le")

    @patch("common.platform.subprocess.run")
    def test_musl_detected_from_ldd(self, mock_run):
        mock_run.return_value = MagicMock(stdout="", stderr="musl libc (x86_64)\nVersion 1.2.4\n")
        assert is_musl_based_linux() is True

    @patch("common.platform.subprocess.run")
    def test_glibc(self, mock_run):
        mock_run.return_value = MagicMock(stdout="ldd (GNU libc) 2.39\n", stderr="")
        assert is_musl_based_linux() is False

    @patch("common.platform.subprocess.run", side_effect=FileNotFoundError("ldd"))
    def test_missing_ldd(self, mock_run):
        assert is_musl_based_linux() is False

    @patch("common.platform.subprocess.run", side_effect=subprocess.TimeoutExpired("ldd", 10))
    def test_ldd_timeout(self, mock_run):
        assert is_musl_based_linux() is False
