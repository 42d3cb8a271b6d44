"""Target platform detection and the platform-dependent naming rules.

Vendors spell operating systems and architectures differently, so every
naming scheme is a method on ``PlatformInfo`` that branches over the closed
set of supported values.
"""
from __future__ import annotations

import logging
import platform as _platform
import subprocess
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class OperatingSystem(Enum):
    """Supported operating systems."""
    LINUX = "linux"
    MACOS = "macos"
    WINDOWS = "windows"


class Architecture(Enum):
    """Supported CPU architectures."""
    X64 = "x64"
    AARCH64 = "aarch64"


class ArchiveFormat(Enum):
    """Archive formats published for the supported platforms."""
    TAR_GZ = ".tar.gz"
    ZIP = ".zip"


@dataclass(frozen=True)
class PlatformInfo:
    """Operating system and architecture the JDK is acquired for."""

    os: OperatingSystem
    arch: Architecture
    musl: bool = False

    @property
    def jdk_platform(self) -> str:
        """OS name used in JDK file names (linux, macos, windows)."""
        return self.os.value

    @property
    def graalvm_platform(self) -> str:
        """OS name used by GraalVM release assets (linux, darwin, windows)."""
        if self.os is OperatingSystem.LINUX:
            return "linux"
        if self.os is OperatingSystem.MACOS:
            return "darwin"
        if self.os is OperatingSystem.WINDOWS:
            return "windows"
        raise ValueError(f"Unsupported platform: {self.os}")

    @property
    def gds_os(self) -> str:
        """OS name understood by the GDS catalog."""
        if self.os is OperatingSystem.MACOS:
            return "macos"
        return self.graalvm_platform

    @property
    def jdk_arch(self) -> str:
        """Architecture used in JDK file names (x64, aarch64)."""
        return self.arch.value

    @property
    def graalvm_arch(self) -> str:
        """Architecture used by GraalVM release assets (amd64, aarch64)."""
        if self.arch is Architecture.X64:
            return "amd64"
        if self.arch is Architecture.AARCH64:
            return "aarch64"
        raise ValueError(f"Unsupported architecture: {self.arch}")

    @property
    def archive_format(self) -> ArchiveFormat:
        """Windows builds ship as zip, everything else as tar.gz."""
        if self.os is OperatingSystem.WINDOWS:
            return ArchiveFormat.ZIP
        if self.os in (OperatingSystem.LINUX, OperatingSystem.MACOS):
            return ArchiveFormat.TAR_GZ
        raise ValueError(f"Unsupported platform: {self.os}")

    @property
    def file_extension(self) -> str:
        return self.archive_format.value

    @property
    def jdk_home_suffix(self) -> str:
        """Relative path from the archive root directory to JAVA_HOME."""
        if self.os is OperatingSystem.MACOS:
            return "Contents/Home"
        return ""

    @property
    def executable_suffix(self) -> str:
        return ".exe" if self.os is OperatingSystem.WINDOWS else ""


def detect_os(system: str) -> OperatingSystem:
    """Map ``platform.system()`` output to an ``OperatingSystem``."""
    normalized = system.lower()
    if normalized == "linux":
        return OperatingSystem.LINUX
    if normalized == "darwin":
        return OperatingSystem.MACOS
    if normalized in ("windows", "win32") or normalized.startswith(("cygwin", "msys")):
        return OperatingSystem.WINDOWS
    raise ValueError(f"Unsupported platform: {system}")


def detect_arch(machine: str) -> Architecture:
    """Map ``platform.machine()`` output to an ``Architecture``."""
    normalized = machine.lower()
    if normalized in ("x86_64", "amd64", "x64"):
        return Architecture.X64
    if normalized in ("arm64", "aarch64"):
        return Architecture.AARCH64
    raise ValueError(f"Unsupported architecture: {machine}")


def is_musl_based_linux() -> bool:
    """Detect musl libc by asking ``ldd`` for its version banner."""
    try:
        result = subprocess.run(
            ["ldd", "--version"],
            capture_output=True,
            text=True,
            timeout=10,
            check=False,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        logger.debug("Unable to run ldd: %s", exc)
        return False
    return "musl" in (result.stderr or "") or "musl" in (result.stdout or "")


def detect_platform() -> PlatformInfo:
    """Describe the platform this process runs on."""
    os_value = detect_os(_platform.system())
    arch = detect_arch(_platform.machine())
    musl = os_value is OperatingSystem.LINUX and is_musl_based_linux()
    return PlatformInfo(os=os_value, arch=arch, musl=musl)
