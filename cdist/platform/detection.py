"""Platform and architecture detection.

Detection is cached per process. Names follow Node's ``process.platform`` /
``process.arch`` vocabulary (``linux``, ``darwin``, ``win32``; ``x64``,
``arm64``, ``ia32``) because release artifacts are keyed that way.
"""

from __future__ import annotations

import os as _os
import platform as _platform
import re as _re
import sys as _sys
from dataclasses import dataclass
from enum import Enum, auto
from functools import lru_cache

__all__ = [
    "Arch",
    "Platform",
    "PlatformInfo",
    "PlatformKey",
    "detect",
    "detect_arch",
    "detect_machine",
    "detect_platform",
    "resolve_platform_key",
]


class Platform(Enum):
    """Operating system platform."""

    LINUX = auto()
    MACOS = auto()
    WINDOWS = auto()
    UNKNOWN = auto()

    def __str__(self) -> str:
        return self.name.lower()

    @property
    def exe_suffix(self) -> str:
        """Executable file suffix for this platform."""
        return ".exe" if self == Platform.WINDOWS else ""

    @property
    def node_name(self) -> str | None:
        """Node-style platform name, or None when unknown."""
        return {
            Platform.LINUX: "linux",
            Platform.MACOS: "darwin",
            Platform.WINDOWS: "win32",
        }.get(self)

    def exe_name(self, name: str) -> str:
        """Executable name with platform-appropriate suffix.

        Example: exe_name("changie") -> "changie.exe" on Windows.
        """
        return f"{name}{self.exe_suffix}"


class Arch(Enum):
    """CPU architecture."""

    X64 = auto()
    ARM64 = auto()
    IA32 = auto()
    UNKNOWN = auto()

    def __str__(self) -> str:
        return self.name.lower()

    @property
    def node_name(self) -> str | None:
        return {Arch.X64: "x64", Arch.ARM64: "arm64", Arch.IA32: "ia32"}.get(self)


@dataclass(frozen=True, slots=True)
class PlatformInfo:
    """Detected platform information. Use `detect()` to get an instance."""

    platform: Platform
    arch: Arch
    machine: str

    def __str__(self) -> str:
        return f"{self.platform}-{self.arch}"


@dataclass(frozen=True, slots=True)
class PlatformKey:
    """Identifies the build artifact for one OS/arch/extension combination.

    Rendered as ``{os}-{arch}{ext}``, e.g. ``linux-x64`` or ``win32-x64.exe``.
    """

    os: str
    arch: str
    ext: str = ""

    def __str__(self) -> str:
        return f"{self.os}-{self.arch}{self.ext}"

    @classmethod
    def from_info(cls, info: PlatformInfo) -> PlatformKey:
        os_name = info.platform.node_name or _fallback_os_name(_sys.platform)
        arch_name = info.arch.node_name or (info.machine.lower() or "unknown")
        return cls(os=os_name, arch=arch_name, ext=info.platform.exe_suffix)


def _fallback_os_name(system: str) -> str:
    # Node reports e.g. "freebsd" where sys.platform says "freebsd14"
    return _re.sub(r"\d+$", "", system.lower()) or "unknown"


@lru_cache(maxsize=1)
def detect_platform() -> Platform:
    """Detect the current operating system (cached)."""
    # NOTE: avoid platform.system() on Windows; it may query WMI and hang.
    system = _sys.platform.lower()
    if system.startswith("linux"):
        return Platform.LINUX
    if system.startswith("darwin"):
        return Platform.MACOS
    if system.startswith(("win32", "cygwin", "msys")):
        return Platform.WINDOWS
    return Platform.UNKNOWN


@lru_cache(maxsize=1)
def detect_machine() -> str:
    """Raw machine name, lower-cased (cached)."""
    if detect_platform() == Platform.WINDOWS:
        # WOW64 processes see the emulated arch in PROCESSOR_ARCHITECTURE
        env_arch = (
            _os.environ.get("PROCESSOR_ARCHITEW6432")
            or _os.environ.get("PROCESSOR_ARCHITECTURE")
            or ""
        )
        return env_arch.lower()
    return _platform.machine().lower()


@lru_cache(maxsize=1)
def detect_arch() -> Arch:
    """Detect the current CPU architecture (cached)."""
    machine = detect_machine()
    if machine in ("x86_64", "amd64", "x64"):
        return Arch.X64
    if machine in ("aarch64", "arm64"):
        return Arch.ARM64
    if machine in ("x86", "i386", "i486", "i586", "i686"):
        return Arch.IA32
    return Arch.UNKNOWN


@lru_cache(maxsize=1)
def detect() -> PlatformInfo:
    """Detect complete platform information (cached)."""
    return PlatformInfo(
        platform=detect_platform(),
        arch=detect_arch(),
        machine=detect_machine(),
    )


def resolve_platform_key(info: PlatformInfo | None = None) -> PlatformKey:
    """Platform key of the running host.

    Always returns a key; unknown systems produce a key built from the raw
    OS and machine names, which simply will not be found in the manifest.
    """
    return PlatformKey.from_info(info if info is not None else detect())
