"""Host platform and architecture detection.

Release assets are published per Rust target triple, so detection ends in
``host_target_triple()``. Detection is cached for the life of the process.
"""

from __future__ import annotations

import platform as _platform
import sys as _sys
from enum import Enum, auto
from functools import lru_cache

__all__ = [
    "Platform",
    "Arch",
    "detect_platform",
    "detect_arch",
    "target_triple",
    "host_target_triple",
]


class Platform(Enum):
    """Operating system platform."""

    LINUX = auto()
    MACOS = auto()
    WINDOWS = auto()
    UNKNOWN = auto()

    def __str__(self) -> str:
        return self.name.lower()

    def exe_name(self, name: str) -> str:
        """Executable file name: ``sccache.exe`` on Windows, ``sccache`` elsewhere."""
        return f"{name}.exe" if self == Platform.WINDOWS else name


class Arch(Enum):
    """CPU architecture."""

    X64 = auto()
    ARM64 = auto()
    UNKNOWN = auto()

    def __str__(self) -> str:
        return self.name.lower()


# Statically linked musl builds on Linux so the binary runs on any CI image.
_TRIPLES: dict[tuple[Platform, Arch], str] = {
    (Platform.LINUX, Arch.X64): "x86_64-unknown-linux-musl",
    (Platform.LINUX, Arch.ARM64): "aarch64-unknown-linux-musl",
    (Platform.MACOS, Arch.X64): "x86_64-apple-darwin",
    (Platform.MACOS, Arch.ARM64): "aarch64-apple-darwin",
    (Platform.WINDOWS, Arch.X64): "x86_64-pc-windows-msvc",
}


@lru_cache(maxsize=1)
def detect_platform() -> Platform:
    """Detect the current operating system (cached)."""
    system = _sys.platform.lower()
    if system.startswith("linux"):
        return Platform.LINUX
    if system.startswith("darwin"):
        return Platform.MACOS
    if system.startswith(("win32", "cygwin", "msys")):
        return Platform.WINDOWS
    return Platform.UNKNOWN


@lru_cache(maxsize=1)
def detect_arch() -> Arch:
    """Detect the current CPU architecture (cached)."""
    machine = _platform.machine().lower()
    if machine in ("x86_64", "amd64"):
        return Arch.X64
    if machine in ("aarch64", "arm64"):
        return Arch.ARM64
    return Arch.UNKNOWN


def target_triple(platform: Platform, arch: Arch) -> str | None:
    """Rust target triple for platform/arch, or None when unsupported."""
    return _TRIPLES.get((platform, arch))


def host_target_triple() -> str | None:
    return target_triple(detect_platform(), detect_arch())
