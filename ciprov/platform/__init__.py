"""Platform abstraction layer."""

from .detection import (
    Arch,
    Platform,
    detect_arch,
    detect_platform,
    host_target_triple,
    target_triple,
)
from .files import atomic_write_text, place_executable
from .process import (
    CommandRunner,
    MockProcessRunner,
    ProcessError,
    SubprocessRunner,
)

__all__ = [
    # detection
    "Arch",
    "Platform",
    "detect_arch",
    "detect_platform",
    "host_target_triple",
    "target_triple",
    # files
    "atomic_write_text",
    "place_executable",
    # process
    "CommandRunner",
    "MockProcessRunner",
    "ProcessError",
    "SubprocessRunner",
]
