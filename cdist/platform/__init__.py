"""Platform abstraction layer."""

from .detection import (
    Arch,
    Platform,
    PlatformInfo,
    PlatformKey,
    detect,
    resolve_platform_key,
)
from .files import atomic_copy_file, atomic_write_text, is_regular_file
from .process import run_passthrough

__all__ = [
    # detection
    "Arch",
    "Platform",
    "PlatformInfo",
    "PlatformKey",
    "detect",
    "resolve_platform_key",
    # files
    "atomic_copy_file",
    "atomic_write_text",
    "is_regular_file",
    # process
    "run_passthrough",
]
