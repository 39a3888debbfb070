"""Fallback stub for platforms without a shipped binary.

Staging happens at install time, possibly under a different runtime than
the one that later executes the tool. Rather than failing the install, we
put a stub at the canonical executable path that reports the unsupported
platform key when it is run.

Stubs are POSIX sh (LF line endings, mode 0755) on Unix and cmd (CRLF) on
Windows, where the canonical ``.exe`` name cannot hold a script.
"""

from __future__ import annotations

import re
import shlex
from dataclasses import dataclass
from pathlib import Path

from cdist.core.errors import ErrorCode
from cdist.platform.detection import Platform
from cdist.platform.files import EXECUTABLE_MODE, atomic_write_text

__all__ = ["FallbackStub", "fallback_path", "write_fallback"]

_CMD_SPECIAL = re.compile(r"([\^&|<>()])")


@dataclass(frozen=True, slots=True)
class FallbackStub:
    """A script that fails with UNSUPPORTED_PLATFORM naming ``key``."""

    key: str
    binary_name: str

    @property
    def message(self) -> str:
        return f"error: unsupported platform for {self.binary_name}: {self.key}"

    def render_sh(self) -> str:
        lines = [
            "#!/bin/sh",
            f"# Auto-generated: no {self.binary_name} build for this platform",
            f"echo {shlex.quote(self.message)} >&2",
            f"exit {int(ErrorCode.UNSUPPORTED_PLATFORM)}",
        ]
        return "\n".join(lines) + "\n"

    def render_cmd(self) -> str:
        escaped = _CMD_SPECIAL.sub(r"^\1", self.message).replace("%", "%%")
        lines = [
            "@echo off",
            f"REM Auto-generated: no {self.binary_name} build for this platform",
            f"echo {escaped} 1>&2",
            f"exit /b {int(ErrorCode.UNSUPPORTED_PLATFORM)}",
        ]
        return "\r\n".join(lines) + "\r\n"


def fallback_path(dest_dir: Path, binary_name: str, platform: Platform) -> Path:
    if platform == Platform.WINDOWS:
        return dest_dir / f"{binary_name}.cmd"
    return dest_dir / binary_name


def write_fallback(dest_dir: Path, stub: FallbackStub, platform: Platform) -> Path:
    """Write the stub atomically and return its path."""
    path = fallback_path(dest_dir, stub.binary_name, platform)
    if platform == Platform.WINDOWS:
        atomic_write_text(path, stub.render_cmd())
    else:
        atomic_write_text(path, stub.render_sh(), mode=EXECUTABLE_MODE)
    return path
