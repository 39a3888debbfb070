"""Filesystem helpers."""

from __future__ import annotations

import os
import shutil
import stat
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO

__all__ = [
    "EXECUTABLE_MODE",
    "atomic_copy_file",
    "atomic_write_bytes",
    "atomic_write_text",
    "is_regular_file",
]

EXECUTABLE_MODE = 0o755


def is_regular_file(path: Path) -> bool:
    """True if path exists and is a regular file (symlinks are followed)."""
    try:
        return stat.S_ISREG(path.stat().st_mode)
    except (FileNotFoundError, NotADirectoryError):
        return False


@contextmanager
def _atomic_target(path: Path, mode: int | None) -> Iterator[BinaryIO]:
    """Yield a temp file beside path; on success replace path with it."""
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.",
        suffix=".tmp",
        dir=str(path.parent),
    )
    tmp_path = Path(tmp_name)

    try:
        with os.fdopen(fd, "wb") as handle:
            yield handle
            handle.flush()
            os.fsync(handle.fileno())
        if mode is not None:
            tmp_path.chmod(mode)
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink(missing_ok=True)


def atomic_write_bytes(path: Path, content: bytes, *, mode: int | None = None) -> None:
    """Write bytes to path atomically using temp file + replace."""
    with _atomic_target(path, mode) as handle:
        handle.write(content)


def atomic_write_text(
    path: Path,
    content: str,
    *,
    encoding: str = "utf-8",
    mode: int | None = None,
) -> None:
    """Write text to path atomically. Line endings are written as given."""
    atomic_write_bytes(path, content.encode(encoding), mode=mode)


def atomic_copy_file(src: Path, dst: Path, *, mode: int | None = None) -> None:
    """Copy src to dst byte-for-byte, never leaving a partial dst behind."""
    with src.open("rb") as source, _atomic_target(dst, mode) as handle:
        shutil.copyfileobj(source, handle)
