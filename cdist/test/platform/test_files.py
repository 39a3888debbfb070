from __future__ import annotations

import os
import stat
import sys
from pathlib import Path

import pytest

from cdist.platform.files import (
    atomic_copy_file,
    atomic_write_bytes,
    atomic_write_text,
    is_regular_file,
)


def test_atomic_write_text_creates_parent_dirs(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "manifest.json"
    atomic_write_text(path, '{"ok":true}\n')

    assert path.read_text(encoding="utf-8") == '{"ok":true}\n'


def test_atomic_write_text_keeps_line_endings(tmp_path: Path) -> None:
    path = tmp_path / "stub.cmd"
    atomic_write_text(path, "@echo off\r\nexit /b 2\r\n")

    assert path.read_bytes() == b"@echo off\r\nexit /b 2\r\n"


def test_atomic_write_bytes_replaces_existing_content(tmp_path: Path) -> None:
    path = tmp_path / "changie"
    path.write_bytes(b"old fallback")

    atomic_write_bytes(path, b"new")

    assert path.read_bytes() == b"new"


@pytest.mark.skipif(sys.platform == "win32", reason="chmod doesn't work on Windows")
def test_atomic_write_sets_mode(tmp_path: Path) -> None:
    path = tmp_path / "changie"
    atomic_write_bytes(path, b"#!/bin/sh\n", mode=0o755)

    assert stat.S_IMODE(path.stat().st_mode) == 0o755


def test_atomic_copy_file_is_byte_exact(tmp_path: Path) -> None:
    src = tmp_path / "linux-x64"
    payload = bytes(range(256)) * 64
    src.write_bytes(payload)
    dst = tmp_path / "out" / "changie"

    atomic_copy_file(src, dst)

    assert dst.read_bytes() == payload
    assert sorted(p.name for p in dst.parent.iterdir()) == ["changie"]


def test_atomic_copy_cleans_temp_file_on_replace_failure(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    src = tmp_path / "src"
    src.write_bytes(b"binary")
    dst_dir = tmp_path / "dest"
    dst = dst_dir / "changie"
    dst_dir.mkdir()
    dst.write_bytes(b"fallback")

    def fail_replace(_src: Path, _dst: Path) -> None:
        raise OSError("replace failed")

    monkeypatch.setattr(os, "replace", fail_replace)

    with pytest.raises(OSError, match="replace failed"):
        atomic_copy_file(src, dst)

    assert dst.read_bytes() == b"fallback"
    assert list(dst_dir.glob(".changie.*.tmp")) == []


def test_atomic_copy_missing_source_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        atomic_copy_file(tmp_path / "missing", tmp_path / "dst")

    assert not (tmp_path / "dst").exists()


class TestIsRegularFile:
    def test_file(self, tmp_path: Path) -> None:
        path = tmp_path / "f"
        path.write_bytes(b"")
        assert is_regular_file(path) is True

    def test_directory(self, tmp_path: Path) -> None:
        assert is_regular_file(tmp_path) is False

    def test_missing(self, tmp_path: Path) -> None:
        assert is_regular_file(tmp_path / "missing") is False

    def test_under_a_file(self, tmp_path: Path) -> None:
        path = tmp_path / "f"
        path.write_bytes(b"")
        assert is_regular_file(path / "child") is False
