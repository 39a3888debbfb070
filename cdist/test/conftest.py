from __future__ import annotations

import sys
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from cdist.platform.detection import detect, detect_arch, detect_machine, detect_platform

StubFactory = Callable[..., Path]


def _clear_detection_caches() -> None:
    for fn in (detect, detect_arch, detect_machine, detect_platform):
        fn.cache_clear()


@pytest.fixture(autouse=True)
def fresh_detection() -> Iterator[None]:
    """Each test sees un-cached platform detection."""
    _clear_detection_caches()
    yield
    _clear_detection_caches()


@pytest.fixture
def make_stub(tmp_path: Path) -> StubFactory:
    """Create an executable that prints its args as JSON and exits with a code.

    The executable is a sh wrapper around a Python payload kept outside the
    target directory, so it avoids long-shebang limits.
    """
    payload_dir = tmp_path / "_payloads"
    payload_dir.mkdir(exist_ok=True)

    def factory(path: Path, *, exit_code: int = 0, stderr: str = "") -> Path:
        payload = payload_dir / f"{path.name}.py"
        payload.write_text(
            "import json, sys\n"
            "sys.stdout.write(json.dumps(sys.argv[1:]) + '\\n')\n"
            f"sys.stderr.write({stderr!r})\n"
            f"sys.exit({exit_code})\n",
            encoding="utf-8",
        )
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            f'#!/bin/sh\nexec "{sys.executable}" "{payload}" "$@"\n',
            encoding="utf-8",
            newline="\n",
        )
        path.chmod(0o755)
        return path

    return factory
