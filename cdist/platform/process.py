"""Subprocess execution for transparent pass-through.

Unlike a captured run, the child inherits this process's stdin, stdout and
stderr file descriptors, so its output reaches the caller byte-for-byte.
"""

from __future__ import annotations

import signal
import subprocess
import threading
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path

__all__ = ["normalize_returncode", "run_passthrough"]


def normalize_returncode(returncode: int) -> int:
    """Map a Popen return code to a shell-style exit status.

    POSIX children killed by signal N report ``-N``; shells report ``128 + N``.
    """
    if returncode < 0:
        return 128 - returncode
    return returncode


@contextmanager
def _parent_ignores_sigint() -> Iterator[None]:
    # Ctrl-C reaches the whole foreground group; the child decides what it means.
    if threading.current_thread() is not threading.main_thread():
        yield
        return
    previous = signal.signal(signal.SIGINT, signal.SIG_IGN)
    try:
        yield
    finally:
        if previous is not None:
            signal.signal(signal.SIGINT, previous)


def run_passthrough(
    executable: Path,
    args: Sequence[str],
    *,
    cwd: Path | None = None,
    env: dict[str, str] | None = None,
) -> int:
    """Run executable with args, blocking until it exits.

    Returns the child's exit status. SIGINT is ignored here while the child
    runs, so an interactive Ctrl-C is handled by the child alone and this
    call still returns only once the child has finished.

    Launch failures (permission denied, bad executable format) raise the
    original OSError.
    """
    # The handler is swapped after spawning: an ignored disposition would be
    # inherited across exec.
    proc = subprocess.Popen(
        [str(executable), *args],
        cwd=str(cwd) if cwd is not None else None,
        env=env,
    )
    with _parent_ignores_sigint():
        returncode = proc.wait()
    return normalize_returncode(returncode)
