"""Run the platform's binary as a transparent pass-through."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from cdist.core.result import Err, Ok, Result
from cdist.platform import process
from cdist.platform.files import is_regular_file

from .errors import DispatchError, MissingArtifact, UnsupportedPlatform
from .manifest import ArtifactManifest

__all__ = ["dispatch_run", "locate_artifact"]


def locate_artifact(
    manifest: ArtifactManifest,
    key: str,
    dist_dir: Path,
) -> Result[Path, DispatchError]:
    """Resolve key to an existing regular file under dist_dir.

    The manifest lookup happens first; an unknown key never touches the
    filesystem.
    """
    filename = manifest.lookup(key)
    if filename is None:
        return Err(UnsupportedPlatform(key=key, binary=manifest.binary))

    candidate = dist_dir / filename
    if not is_regular_file(candidate):
        return Err(MissingArtifact(path=candidate))
    return Ok(candidate)


def dispatch_run(
    manifest: ArtifactManifest,
    key: str,
    args: Sequence[str],
    *,
    dist_dir: Path,
) -> Result[int, DispatchError]:
    """Execute the artifact for key with args, returning its exit status.

    The child inherits stdin/stdout/stderr and this call blocks until it
    exits. Its status is returned unchanged (signal deaths as 128 + N).
    OSError from the launch itself propagates.
    """
    located = locate_artifact(manifest, key, dist_dir)
    if isinstance(located, Err):
        return located
    return Ok(process.run_passthrough(located.value, list(args)))
