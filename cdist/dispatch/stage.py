"""Stage the platform's binary under its canonical install name.

Outcomes:
- Copied: the artifact replaced whatever was at the canonical path.
- FallbackWritten: no artifact exists for the key; a stub that fails with
  the key was written instead.
- ArtifactSkipped: the manifest names an artifact that is missing on disk.
  The destination is left untouched; callers report a warning and carry on.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from cdist.platform.detection import Platform, detect_platform
from cdist.platform.files import EXECUTABLE_MODE, atomic_copy_file, is_regular_file

from .errors import MissingArtifact
from .fallback import FallbackStub, fallback_path, write_fallback
from .manifest import ArtifactManifest

__all__ = [
    "ArtifactSkipped",
    "Copied",
    "FallbackWritten",
    "StageOutcome",
    "canonical_path",
    "dispatch_stage",
]


@dataclass(frozen=True, slots=True)
class Copied:
    source: Path
    destination: Path


@dataclass(frozen=True, slots=True)
class FallbackWritten:
    destination: Path
    key: str


@dataclass(frozen=True, slots=True)
class ArtifactSkipped:
    error: MissingArtifact


StageOutcome = Copied | FallbackWritten | ArtifactSkipped


def canonical_path(dest_dir: Path, binary_name: str, platform: Platform) -> Path:
    """Platform-agnostic install path, e.g. ``dest/changie`` or ``dest/changie.exe``."""
    return dest_dir / platform.exe_name(binary_name)


def dispatch_stage(
    manifest: ArtifactManifest,
    key: str,
    source_dir: Path,
    dest_dir: Path,
    *,
    binary_name: str | None = None,
    platform: Platform | None = None,
) -> StageOutcome:
    """Copy the artifact for key into dest_dir, or leave a fallback stub.

    Re-running with the same inputs yields byte-identical destination
    content. OS errors (permissions, disk full) propagate unchanged.
    """
    name = binary_name or manifest.binary
    host = platform if platform is not None else detect_platform()
    dest_dir.mkdir(parents=True, exist_ok=True)

    filename = manifest.lookup(key)
    if filename is None:
        path = write_fallback(dest_dir, FallbackStub(key=key, binary_name=name), host)
        # A staged .exe would win the PATHEXT lookup over the .cmd fallback
        shadowing = canonical_path(dest_dir, name, host)
        if shadowing != path:
            shadowing.unlink(missing_ok=True)
        return FallbackWritten(destination=path, key=key)

    source = source_dir / filename
    if not is_regular_file(source):
        return ArtifactSkipped(MissingArtifact(path=source))

    destination = canonical_path(dest_dir, name, host)
    mode = None if host == Platform.WINDOWS else EXECUTABLE_MODE
    atomic_copy_file(source, destination, mode=mode)

    # On Windows a previous fallback lives beside the .exe, not at its path
    stale = fallback_path(dest_dir, name, host)
    if stale != destination:
        stale.unlink(missing_ok=True)

    return Copied(source=source, destination=destination)
