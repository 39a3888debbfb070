"""Release preparation: builder artifacts -> platform-keyed package files.

The release builder emits one binary per target plus ``dist/artifacts.json``
describing them. Each binary of type ``Binary`` is copied into the package's
dist folder as ``{os}-{arch}{ext}`` using Node-style names, and a manifest
listing the copies is written alongside.

Copies run concurrently; every destination is a distinct file so no
coordination is needed beyond creating the folder first.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from cdist.core.result import Err, Ok, Result
from cdist.core.structured import as_obj_list, as_str_dict, get_str, get_table
from cdist.platform.files import EXECUTABLE_MODE, atomic_copy_file, is_regular_file

from .errors import ManifestError, MissingArtifact, UnmappedTarget
from .manifest import DEFAULT_ARTIFACTS, ArtifactManifest

__all__ = [
    "BINARY_TYPE",
    "PreparedArtifact",
    "ReleaseArtifact",
    "ReleaseReport",
    "load_release_artifacts",
    "prepare_release",
    "release_platform_key",
]

BINARY_TYPE = "Binary"
MANIFEST_NAME = "manifest.json"


@dataclass(frozen=True, slots=True)
class ReleaseArtifact:
    """One binary entry from the builder's artifacts file."""

    goos: str
    goarch: str
    path: Path
    ext: str = ""


@dataclass(frozen=True, slots=True)
class PreparedArtifact:
    key: str
    source: Path
    destination: Path


def _empty_prepared() -> list[PreparedArtifact]:
    return []


def _empty_skipped() -> list[UnmappedTarget]:
    return []


@dataclass(frozen=True, slots=True)
class ReleaseReport:
    manifest_path: Path
    prepared: list[PreparedArtifact] = field(default_factory=_empty_prepared)
    skipped: list[UnmappedTarget] = field(default_factory=_empty_skipped)


def load_release_artifacts(
    path: Path,
    *,
    root: Path | None = None,
) -> Result[list[ReleaseArtifact], ManifestError]:
    """Parse the builder's artifacts.json, keeping only binaries.

    Relative artifact paths resolve against root (default: cwd), which is
    where the builder ran.
    """
    base = root if root is not None else Path.cwd()
    try:
        data_obj: object = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return Err(ManifestError("artifacts file not found", path=path))
    except json.JSONDecodeError as e:
        return Err(ManifestError(f"invalid JSON: {e}", path=path))

    entries = as_obj_list(data_obj)
    if entries is None:
        return Err(ManifestError("artifacts file must be a JSON array", path=path))

    artifacts: list[ReleaseArtifact] = []
    for index, entry_obj in enumerate(entries):
        entry = as_str_dict(entry_obj)
        if entry is None:
            return Err(ManifestError(f"entry {index} is not an object", path=path))
        if get_str(entry, "type") != BINARY_TYPE:
            continue

        goos = get_str(entry, "goos")
        goarch = get_str(entry, "goarch")
        raw_path = get_str(entry, "path")
        if goos is None or goarch is None or raw_path is None:
            return Err(
                ManifestError(f"binary entry {index} needs goos, goarch and path", path=path)
            )

        extra = get_table(entry, "extra") or {}
        ext = extra.get("Ext")
        artifact_path = Path(raw_path)
        artifacts.append(
            ReleaseArtifact(
                goos=goos,
                goarch=goarch,
                path=artifact_path if artifact_path.is_absolute() else base / artifact_path,
                ext=ext if isinstance(ext, str) else "",
            )
        )
    return Ok(artifacts)


def release_platform_key(
    artifact: ReleaseArtifact,
    os_map: Mapping[str, str],
    arch_map: Mapping[str, str],
) -> Result[str, UnmappedTarget]:
    """Platform key for a builder artifact, e.g. windows/amd64/.exe -> win32-x64.exe."""
    os_name = os_map.get(artifact.goos)
    arch = arch_map.get(artifact.goarch)
    if os_name is None or arch is None:
        return Err(
            UnmappedTarget(goos=artifact.goos, goarch=artifact.goarch, path=str(artifact.path))
        )
    return Ok(f"{os_name}-{arch}{artifact.ext}")


def _previous_outputs(out_dir: Path, manifest_path: Path) -> list[Path]:
    """Files an earlier prepare may have left: its manifest and what it lists.

    Anything else under out_dir belongs to someone else and is kept.
    """
    names = set(DEFAULT_ARTIFACTS.values())
    previous = ArtifactManifest.load(manifest_path)
    if isinstance(previous, Ok):
        names.update(previous.value.filenames())
    return [*(out_dir / name for name in sorted(names)), manifest_path]


def _copy_one(job: PreparedArtifact) -> PreparedArtifact:
    atomic_copy_file(job.source, job.destination, mode=EXECUTABLE_MODE)
    return job


def prepare_release(
    artifacts: Sequence[ReleaseArtifact],
    out_dir: Path,
    *,
    os_map: Mapping[str, str],
    arch_map: Mapping[str, str],
    binary_name: str = "changie",
    manifest_path: Path | None = None,
    clean: bool = True,
    workers: int = 4,
) -> Result[ReleaseReport, MissingArtifact | ManifestError]:
    """Copy every mappable binary into out_dir and write the manifest.

    Unmapped targets are reported in ``ReleaseReport.skipped``. A missing
    source binary or two binaries claiming the same key fail the whole
    release before anything is copied.
    """
    jobs: list[PreparedArtifact] = []
    skipped: list[UnmappedTarget] = []
    seen: dict[str, Path] = {}

    for artifact in artifacts:
        key_result = release_platform_key(artifact, os_map, arch_map)
        if isinstance(key_result, Err):
            skipped.append(key_result.error)
            continue
        key = key_result.value

        if key in seen:
            return Err(
                ManifestError(f"duplicate platform key {key}: {seen[key]} and {artifact.path}")
            )
        if not is_regular_file(artifact.path):
            return Err(MissingArtifact(path=artifact.path))

        seen[key] = artifact.path
        jobs.append(PreparedArtifact(key=key, source=artifact.path, destination=out_dir / key))

    target = manifest_path if manifest_path is not None else out_dir / MANIFEST_NAME
    if clean:
        sources = {a.path.resolve() for a in artifacts}
        for stale in _previous_outputs(out_dir, target):
            if stale.resolve() not in sources and is_regular_file(stale):
                stale.unlink()
    out_dir.mkdir(parents=True, exist_ok=True)

    with ThreadPoolExecutor(max_workers=max(1, workers)) as pool:
        prepared = sorted(pool.map(_copy_one, jobs), key=lambda p: p.key)

    manifest = ArtifactManifest.from_mapping(
        {p.key: p.destination.name for p in prepared},
        binary=binary_name,
    )
    manifest.save(target)

    return Ok(ReleaseReport(manifest_path=target, prepared=prepared, skipped=skipped))
