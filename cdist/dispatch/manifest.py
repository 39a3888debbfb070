"""Artifact manifest: platform key -> artifact filename.

The manifest is written by ``cdist prepare`` next to the copied binaries and
read by ``run``/``stage``. It must list the same files the package publishes;
``check_package_files`` verifies that instead of trusting it.
"""

from __future__ import annotations

import fnmatch
import json
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from types import MappingProxyType

from cdist.core.result import Err, Ok, Result
from cdist.core.structured import as_obj_list, as_str_dict, get_str, get_table
from cdist.platform.files import atomic_write_text

from .errors import ManifestError

__all__ = [
    "ArtifactManifest",
    "DEFAULT_ARTIFACTS",
    "MANIFEST_SCHEMA",
    "check_package_files",
    "load_package_files",
]

MANIFEST_SCHEMA = 1

# Files distributed through npm; mirrors the package.json "files" list.
DEFAULT_ARTIFACTS: Mapping[str, str] = MappingProxyType(
    {
        "darwin-arm64": "darwin-arm64",
        "darwin-x64": "darwin-x64",
        "linux-arm64": "linux-arm64",
        "linux-x64": "linux-x64",
        "win32-ia32.exe": "win32-ia32.exe",
        "win32-x64.exe": "win32-x64.exe",
    }
)


def _empty_entries() -> Mapping[str, str]:
    return MappingProxyType({})


def _validate_filename(key: str, filename: object) -> str:
    if not isinstance(filename, str) or not filename.strip():
        raise ValueError(f"artifact for {key!r} must be a non-empty string")
    if "/" in filename or "\\" in filename or filename in (".", ".."):
        raise ValueError(f"artifact for {key!r} must be a bare filename (got {filename!r})")
    return filename


@dataclass(frozen=True, slots=True)
class ArtifactManifest:
    """Read-only mapping from platform key to artifact filename."""

    entries: Mapping[str, str] = field(default_factory=_empty_entries)
    binary: str = "changie"

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def __contains__(self, key: object) -> bool:
        return key in self.entries

    def lookup(self, key: str) -> str | None:
        return self.entries.get(key)

    def keys(self) -> list[str]:
        return sorted(self.entries)

    def filenames(self) -> list[str]:
        return sorted(set(self.entries.values()))

    @classmethod
    def from_mapping(
        cls, data: Mapping[str, object], *, binary: str = "changie"
    ) -> ArtifactManifest:
        """Build a manifest, rejecting empty keys and unsafe filenames.

        Raises:
            ValueError: If any entry is invalid.
        """
        entries: dict[str, str] = {}
        for key, filename in data.items():
            if not key.strip():
                raise ValueError("platform key must not be empty")
            entries[key] = _validate_filename(key, filename)
        return cls(entries=MappingProxyType(entries), binary=binary)

    @classmethod
    def default(cls, *, binary: str = "changie") -> ArtifactManifest:
        return cls(entries=DEFAULT_ARTIFACTS, binary=binary)

    @classmethod
    def load(cls, path: Path) -> Result[ArtifactManifest, ManifestError]:
        """Load a manifest.json written by `save`."""
        try:
            data_obj: object = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return Err(ManifestError("manifest not found", path=path))
        except json.JSONDecodeError as e:
            return Err(ManifestError(f"invalid JSON: {e}", path=path))
        except UnicodeDecodeError as e:
            return Err(ManifestError(f"not UTF-8: {e}", path=path))

        data = as_str_dict(data_obj)
        if data is None:
            return Err(ManifestError("manifest root must be an object", path=path))

        schema = data.get("schema")
        if schema != MANIFEST_SCHEMA:
            return Err(ManifestError(f"unsupported manifest schema: {schema!r}", path=path))

        artifacts = get_table(data, "artifacts")
        if artifacts is None:
            return Err(ManifestError("missing 'artifacts' table", path=path))

        try:
            manifest = cls.from_mapping(artifacts, binary=get_str(data, "binary") or "changie")
        except ValueError as e:
            return Err(ManifestError(str(e), path=path))
        return Ok(manifest)

    def to_dict(self) -> dict[str, object]:
        return {
            "schema": MANIFEST_SCHEMA,
            "binary": self.binary,
            "artifacts": {k: self.entries[k] for k in self.keys()},
        }

    def save(self, path: Path) -> None:
        """Write the manifest atomically with stable key order."""
        atomic_write_text(path, json.dumps(self.to_dict(), indent=2) + "\n")


def load_package_files(package_json: Path) -> Result[list[str], ManifestError]:
    """Read the ``files`` list of an npm package.json."""
    try:
        data = as_str_dict(json.loads(package_json.read_text(encoding="utf-8")))
    except FileNotFoundError:
        return Err(ManifestError("package.json not found", path=package_json))
    except json.JSONDecodeError as e:
        return Err(ManifestError(f"invalid JSON: {e}", path=package_json))

    if data is None:
        return Err(ManifestError("package.json root must be an object", path=package_json))
    files = as_obj_list(data.get("files"))
    if files is None:
        return Err(ManifestError("package.json has no 'files' list", path=package_json))
    return Ok([f for f in files if isinstance(f, str)])


def check_package_files(
    manifest: ArtifactManifest,
    files: Iterable[str],
    *,
    dist_prefix: str = "dist",
) -> list[str]:
    """Return manifest artifacts the package file list does not publish.

    A pattern in ``files`` covers an artifact if it matches the artifact's
    path (``<dist_prefix>/<filename>``), the bare filename, or names one of
    its parent directories. The result is sorted; empty means consistent.
    """
    patterns = [p.strip().rstrip("/") for p in files if p.strip()]
    prefix = PurePosixPath(dist_prefix)

    def covered(filename: str) -> bool:
        rel = prefix / filename
        candidates = [rel.as_posix(), filename, *(p.as_posix() for p in rel.parents)]
        return any(fnmatch.fnmatchcase(c, pat) for pat in patterns for c in candidates)

    return sorted(f for f in manifest.filenames() if not covered(f))
