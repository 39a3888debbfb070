"""Error payloads for dispatch operations."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class UnsupportedPlatform:
    """No manifest entry exists for the platform key."""

    key: str
    binary: str = "changie"

    @property
    def message(self) -> str:
        return f"unsupported platform for {self.binary}: {self.key}"


@dataclass(frozen=True, slots=True)
class MissingArtifact:
    """The manifest names an artifact that is not a regular file on disk."""

    path: Path

    @property
    def message(self) -> str:
        return f"unable to find artifact {self.path}"


@dataclass(frozen=True, slots=True)
class UnmappedTarget:
    """A release artifact's OS or architecture has no platform-key mapping."""

    goos: str
    goarch: str
    path: str

    @property
    def message(self) -> str:
        return f"no platform mapping for {self.goos}/{self.goarch} ({self.path})"


@dataclass(frozen=True, slots=True)
class ManifestError:
    """Manifest, artifacts file or package file list could not be read."""

    reason: str
    path: Path | None = None

    @property
    def message(self) -> str:
        if self.path is None:
            return self.reason
        return f"{self.path}: {self.reason}"


DispatchError = UnsupportedPlatform | MissingArtifact
