"""Release dispatcher: resolve the platform's artifact, then run or stage it."""

from .errors import (
    DispatchError,
    ManifestError,
    MissingArtifact,
    UnmappedTarget,
    UnsupportedPlatform,
)
from .manifest import ArtifactManifest, check_package_files, load_package_files
from .release import load_release_artifacts, prepare_release, release_platform_key
from .runner import dispatch_run, locate_artifact
from .stage import ArtifactSkipped, Copied, FallbackWritten, StageOutcome, dispatch_stage

__all__ = [
    # errors
    "DispatchError",
    "ManifestError",
    "MissingArtifact",
    "UnmappedTarget",
    "UnsupportedPlatform",
    # manifest
    "ArtifactManifest",
    "check_package_files",
    "load_package_files",
    # release
    "load_release_artifacts",
    "prepare_release",
    "release_platform_key",
    # runner
    "dispatch_run",
    "locate_artifact",
    # stage
    "ArtifactSkipped",
    "Copied",
    "FallbackWritten",
    "StageOutcome",
    "dispatch_stage",
]
