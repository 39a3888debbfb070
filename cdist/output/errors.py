"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from cdist.core.config import ConfigError
from cdist.core.errors import ErrorCode
from cdist.dispatch.errors import (
    ManifestError,
    MissingArtifact,
    UnmappedTarget,
    UnsupportedPlatform,
)
from cdist.output.console import Style

if TYPE_CHECKING:
    from cdist.output.console import ConsoleProtocol

__all__ = ["CliError", "error_exit_code", "print_error"]

CliError = UnsupportedPlatform | MissingArtifact | UnmappedTarget | ManifestError | ConfigError


def print_error(error: CliError, console: ConsoleProtocol) -> None:
    """Print an error with its hint, if any."""
    match error:
        case UnsupportedPlatform(key=key):
            console.error(error.message)
            console.print(f"no prebuilt binary is published for {key}", Style.DIM)
        case MissingArtifact(path=path):
            console.error(error.message)
            console.print(f"hint: reinstall; {path.name} should ship with the package", Style.DIM)
        case UnmappedTarget():
            console.warning(error.message)
        case ManifestError():
            console.error(error.message)
        case ConfigError(message=message):
            console.error(message)


def error_exit_code(error: CliError) -> int:
    match error:
        case UnsupportedPlatform():
            return int(ErrorCode.UNSUPPORTED_PLATFORM)
        case MissingArtifact():
            return int(ErrorCode.MISSING_ARTIFACT)
        case UnmappedTarget():
            return int(ErrorCode.USER_ERROR)
        case ManifestError() | ConfigError():
            return int(ErrorCode.CONFIG_ERROR)
    # Fallback for exhaustiveness
    return int(ErrorCode.USER_ERROR)
