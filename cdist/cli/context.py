from __future__ import annotations

import os
from dataclasses import dataclass

import typer

from cdist.core.config import Config, default_config_path, load_config_or_default
from cdist.core.errors import ErrorCode
from cdist.core.result import Err, Ok, Result
from cdist.dispatch.errors import ManifestError
from cdist.dispatch.manifest import ArtifactManifest
from cdist.output.console import ConsoleProtocol, RichConsole
from cdist.output.errors import error_exit_code, print_error
from cdist.platform.detection import PlatformInfo, detect, resolve_platform_key

# Overrides the detected platform key (cross-installs, debugging)
PLATFORM_KEY_ENV_VAR = "CDIST_PLATFORM_KEY"


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: Config
    platform: PlatformInfo
    console: ConsoleProtocol

    @property
    def platform_key(self) -> str:
        override = os.environ.get(PLATFORM_KEY_ENV_VAR, "").strip()
        return override or str(resolve_platform_key(self.platform))

    def load_manifest(self) -> Result[ArtifactManifest, ManifestError]:
        """Manifest from the configured path, or the built-in table if absent."""
        path = self.config.manifest_path
        if not path.exists():
            return Ok(ArtifactManifest.default(binary=self.config.binary.name))
        return ArtifactManifest.load(path)


def build_context() -> CLIContext:
    out = RichConsole()
    try:
        config_result = load_config_or_default(default_config_path())
    except OSError as e:
        out.error(str(e))
        raise typer.Exit(code=int(ErrorCode.IO_ERROR)) from e
    if isinstance(config_result, Err):
        print_error(config_result.error, out)
        raise typer.Exit(code=error_exit_code(config_result.error))

    return CLIContext(config=config_result.value, platform=detect(), console=out)
