from __future__ import annotations

from pathlib import Path

import typer

from cdist.cli.commands._helpers import os_errors, unwrap_or_exit
from cdist.cli.context import build_context
from cdist.dispatch.stage import ArtifactSkipped, Copied, FallbackWritten, dispatch_stage
from cdist.output.console import Style


def stage(
    key: str | None = typer.Option(None, "--key", help="Platform key (default: detected)"),
    dist_dir: Path | None = typer.Option(None, "--dist-dir", help="Directory of platform binaries"),
    dest: Path | None = typer.Option(None, "--dest", help="Install directory"),
) -> None:
    """Install the platform binary under its canonical name (postinstall step)."""
    cli = build_context()
    platform_key = key or cli.platform_key

    with os_errors(cli):
        manifest = unwrap_or_exit(cli.load_manifest(), cli)
        outcome = dispatch_stage(
            manifest,
            platform_key,
            dist_dir if dist_dir is not None else cli.config.dist_dir,
            dest if dest is not None else cli.config.dest_dir,
            binary_name=cli.config.binary.name,
            platform=cli.platform.platform,
        )

    match outcome:
        case Copied(destination=destination):
            cli.console.success(str(destination))
        case FallbackWritten(destination=destination, key=fallback_key):
            cli.console.warning(f"no {manifest.binary} binary for {fallback_key}")
            cli.console.print(f"installed fallback: {destination}", Style.DIM)
        case ArtifactSkipped(error=error):
            cli.console.warning(error.message)
