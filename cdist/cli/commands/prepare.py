from __future__ import annotations

from pathlib import Path

import typer

from cdist.cli.commands._helpers import os_errors, unwrap_or_exit
from cdist.cli.context import build_context
from cdist.dispatch.release import load_release_artifacts, prepare_release


def prepare(
    artifacts: Path | None = typer.Option(
        None, "--artifacts", help="Release builder artifacts.json"
    ),
    out: Path | None = typer.Option(None, "--out", help="Package dist directory"),
    clean: bool = typer.Option(True, "--clean/--no-clean", help="Remove previous output first"),
    workers: int | None = typer.Option(None, "--workers", min=1, help="Parallel copies"),
) -> None:
    """Copy release binaries into the package and write its manifest (CI helper)."""
    cli = build_context()
    config = cli.config
    artifacts_path = artifacts if artifacts is not None else config.artifacts_path
    out_dir = out if out is not None else config.dist_dir

    with os_errors(cli):
        binaries = unwrap_or_exit(load_release_artifacts(artifacts_path, root=config.root), cli)
        result = prepare_release(
            binaries,
            out_dir,
            os_map=config.release.os_map,
            arch_map=config.release.arch_map,
            binary_name=config.binary.name,
            manifest_path=None if out is not None else config.manifest_path,
            clean=clean,
            workers=workers or config.release.workers,
        )
    report = unwrap_or_exit(result, cli)

    for skipped in report.skipped:
        cli.console.warning(skipped.message)
    for item in report.prepared:
        cli.console.info(f"copied {item.source} to {item.destination}")
    cli.console.success(str(report.manifest_path))
