from __future__ import annotations

from pathlib import Path

import typer

from cdist.cli.commands._helpers import os_errors, unwrap_or_exit
from cdist.cli.context import build_context
from cdist.core.errors import ErrorCode
from cdist.dispatch.manifest import check_package_files, load_package_files


def check(
    package_json: Path = typer.Option(
        Path("npm/package.json"), "--package-json", help="npm package.json to compare"
    ),
    dist_prefix: str = typer.Option(
        "dist", "--dist-prefix", help="Artifact directory relative to package.json"
    ),
) -> None:
    """Verify every manifest artifact is published by the package."""
    cli = build_context()
    with os_errors(cli):
        manifest = unwrap_or_exit(cli.load_manifest(), cli)
        files = unwrap_or_exit(load_package_files(package_json), cli)

    missing = check_package_files(manifest, files, dist_prefix=dist_prefix)
    if missing:
        for filename in missing:
            cli.console.error(f"{dist_prefix}/{filename} is not published by {package_json}")
        raise typer.Exit(code=int(ErrorCode.CONFIG_ERROR))

    cli.console.success(f"{len(manifest)} artifacts published by {package_json}")
