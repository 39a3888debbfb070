from __future__ import annotations

import typer

from cdist.cli.context import build_context


def key() -> None:
    """Print the platform key of this host."""
    cli = build_context()
    typer.echo(cli.platform_key)
