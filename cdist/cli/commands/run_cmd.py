from __future__ import annotations

import typer

from cdist.cli.commands._helpers import os_errors, unwrap_or_exit
from cdist.cli.context import build_context
from cdist.dispatch.runner import dispatch_run


def run(ctx: typer.Context) -> None:
    """Run the platform binary, forwarding all arguments and its exit code.

    The first `--` is consumed by the parser; use `changie` for exact argv.
    """
    cli = build_context()
    with os_errors(cli):
        manifest = unwrap_or_exit(cli.load_manifest(), cli)
        result = dispatch_run(manifest, cli.platform_key, ctx.args, dist_dir=cli.config.dist_dir)
    raise typer.Exit(code=unwrap_or_exit(result, cli))
