"""Transparent ``changie`` entry point.

Installed as the package's ``changie`` console script. Arguments are not
parsed: everything after the program name goes to the platform binary, and
this process exits with the binary's status.
"""

from __future__ import annotations

import sys
from collections.abc import Sequence

import typer

from cdist.cli.commands._helpers import os_errors, unwrap_or_exit
from cdist.cli.context import build_context
from cdist.dispatch.runner import dispatch_run


def dispatch(argv: Sequence[str]) -> int:
    """Run the platform binary with argv; return the exit status."""
    try:
        cli = build_context()
        with os_errors(cli):
            manifest = unwrap_or_exit(cli.load_manifest(), cli)
            result = dispatch_run(manifest, cli.platform_key, argv, dist_dir=cli.config.dist_dir)
        return unwrap_or_exit(result, cli)
    except typer.Exit as e:
        return e.exit_code


def main() -> None:
    sys.exit(dispatch(sys.argv[1:]))
