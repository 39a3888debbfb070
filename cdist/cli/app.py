from __future__ import annotations

import os
from pathlib import Path

import typer

from cdist import __version__
from cdist.cli.commands.check import check
from cdist.cli.commands.key_cmd import key
from cdist.cli.commands.prepare import prepare
from cdist.cli.commands.run_cmd import run
from cdist.cli.commands.stage import stage
from cdist.core.config import CONFIG_ENV_VAR
from cdist.core.errors import ErrorCode


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands
app.command(
    context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
    add_help_option=False,
)(run)
app.command()(stage)
app.command()(prepare)
app.command()(key)
app.command()(check)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        help=f"Config file (default: ${CONFIG_ENV_VAR} or ./cdist.toml)",
    ),
) -> None:
    if config is not None:
        path = config.expanduser()
        if not path.is_file():
            typer.echo(f"error: --config '{path}' is not a file", err=True)
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))

        os.environ[CONFIG_ENV_VAR] = str(path.resolve())


def main() -> None:
    app()
