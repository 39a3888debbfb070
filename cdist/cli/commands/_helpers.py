"""Shared helpers for CLI commands."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, TypeVar

import typer

from cdist.core.errors import ErrorCode
from cdist.core.result import Err, Result
from cdist.output.errors import CliError, error_exit_code, print_error

if TYPE_CHECKING:
    from cdist.cli.context import CLIContext

T = TypeVar("T")


def unwrap_or_exit(result: Result[T, CliError], ctx: CLIContext) -> T:
    """Return the Ok value, or print the error and exit with its code."""
    if isinstance(result, Err):
        print_error(result.error, ctx.console)
        raise typer.Exit(code=error_exit_code(result.error))
    return result.value


@contextmanager
def os_errors(ctx: CLIContext) -> Iterator[None]:
    """Report OSError with its original message instead of a traceback."""
    try:
        yield
    except OSError as e:
        ctx.console.error(str(e))
        raise typer.Exit(code=int(ErrorCode.IO_ERROR)) from e
