"""Exit handling utilities for the CLI."""

from typing import NoReturn

import typer

from cqlschema.cli.common.output import out

# Exit codes
EXIT_FAILED = 1
EXIT_USAGE = 2


def die(msg: str, code: int = EXIT_FAILED) -> NoReturn:
    """Exit with an error message and optional exit code."""
    out.error(msg)
    raise typer.Exit(code)


def exit_from_exc(exc: Exception, *, message: str, code: int = EXIT_FAILED) -> NoReturn:
    """
    Print an error message and exit with a given code, chaining the cause.

    Exists to satisfy pylint W0707 and to standardize error exits.
    """
    out.error(message)
    raise typer.Exit(code) from exc
