#!/usr/bin/env python3
"""
Paperback Cover Build CLI

Compiles the front cover, back cover and spine (two passes each), assembles them
into cover/Cover.pdf and copies the result to the book root.

Exit codes:
    0    success
    1    usage shown (-h / -?)
    666  a required input file is missing
    N    a compiler or copy step failed with status N

Examples:\n

    build-cover                    # Build from the current directory

    build-cover -t                 # Trial run: print commands, execute nothing

    build-cover -q                 # Only report errors

    build-cover -v --root ~/book   # Echo each command before running it
"""

from pathlib import Path
from typing import Optional

import typer
from typing_extensions import Annotated

from coverbuild.contexts.rendering import (
    BuildSettings,
    PreconditionError,
    RunOptions,
    StepFailedError,
    build_cover,
)
from coverbuild.contexts.rendering.logger import (
    _log_debug,
    _log_success,
    setup_rendering_logger,
)

USAGE_EXIT_CODE = 1

app = typer.Typer(
    help="Build a paperback cover PDF from its LaTeX sources",
    add_completion=False,
)


def show_usage(ctx: typer.Context, value: bool):
    """Print usage and exit 1."""
    if value:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=USAGE_EXIT_CODE)


@app.command(context_settings={"help_option_names": []})
def main(
    first: Annotated[
        Optional[str],
        typer.Argument(help="Accepted for compatibility; not used", show_default=False),
    ] = None,
    second: Annotated[
        Optional[str],
        typer.Argument(help="Accepted for compatibility; not used", show_default=False),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("-v", help="Echo each command before running it"),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option("-q", help="Suppress informational messages"),
    ] = False,
    trial: Annotated[
        bool,
        typer.Option("-t", help="Trial run: print commands without executing them"),
    ] = False,
    root: Annotated[
        Path,
        typer.Option(
            "--root",
            help="Book root holding BookParameters.tex and cover/",
            file_okay=False,
        ),
    ] = Path("."),
    usage: Annotated[
        bool,
        typer.Option(
            "-h",
            "-?",
            help="Show this message and exit",
            is_eager=True,
            callback=show_usage,
        ),
    ] = False,
):
    """
    Build the paperback cover.

    Examples:\n

        $ build-cover            # Build cover/Cover.pdf and copy it to ./Cover.pdf

        $ build-cover -t         # Show what would run
    """
    settings = BuildSettings(root=root)
    setup_rendering_logger(quiet=quiet, verbose=verbose, compiler=settings.compiler)

    if first is not None or second is not None:
        _log_debug(f"Ignoring positional arguments: {first!r} {second!r}")

    options = RunOptions(trial=trial, verbose=verbose, quiet=quiet)

    try:
        result = build_cover(settings, options)
    except PreconditionError as e:
        if not quiet:
            typer.secho(f"Fatal: {e.message}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=e.exit_code)
    except StepFailedError as e:
        typer.secho(f"Error: {e.message}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=e.exit_code)

    if result.trial:
        _log_success("Trial run complete; nothing was executed.")
    else:
        _log_success(f"Cover built: {result.pdf_path}")
    raise typer.Exit(code=0)


if __name__ == "__main__":
    app()
