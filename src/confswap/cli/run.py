from __future__ import annotations

import logging
import pathlib
import subprocess

import click

from confswap import session
from confswap.cli import decorators as cli_decorators
from confswap.cli import helpers as cli_helpers

logger = logging.getLogger(__name__)


@cli_decorators.confswap_command(
    context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False}
)
@click.option("--filename", "-f", default=None, help="Replacement file swapped in for the target")
@click.option("--target", "-t", default=None, help="File to replace (default: tsconfig.json)")
@click.option(
    "--workspace",
    "-w",
    "workspaces",
    multiple=True,
    help="Workspace directory to swap as well (repeatable, monorepo root only)",
)
@cli_decorators.root_option
@click.argument("command", nargs=-1, required=True, type=click.UNPROCESSED)
@click.pass_context
def run(
    ctx: click.Context,
    filename: str | None,
    target: str | None,
    workspaces: tuple[str, ...],
    root: pathlib.Path | None,
    command: tuple[str, ...],
) -> None:
    """Run COMMAND with the target file swapped, then restore it.

    Exits with COMMAND's exit code, or 1 if the original files could not be
    fully restored.

    Example: confswap run -f tsconfig.build.json -- tsc -b
    """
    session_root, merged = cli_helpers.load_session_config(
        root,
        filename=filename,
        target=target,
        workspaces=list(workspaces) or None,
    )

    returncode = 0
    active: session.SwapSession | None = None
    try:
        with session.swapped(merged, session_root) as active:
            logger.info(f"Running: {' '.join(command)}")
            subprocess.run(list(command), cwd=session_root, check=True)
    except subprocess.CalledProcessError as e:
        # Killed by a signal: report it the way a shell does
        returncode = e.returncode if e.returncode > 0 else 128 - e.returncode
    except FileNotFoundError as e:
        raise click.ClickException(f"Command not found: {command[0]}") from e

    if active is not None and active.result is not None and active.result.has_errors:
        click.echo("Original files were not fully restored:", err=True)
        for error in active.result.errors:
            click.echo(f"  - {error}", err=True)
        click.echo("Run 'confswap restore' to retry.", err=True)
        returncode = returncode or 1

    ctx.exit(returncode)
