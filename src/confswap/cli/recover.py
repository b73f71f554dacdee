from __future__ import annotations

import pathlib
from typing import TYPE_CHECKING

import click

from confswap import cleanup, recovery
from confswap.cli import decorators as cli_decorators
from confswap.cli import helpers as cli_helpers

if TYPE_CHECKING:
    from confswap.swap import SwapRecord


def _find(root: pathlib.Path | None, target: str | None) -> tuple[str, list[SwapRecord]]:
    session_root, merged = cli_helpers.load_session_config(root, target=target)
    directories = cli_helpers.search_directories(session_root, merged)
    return merged.target, recovery.find_leftovers(directories, merged.target)


@cli_decorators.confswap_command()
@click.option("--target", "-t", default=None, help="File to check (default: tsconfig.json)")
@cli_decorators.root_option
@click.pass_context
def check(ctx: click.Context, target: str | None, root: pathlib.Path | None) -> None:
    """Report generated files and backups left behind by an interrupted session."""
    target_name, records = _find(root, target)
    result = cleanup.CleanupManager(target_name).validate(records)
    if not result.has_errors:
        click.echo(f"No leftover {target_name} files found.")
        return

    for error in result.errors:
        click.echo(error)
    click.echo("Run 'confswap restore' to restore the original files.")
    ctx.exit(1)


@cli_decorators.confswap_command()
@click.option("--target", "-t", default=None, help="File to restore (default: tsconfig.json)")
@cli_decorators.root_option
@click.pass_context
def restore(ctx: click.Context, target: str | None, root: pathlib.Path | None) -> None:
    """Remove leftover generated files and move original files back.

    A .bak file is moved back only when the target is a generated file or is
    missing. A .bak next to a target you wrote yourself is left alone. When the
    target is missing, any .bak found in its place is treated as the original.
    """
    target_name, records = _find(root, target)
    if not records:
        click.echo(f"No leftover {target_name} files found.")
        return

    result = recovery.recover(records, target=target_name)
    if result.has_errors:
        for error in result.errors:
            click.echo(error, err=True)
        ctx.exit(1)

    click.echo(f"Restored {len(records)} director{'y' if len(records) == 1 else 'ies'}.")
