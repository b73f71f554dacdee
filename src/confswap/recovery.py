"""Find and undo leftovers of a session that never reached its teardown.

The banner and the backup suffix are both visible on disk after a crash, so
swap records can be rebuilt without any state from the dead process.
"""

from __future__ import annotations

import logging
import pathlib
from typing import TYPE_CHECKING

from confswap import banner, cleanup, exceptions, swap
from confswap.swap import SwapRecord

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from confswap.cleanup import ValidationResult

logger = logging.getLogger(__name__)


def find_leftovers(
    directories: Iterable[pathlib.Path], target: str = swap.DEFAULT_TARGET
) -> list[SwapRecord]:
    """Rebuild a record for each directory holding a stamped target or a backup.

    A backup next to an unstamped target is the user's own file, not a leftover.
    """
    records = list[SwapRecord]()
    for directory in directories:
        dest = swap.target_path(directory, target)
        backup = swap.backup_path_for(dest)
        stamped = banner.is_stamped(dest)
        if not stamped and dest.exists():
            continue
        has_backup = backup.exists()
        if has_backup or stamped:
            records.append(
                swap.SwapRecord(
                    directory=directory.absolute(), backup_path=backup if has_backup else None
                )
            )
    return records


def _restore_orphan_backups(
    records: Sequence[SwapRecord], target: str, log: logging.Logger
) -> None:
    """Move back backups whose target is gone (crash between backup and write)."""
    for record in records:
        if record.backup_path is None or not record.backup_path.exists():
            continue
        dest = swap.target_path(record.directory, target)
        if dest.exists():
            continue
        try:
            swap.move_file(
                record.backup_path, dest, exceptions.IOOperation.RESTORE_BACKUP, log
            )
        except exceptions.IOFailureError as e:
            log.error(f"Could not restore orphan backup {record.backup_path}: {e}")


def recover(
    records: Sequence[SwapRecord],
    *,
    target: str = swap.DEFAULT_TARGET,
    log: logging.Logger | None = None,
) -> ValidationResult:
    """Clean up leftovers found by find_leftovers() and report the end state."""
    log = log or logger
    _restore_orphan_backups(records, target, log)
    manager = cleanup.CleanupManager(target, log)
    return manager.run_complete(records, "Recovering leftovers from an interrupted session")
