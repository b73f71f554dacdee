"""Swap a directory's target file for a generated one, and undo it.

This is the only place that writes banners and backups; the cleanup manager
and recovery both go through ``swap``/``restore`` here.
"""

from __future__ import annotations

import dataclasses
import logging
import pathlib
from typing import Final

from confswap import banner, exceptions

logger = logging.getLogger(__name__)

DEFAULT_TARGET: Final = "tsconfig.json"
BACKUP_SUFFIX: Final = ".bak"


@dataclasses.dataclass(frozen=True)
class SwapRecord:
    """One directory's active substitution.

    ``backup_path`` is None when no original target existed at swap time.
    """

    directory: pathlib.Path
    backup_path: pathlib.Path | None = None


def target_path(directory: pathlib.Path, target: str = DEFAULT_TARGET) -> pathlib.Path:
    return (directory / target).absolute()


def backup_path_for(path: pathlib.Path) -> pathlib.Path:
    """Backup path for a target: the target path plus the backup suffix."""
    return path.with_name(path.name + BACKUP_SUFFIX)


def remove_file(path: pathlib.Path, operation: exceptions.IOOperation, log: logging.Logger) -> None:
    """Delete a file, raising IOFailureError tagged with operation on failure."""
    try:
        path.unlink()
    except OSError as e:
        raise exceptions.IOFailureError(operation, path, reason=str(e)) from e
    log.info(f"Removed file: {path}")


def move_file(
    src: pathlib.Path,
    dest: pathlib.Path,
    operation: exceptions.IOOperation,
    log: logging.Logger,
) -> None:
    """Rename src to dest, raising IOFailureError tagged with operation on failure."""
    try:
        src.rename(dest)
    except OSError as e:
        raise exceptions.IOFailureError(operation, src, dest, reason=str(e)) from e
    log.info(f"Renamed {src} to {dest}")


def swap(
    source_filename: str,
    directory: pathlib.Path,
    *,
    target: str = DEFAULT_TARGET,
    log: logging.Logger | None = None,
) -> SwapRecord:
    """Replace directory/target with a stamped copy of directory/source_filename.

    An existing target is moved aside to target + ".bak" first, replacing any
    stale backup left by an earlier aborted session.
    """
    log = log or logger
    directory = directory.absolute()
    if not directory.is_dir():
        raise exceptions.DirectoryNotFoundError(directory)

    dest = target_path(directory, target)
    backup: pathlib.Path | None = None

    if dest.exists():
        backup = backup_path_for(dest)
        log.info(f"{target} already exists, moving it to {backup.name} at {directory}")
        if backup.exists():
            log.info(f"Removing stale backup {backup} from a previous session")
            remove_file(backup, exceptions.IOOperation.REMOVE_STALE_BACKUP, log)
        move_file(dest, backup, exceptions.IOOperation.BACKUP_TARGET, log)

    try:
        _write_generated(directory / source_filename, dest, log)
    except BaseException:
        # No record is returned for a failed or interrupted swap, so nobody else would undo
        # the backup
        _rollback(dest, backup, log)
        raise

    return SwapRecord(directory=directory, backup_path=backup)


def _write_generated(source: pathlib.Path, dest: pathlib.Path, log: logging.Logger) -> None:
    if not source.is_file():
        raise exceptions.SourceNotFoundError(source)

    log.info(f"Creating {dest.name} from {source.name} at {dest.parent}")
    try:
        content = source.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise exceptions.IOFailureError(
            exceptions.IOOperation.READ_SOURCE, source, reason=str(e)
        ) from e

    try:
        dest.write_text(banner.stamp(content), encoding="utf-8")
    except OSError as e:
        raise exceptions.IOFailureError(
            exceptions.IOOperation.WRITE_TARGET, dest, reason=str(e)
        ) from e


def _rollback(dest: pathlib.Path, backup: pathlib.Path | None, log: logging.Logger) -> None:
    """Undo a half-done swap: drop a partial write, put the original back."""
    try:
        dest.unlink(missing_ok=True)
        if backup is not None:
            backup.rename(dest)
            log.info(f"Moved {backup} back to {dest} after failed swap")
    except OSError as e:
        log.error(f"Could not roll back failed swap at {dest}: {e}")


def restore(
    record: SwapRecord,
    *,
    target: str = DEFAULT_TARGET,
    log: logging.Logger | None = None,
) -> None:
    """Undo a swap: delete the generated target and move the backup back.

    Unstamped targets belong to the user and are never touched. If the
    generated file cannot be deleted, the backup is left where it is.
    A backup that was recorded but has disappeared is logged as an error
    rather than raised.
    """
    log = log or logger
    if not record.directory.is_dir():
        raise exceptions.DirectoryNotFoundError(record.directory)

    dest = target_path(record.directory, target)

    if not dest.exists():
        log.info(f"No {target} found at {record.directory}, nothing to do.")
        return

    if not banner.is_stamped(dest):
        log.info(
            f"{target} found at {record.directory} but it does not contain the banner, "
            + "nothing to do."
        )
        return

    log.info(f"Removing generated {target} at {record.directory}")
    remove_file(dest, exceptions.IOOperation.REMOVE_TARGET, log)

    if record.backup_path is None:
        log.info(f"No backup file to restore at {record.directory}")
        return

    if record.backup_path.exists():
        log.info(f"Restoring {target} from backup at {record.directory}")
        move_file(record.backup_path, dest, exceptions.IOOperation.RESTORE_BACKUP, log)
    else:
        log.error(str(exceptions.InconsistentStateError(record.backup_path)))
