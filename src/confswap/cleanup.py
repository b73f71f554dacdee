"""Teardown of swapped files: primary restore, emergency fallback, validation.

run_complete() is the entry point:

    records ──► run_primary ──(any failure)──► run_emergency ──► validate
                     │                                              ▲
                     └──────────────(no failure)────────────────────┘

Individual record failures never stop the batch; the caller learns the real
end state from the ValidationResult, not from the absence of exceptions.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import TYPE_CHECKING

from confswap import banner, exceptions, swap

if TYPE_CHECKING:
    from collections.abc import Sequence

    from confswap.swap import SwapRecord

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class ValidationResult:
    """Outcome of the post-cleanup audit."""

    errors: tuple[str, ...] = ()

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0


class CleanupManager:
    """Restores every swapped directory, falling back to a manual pass."""

    _target: str
    _log: logging.Logger

    def __init__(
        self, target: str = swap.DEFAULT_TARGET, log: logging.Logger | None = None
    ) -> None:
        self._target = target
        self._log = log or logger

    def run_primary(self, records: Sequence[SwapRecord]) -> list[str]:
        """Restore every record in order, returning one message per failure."""
        failures = list[str]()
        for record in records:
            try:
                swap.restore(record, target=self._target, log=self._log)
            except (exceptions.ConfswapError, OSError) as e:
                msg = f"Failed to restore {self._target} in {record.directory}: {e}"
                self._log.error(msg)
                failures.append(msg)
        return failures

    def run_emergency(self, records: Sequence[SwapRecord]) -> None:
        """Best-effort manual restore of every record. Never raises for a record."""
        self._log.warning("Performing emergency manual cleanup")
        for record in records:
            try:
                self._manual_restore(record)
            except OSError as e:
                self._log.error(f"Emergency cleanup failed for {record.directory}: {e}")

    def _manual_restore(self, record: SwapRecord) -> None:
        dest = swap.target_path(record.directory, self._target)

        if dest.exists():
            if not banner.is_stamped(dest):
                # The user's own file; the backup can't go back without overwriting it.
                return
            self._log.warning(f"Banner still present in {dest}, attempting manual cleanup")
            try:
                swap.remove_file(dest, exceptions.IOOperation.REMOVE_TARGET, self._log)
            except exceptions.IOFailureError as e:
                self._log.error(f"Emergency cleanup could not remove {dest}: {e}")

        if record.backup_path is None or not record.backup_path.exists():
            self._log.warning(f"No backup file to restore for {dest}")
            return

        try:
            swap.move_file(
                record.backup_path, dest, exceptions.IOOperation.RESTORE_BACKUP, self._log
            )
        except exceptions.IOFailureError as e:
            self._log.error(f"Emergency cleanup could not restore {dest}: {e}")
            return
        self._log.info(f"Manually restored {dest} from backup")

    def validate(self, records: Sequence[SwapRecord]) -> ValidationResult:
        """Report generated files and backups still on disk. Read-only."""
        errors = list[str]()
        for record in records:
            dest = swap.target_path(record.directory, self._target)
            if dest.exists() and banner.is_stamped(dest):
                errors.append(f"Generated {self._target} still exists at {record.directory}")
            if record.backup_path is not None and record.backup_path.exists():
                errors.append(f"Backup file still exists at {record.backup_path}")
        return ValidationResult(errors=tuple(errors))

    def run_complete(self, records: Sequence[SwapRecord], reason: str) -> ValidationResult:
        """Primary cleanup, emergency fallback on failure, then validation."""
        if not records:
            self._log.info(f"No {self._target} files to clean up")
            return ValidationResult()

        self._log.info(f"Performing cleanup: {reason}")

        failures = self.run_primary(records)
        if failures:
            self.run_emergency(records)

        result = self.validate(records)
        if result.has_errors:
            self._log.error("Cleanup validation failed:")
            for error in result.errors:
                self._log.error(f"  - {error}")
        else:
            self._log.info(f"All {self._target} files successfully restored")
        return result
