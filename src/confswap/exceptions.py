from __future__ import annotations

import enum
from typing import TYPE_CHECKING, override

if TYPE_CHECKING:
    import pathlib


class ConfswapError(Exception):
    """Base exception for confswap errors."""

    def format_user_message(self) -> str:
        """Format a user-friendly error message."""
        return str(self)

    def get_suggestion(self) -> str | None:
        """Return actionable suggestion for resolving the error."""
        return None


class DirectoryNotFoundError(ConfswapError):
    """Raised when a directory to swap in (or restore) does not exist."""

    _directory: pathlib.Path

    def __init__(self, directory: pathlib.Path) -> None:
        self._directory = directory
        super().__init__(f"Expected directory {directory} to exist")

    @property
    def directory(self) -> pathlib.Path:
        return self._directory

    @override
    def get_suggestion(self) -> str:
        return "Check the configured workspaces and the --root option"

    @override
    def __reduce__(self) -> tuple[type, tuple[pathlib.Path]]:
        return (self.__class__, (self._directory,))


class SourceNotFoundError(ConfswapError):
    """Raised when the replacement file is missing from a directory."""

    _source: pathlib.Path

    def __init__(self, source: pathlib.Path) -> None:
        self._source = source
        super().__init__(f"{source} does not exist")

    @property
    def source(self) -> pathlib.Path:
        return self._source

    @override
    def get_suggestion(self) -> str:
        return f"Create {self._source.name} in every swapped directory or change 'filename'"

    @override
    def __reduce__(self) -> tuple[type, tuple[pathlib.Path]]:
        return (self.__class__, (self._source,))


class IOOperation(enum.StrEnum):
    """Filesystem step that failed during a swap or restore."""

    REMOVE_STALE_BACKUP = "remove_stale_backup"
    BACKUP_TARGET = "backup_target"
    READ_SOURCE = "read_source"
    WRITE_TARGET = "write_target"
    REMOVE_TARGET = "remove_target"
    RESTORE_BACKUP = "restore_backup"


_OPERATION_DESCRIPTIONS: dict[IOOperation, str] = {
    IOOperation.REMOVE_STALE_BACKUP: "remove stale backup",
    IOOperation.BACKUP_TARGET: "back up",
    IOOperation.READ_SOURCE: "read source",
    IOOperation.WRITE_TARGET: "write generated file",
    IOOperation.REMOVE_TARGET: "remove generated file",
    IOOperation.RESTORE_BACKUP: "restore backup",
}


class IOFailureError(ConfswapError):
    """Raised when a single filesystem step of a swap or restore fails.

    ``other_path`` is the destination of a move, when the step is a move.
    """

    _operation: IOOperation
    _path: pathlib.Path
    _other_path: pathlib.Path | None
    _reason: str

    def __init__(
        self,
        operation: IOOperation,
        path: pathlib.Path,
        other_path: pathlib.Path | None = None,
        reason: str = "",
    ) -> None:
        self._operation = operation
        self._path = path
        self._other_path = other_path
        self._reason = reason
        target = f"{path} to {other_path}" if other_path is not None else str(path)
        msg = f"Failed to {_OPERATION_DESCRIPTIONS[operation]} {target}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)

    @property
    def operation(self) -> IOOperation:
        return self._operation

    @property
    def path(self) -> pathlib.Path:
        return self._path

    @property
    def other_path(self) -> pathlib.Path | None:
        return self._other_path

    @override
    def get_suggestion(self) -> str:
        return "Check file permissions, then run 'confswap restore' to clean up leftovers"

    @override
    def __reduce__(
        self,
    ) -> tuple[type, tuple[IOOperation, pathlib.Path, pathlib.Path | None, str]]:
        return (self.__class__, (self._operation, self._path, self._other_path, self._reason))


class ConcurrentSessionError(ConfswapError):
    """Raised when a session starts while another one is still active."""

    def __init__(self) -> None:
        super().__init__(
            "Session already active - concurrent sessions are not supported "
            + "to prevent losing the original file"
        )

    @override
    def get_suggestion(self) -> str:
        return "Wait for the running build to finish before starting another one"

    @override
    def __reduce__(self) -> tuple[type, tuple[()]]:
        return (self.__class__, ())


class InconsistentStateError(ConfswapError):
    """A recorded backup is missing when it should be restored.

    Never raised by teardown; it is built to describe the condition in logs.
    """

    _backup_path: pathlib.Path

    def __init__(self, backup_path: pathlib.Path) -> None:
        self._backup_path = backup_path
        super().__init__(
            f"Backup file {backup_path} does not exist, the original content is lost"
        )

    @property
    def backup_path(self) -> pathlib.Path:
        return self._backup_path

    @override
    def __reduce__(self) -> tuple[type, tuple[pathlib.Path]]:
        return (self.__class__, (self._backup_path,))


class ConfigError(ConfswapError):
    """Raised when configuration cannot be loaded or is invalid."""

    @override
    def get_suggestion(self) -> str:
        return "Check .confswap.yaml and ~/.config/confswap/config.yaml"
