import enum
import logging
import pathlib
from typing import Self

import pydantic

from confswap import swap


class LogLevel(enum.StrEnum):
    """Verbosity of session diagnostics."""

    SILENT = "silent"
    ERROR = "error"
    WARN = "warn"
    INFO = "info"

    def to_logging_level(self) -> int:
        """Map to a stdlib logging level; silent is above CRITICAL."""
        return _LOGGING_LEVELS[self]


_LOGGING_LEVELS: dict[LogLevel, int] = {
    LogLevel.SILENT: logging.CRITICAL + 10,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.WARN: logging.WARNING,
    LogLevel.INFO: logging.INFO,
}


def _validate_file_name(v: str) -> str:
    """Ensure value is a bare file name, not a path."""
    if not v or v in (".", "..") or pathlib.PurePath(v).name != v or "\\" in v:
        raise ValueError(f"must be a file name without directories, got: {v!r}")
    return v


class ConfswapConfig(pydantic.BaseModel):
    """Complete confswap configuration schema."""

    model_config = pydantic.ConfigDict(extra="forbid")

    filename: str | None = None
    target: str = swap.DEFAULT_TARGET
    workspaces: list[str] = pydantic.Field(default_factory=list)
    log_level: LogLevel = LogLevel.WARN

    @pydantic.field_validator("filename")
    @classmethod
    def validate_filename(cls, v: str | None) -> str | None:
        """Source file must be a file name inside each swapped directory."""
        if v is None:
            return v
        return _validate_file_name(v)

    @pydantic.field_validator("target")
    @classmethod
    def validate_target(cls, v: str) -> str:
        return _validate_file_name(v)

    @pydantic.field_validator("workspaces")
    @classmethod
    def validate_workspaces(cls, v: list[str]) -> list[str]:
        """Workspaces are relative directories that stay inside the root."""
        for workspace in v:
            path = pathlib.PurePosixPath(workspace.replace("\\", "/"))
            if path.is_absolute() or ".." in path.parts:
                raise ValueError(
                    f"Invalid workspace '{workspace}': must be a relative path inside the root"
                )
        return v

    @pydantic.model_validator(mode="after")
    def validate_distinct_files(self) -> Self:
        if self.filename is not None and self.filename == self.target:
            raise ValueError(f"filename and target must differ, both are '{self.target}'")
        return self

    @classmethod
    def get_default(cls) -> Self:
        """Get default configuration."""
        return cls()
