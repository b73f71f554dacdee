from __future__ import annotations

import logging
import pathlib
from typing import TYPE_CHECKING, Any, cast

import click

from confswap import workspace
from confswap.config import io as config_io

if TYPE_CHECKING:
    from confswap.config.models import ConfswapConfig


def load_session_config(
    root: pathlib.Path | None, **overrides: Any
) -> tuple[pathlib.Path, ConfswapConfig]:
    """Resolve the session root and its merged configuration.

    Config comes from the nearest project root at or above the session root;
    non-None overrides (command line options) win over config files.
    """
    session_root = (root or pathlib.Path.cwd()).resolve()
    project_root = workspace.find_project_root(session_root)
    merged = config_io.get_merged_config(project_root)
    merged = config_io.apply_overrides(merged, overrides)
    _apply_log_level(merged)
    return session_root, merged


def _is_verbose() -> bool:
    ctx = click.get_current_context(silent=True)
    if ctx is None or not isinstance(ctx.find_root().obj, dict):
        return False
    return bool(cast("dict[str, Any]", ctx.find_root().obj).get("verbose", False))


def _apply_log_level(merged: ConfswapConfig) -> None:
    """Set the package logger to the configured level unless --verbose was given."""
    package_logger = logging.getLogger("confswap")
    if _is_verbose():
        package_logger.setLevel(logging.NOTSET)
        return
    package_logger.setLevel(merged.log_level.to_logging_level())


def search_directories(root: pathlib.Path, merged: ConfswapConfig) -> list[pathlib.Path]:
    """Directories a session at root would swap: existing workspaces, then root."""
    directories = [
        (root / w).resolve() for w in merged.workspaces if (root / w).resolve().is_dir()
    ]
    directories.append(root)
    return list(dict.fromkeys(directories))
