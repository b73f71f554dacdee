"""Project and monorepo root detection, and workspace path resolution.

Workspace swaps only make sense when a session runs at the monorepo root:
running a build from inside one package must not reach into its siblings.
"""

from __future__ import annotations

import dataclasses
import enum
import json
import logging
import pathlib

from confswap import exceptions
from confswap.config import io as config_io

logger = logging.getLogger(__name__)


class MonorepoKind(enum.StrEnum):
    """Tool whose workspace manifest identified the monorepo root."""

    PNPM = "pnpm"
    LERNA = "lerna"
    YARN = "yarn"
    NPM = "npm"


@dataclasses.dataclass(frozen=True)
class MonorepoRoot:
    dir: pathlib.Path
    kind: MonorepoKind


def find_project_root(start: pathlib.Path | None = None) -> pathlib.Path:
    """Walk up from start (default cwd) to find .confswap.yaml or .git."""
    current = (start or pathlib.Path.cwd()).resolve()
    for parent in [current, *current.parents]:
        if (parent / config_io.LOCAL_CONFIG_NAME).exists() or (parent / ".git").exists():
            logger.debug(f"Found project root: {parent}")
            return parent

    logger.debug(f"No project markers found, using {current}")
    return current


def _has_npm_workspaces(package_json: pathlib.Path) -> bool:
    try:
        data: object = json.loads(package_json.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.debug(f"Ignoring unreadable {package_json}: {e}")
        return False
    return isinstance(data, dict) and "workspaces" in data


def _detect_monorepo(directory: pathlib.Path) -> MonorepoKind | None:
    if (directory / "pnpm-workspace.yaml").is_file():
        return MonorepoKind.PNPM
    if (directory / "lerna.json").is_file():
        return MonorepoKind.LERNA
    package_json = directory / "package.json"
    if package_json.is_file() and _has_npm_workspaces(package_json):
        return MonorepoKind.YARN if (directory / "yarn.lock").exists() else MonorepoKind.NPM
    return None


def find_monorepo_root(start: pathlib.Path) -> MonorepoRoot | None:
    """Walk up from start to the nearest directory declaring workspaces."""
    current = start.resolve()
    for parent in [current, *current.parents]:
        if (kind := _detect_monorepo(parent)) is not None:
            return MonorepoRoot(dir=parent, kind=kind)
    return None


def is_monorepo_root(root: pathlib.Path) -> bool:
    """True if root itself is the monorepo root; discovery errors count as False."""
    try:
        monorepo = find_monorepo_root(root)
    except OSError as e:
        logger.warning(f"Failed to find monorepo root: {e}")
        return False

    if monorepo is None:
        logger.info("monorepoRoot: (none)")
        return False
    logger.info(f"monorepoRoot: {monorepo.dir} ({monorepo.kind})")
    return monorepo.dir == root.resolve()


def resolve_workspaces(root: pathlib.Path, workspaces: list[str]) -> list[pathlib.Path]:
    """Resolve workspace paths against root, requiring each to be an existing directory."""
    root = root.resolve()
    resolved = list[pathlib.Path]()
    for workspace in workspaces:
        directory = (root / workspace.replace("\\", "/")).resolve()
        if not directory.is_relative_to(root):
            raise exceptions.ConfigError(f"Workspace '{workspace}' resolves outside {root}")
        if not directory.is_dir():
            raise exceptions.DirectoryNotFoundError(directory)
        resolved.append(directory)
    return resolved
