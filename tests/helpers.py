"""Test helpers for building swap fixtures on disk."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import pathlib


def make_package(
    directory: pathlib.Path,
    *,
    original: str | None = '{"a":1}',
    replacement: str | None = '{"b":2}',
    target: str = "tsconfig.json",
    source: str = "tsconfig.build.json",
) -> pathlib.Path:
    """Create directory with an optional original target and replacement source."""
    directory.mkdir(parents=True, exist_ok=True)
    if original is not None:
        (directory / target).write_text(original)
    if replacement is not None:
        (directory / source).write_text(replacement)
    return directory


def make_monorepo(root: pathlib.Path, workspaces: list[str]) -> list[pathlib.Path]:
    """Create an npm-workspaces monorepo at root with a package per workspace."""
    make_package(root)
    (root / "package.json").write_text(json.dumps({"name": "mono", "workspaces": workspaces}))
    return [make_package(root / w) for w in workspaces]
