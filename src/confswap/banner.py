"""Sentinel banner marking files that confswap generated.

The banner survives process restarts, so a later run can tell a leftover
generated file apart from the user's own file of the same name.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    import pathlib

BANNER: Final = (
    "// confswap: generated file, the original is restored when the session ends. Do not edit.\n"
)

_BANNER_PREFIX: Final = BANNER.rstrip()


def stamp(content: str) -> str:
    """Prepend the banner line to content."""
    return BANNER + content


def is_stamped(path: pathlib.Path) -> bool:
    """Return True if the file at path starts with the banner.

    Missing, unreadable, or undecodable files are reported as not stamped.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return False
    return content.startswith(_BANNER_PREFIX)
