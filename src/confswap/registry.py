from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

    from confswap.swap import SwapRecord


class SwapRegistry:
    """Append-ordered swap records for one session.

    Filled during setup, drained during teardown. Not thread-safe: setup
    fully precedes teardown within a session.
    """

    _records: list[SwapRecord]

    def __init__(self) -> None:
        self._records = []

    def append(self, record: SwapRecord) -> None:
        """Add a record; a directory can hold at most one live record."""
        if any(r.directory == record.directory for r in self._records):
            raise ValueError(f"Directory {record.directory} is already swapped")
        self._records.append(record)

    def snapshot(self) -> tuple[SwapRecord, ...]:
        return tuple(self._records)

    def drain(self) -> tuple[SwapRecord, ...]:
        """Return all records in append order and clear the registry."""
        records = self.snapshot()
        self._records.clear()
        return records

    def clear(self) -> None:
        self._records.clear()

    def __iter__(self) -> Iterator[SwapRecord]:
        return iter(tuple(self._records))

    def __len__(self) -> int:
        return len(self._records)

    def __bool__(self) -> bool:
        return bool(self._records)
