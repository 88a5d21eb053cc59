"""Bounded, branch-truncating undo/redo history of immutable snapshots."""

from __future__ import annotations

import logging
from typing import Generic, List, TypeVar

LOGGER = logging.getLogger("split_planner.history")

DEFAULT_HISTORY_LIMIT = 100

T = TypeVar("T")


class SegmentationHistory(Generic[T]):
    """A cursor over an append/truncate sequence of snapshots.

    Pushing while the cursor is not on the newest entry discards the redoable
    entries first. Once ``max_size`` is exceeded the oldest entries are evicted
    and the cursor is shifted so it keeps pointing at the same snapshot.
    """

    def __init__(self, empty: T, max_size: int = DEFAULT_HISTORY_LIMIT) -> None:
        if max_size < 1:
            raise ValueError(f"History size must be >= 1, got {max_size}")
        self._empty = empty
        self.max_size = max_size
        self._snapshots: List[T] = []
        self._cursor = -1

    def __len__(self) -> int:
        return len(self._snapshots)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return 0 <= self._cursor < len(self._snapshots) - 1

    def current(self) -> T:
        if not self._snapshots:
            return self._empty
        return self._snapshots[self._cursor]

    def push(self, snapshot: T) -> None:
        if self._cursor < len(self._snapshots) - 1:
            dropped = len(self._snapshots) - 1 - self._cursor
            del self._snapshots[self._cursor + 1:]
            LOGGER.debug("Discarded %s redo snapshot(s)", dropped)

        self._snapshots.append(snapshot)
        self._cursor = len(self._snapshots) - 1

        overflow = len(self._snapshots) - self.max_size
        if overflow > 0:
            # the current entry is never evicted
            evicted = min(overflow, self._cursor)
            del self._snapshots[:evicted]
            self._cursor -= evicted

    def undo(self) -> T:
        if self._snapshots:
            self._cursor = max(0, self._cursor - 1)
        return self.current()

    def redo(self) -> T:
        if self._snapshots:
            self._cursor = min(len(self._snapshots) - 1, self._cursor + 1)
        return self.current()

    def clear(self) -> None:
        self._snapshots.clear()
        self._cursor = -1


__all__ = ["SegmentationHistory", "DEFAULT_HISTORY_LIMIT"]
