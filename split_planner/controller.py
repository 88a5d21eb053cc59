"""Mutation API over the current segmentation plan."""

from __future__ import annotations

import dataclasses
import logging
from typing import Iterable, Optional

from .exceptions import InvalidColorError, InvertedBoundsError, OutOfBoundsError
from .history import DEFAULT_HISTORY_LIMIT, SegmentationHistory
from .types import RANGE_COLORS, HistoryStatus, Plan, Range, palette_color

LOGGER = logging.getLogger("split_planner.controller")

DEFAULT_RANGE_LABEL = "Full Document"


def validate_bounds(start: int, end: int, page_count: int) -> None:
    """Raise unless ``1 <= start <= end <= page_count``."""

    if start < 1 or end > page_count:
        raise OutOfBoundsError(
            f"Invalid page range: {start}-{end}. Document has {page_count} pages."
        )
    if start > end:
        raise InvertedBoundsError(
            f"Start page ({start}) must be <= end page ({end})."
        )


def default_label(position: int) -> str:
    return f"Part {position + 1}"


class SegmentationController:
    """Owns the plan and its history; every mutation records a snapshot."""

    def __init__(self, page_count: int = 0, *, history_limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        self._page_count = page_count
        self._history: SegmentationHistory[Plan] = SegmentationHistory((), max_size=history_limit)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def page_count(self) -> int:
        return self._page_count

    @property
    def plan(self) -> Plan:
        return self._history.current()

    @property
    def history(self) -> SegmentationHistory[Plan]:
        return self._history

    @property
    def history_status(self) -> HistoryStatus:
        return HistoryStatus(can_undo=self._history.can_undo, can_redo=self._history.can_redo)

    def get_range(self, range_id: str) -> Optional[Range]:
        for item in self.plan:
            if item.id == range_id:
                return item
        return None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def reset_plan(self, page_count: int) -> Plan:
        """Start a fresh history whose first snapshot covers the whole document."""

        self._page_count = page_count
        self._history.clear()
        initial: Plan = (
            Range(start=1, end=page_count, label=DEFAULT_RANGE_LABEL, color=palette_color(0)),
        )
        self._history.push(initial)
        return initial

    def add_range(self, start: int, end: int, label: Optional[str] = None) -> Range:
        validate_bounds(start, end, self._page_count)

        plan = self.plan
        position = len(plan)
        new_range = Range(
            start=start,
            end=end,
            label=label if label and label.strip() else default_label(position),
            color=palette_color(position),
        )
        self._commit(plan + (new_range,))
        LOGGER.debug("Added range %s", new_range)
        return new_range

    def append_remaining_range(self, label: Optional[str] = None) -> Optional[Range]:
        """Add a range covering every page after the last range, if any remain."""

        plan = self.plan
        last_end = plan[-1].end if plan else 0
        if last_end >= self._page_count:
            return None
        return self.add_range(last_end + 1, self._page_count, label)

    def remove_range(self, range_id: str) -> None:
        plan = self.plan
        remaining = tuple(item for item in plan if item.id != range_id)
        if len(remaining) == len(plan):
            return
        self._commit(remaining)

    def relabel(self, range_id: str, label: str) -> None:
        self._update(range_id, label=label)

    def recolor(self, range_id: str, color: str) -> None:
        if color not in RANGE_COLORS:
            raise InvalidColorError(f"Color '{color}' is not part of the range palette.")
        self._update(range_id, color=color)

    def replace_plan(self, ranges: Iterable[Range]) -> Plan:
        """Replace the whole plan atomically with a single history snapshot."""

        new_plan = tuple(ranges)
        for item in new_plan:
            validate_bounds(item.start, item.end, self._page_count)
        self._commit(new_plan)
        return new_plan

    def undo(self) -> Plan:
        return self._history.undo()

    def redo(self) -> Plan:
        return self._history.redo()

    # ------------------------------------------------------------------
    def _update(self, range_id: str, **changes: str) -> None:
        plan = self.plan
        if not any(item.id == range_id for item in plan):
            return
        self._commit(
            tuple(dataclasses.replace(item, **changes) if item.id == range_id else item for item in plan)
        )

    def _commit(self, plan: Plan) -> None:
        self._history.push(plan)


__all__ = ["SegmentationController", "validate_bounds", "default_label", "DEFAULT_RANGE_LABEL"]
