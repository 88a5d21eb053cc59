"""
Type definitions and dataclasses for Split Planner.

This module defines data structures used throughout the library: pages and
page sets, labeled ranges, output specifications, process status and realized
results.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Optional, Tuple, Union

from .exceptions import HandleReleasedError, InvalidRotationError, OutOfBoundsError

RANGE_COLORS: Tuple[str, ...] = (
    "#3b82f6",  # blue
    "#ef4444",  # red
    "#10b981",  # green
    "#f59e0b",  # amber
    "#8b5cf6",  # violet
    "#ec4899",  # pink
    "#06b6d4",  # cyan
    "#f97316",  # orange
)

VALID_ROTATIONS = (0, 90, 180, 270)


def palette_color(position: int) -> str:
    """Return the palette color for the range at ordinal ``position``."""

    return RANGE_COLORS[position % len(RANGE_COLORS)]


def new_range_id() -> str:
    return uuid.uuid4().hex


class SplitMode(str, Enum):
    """Strategies available for turning pages into output documents."""

    RANGES = "ranges"
    EXTRACT = "extract"
    FIXED = "fixed"
    AI_SMART = "ai_smart"

    @property
    def uses_ranges(self) -> bool:
        return self in (SplitMode.RANGES, SplitMode.AI_SMART)


@dataclass
class Page:
    """
    A single page of the loaded document.

    Attributes:
        index: Stable zero-based position
        number: One-based page number (``index + 1``)
        rotation: User rotation override in degrees, one of 0/90/180/270
    """
    index: int
    number: int
    rotation: int = 0


class PageSet:
    """Ordered pages of a loaded document; only rotations may change."""

    def __init__(self, page_count: int) -> None:
        if page_count < 1:
            raise OutOfBoundsError(f"A document needs at least one page, got {page_count}.")
        self._pages: List[Page] = [Page(index=i, number=i + 1) for i in range(page_count)]

    def __len__(self) -> int:
        return len(self._pages)

    def __iter__(self) -> Iterator[Page]:
        return iter(self._pages)

    def __getitem__(self, index: int) -> Page:
        return self._pages[index]

    @property
    def page_count(self) -> int:
        return len(self._pages)

    def rotate(self, index: int, degrees: int = 90) -> int:
        """Rotate page ``index`` clockwise by ``degrees`` and return the new rotation."""

        if index < 0 or index >= len(self._pages):
            raise OutOfBoundsError(
                f"Page index {index} is out of bounds. Document has {len(self._pages)} pages."
            )
        if degrees % 90 != 0:
            raise InvalidRotationError(f"Rotation must be a multiple of 90 degrees, got {degrees}.")

        page = self._pages[index]
        page.rotation = (page.rotation + degrees) % 360
        return page.rotation

    def rotations(self) -> Dict[int, int]:
        return {page.index: page.rotation for page in self._pages}

    def reset_rotations(self) -> None:
        for page in self._pages:
            page.rotation = 0


@dataclass(frozen=True)
class Range:
    """
    A labeled, colored, inclusive interval of page numbers.

    Attributes:
        start: First page number (1-indexed)
        end: Last page number (inclusive)
        label: Human readable label, used in output names
        color: Palette color token
        id: Opaque unique token
    """
    start: int
    end: int
    label: str
    color: str
    id: str = field(default_factory=new_range_id)

    @property
    def page_count(self) -> int:
        return self.end - self.start + 1

    def contains(self, page_number: int) -> bool:
        return self.start <= page_number <= self.end

    def __str__(self) -> str:
        return f"{self.label} ({self.start}-{self.end})"


Plan = Tuple[Range, ...]


@dataclass(frozen=True)
class HistoryStatus:
    can_undo: bool
    can_redo: bool


@dataclass(frozen=True)
class OutputSpec:
    """
    Fully resolved instructions for producing one output document.

    Attributes:
        name: Output file name
        page_indices: Zero-based page indices in output order (duplicates allowed)
        rotation_overrides: Extra rotation per page index, captured at planning time
    """
    name: str
    page_indices: Tuple[int, ...]
    rotation_overrides: Mapping[int, int] = field(default_factory=dict)

    @property
    def page_count(self) -> int:
        return len(self.page_indices)

    def rotation_for(self, index: int) -> int:
        return self.rotation_overrides.get(index, 0)


class ProcessStage(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"


@dataclass
class StageStatus:
    """Progress of one named processing stage."""

    name: str
    stage: ProcessStage = ProcessStage.PENDING
    progress: int = 0


ProcessStatus = Tuple[StageStatus, ...]


class ResultHandle:
    """In-memory handle on the bytes of one realized output document."""

    def __init__(self, name: str, data: bytes) -> None:
        self.name = name
        self._data: Optional[bytes] = data

    @property
    def released(self) -> bool:
        return self._data is None

    def read(self) -> bytes:
        if self._data is None:
            raise HandleReleasedError(f"Result '{self.name}' has been released.")
        return self._data

    def save(self, destination: Union[str, Path]) -> Path:
        """Write the handle's bytes to ``destination`` and return the path."""

        path = Path(destination)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.read())
        return path

    def release(self) -> None:
        self._data = None

    def __repr__(self) -> str:
        state = "released" if self.released else f"{len(self._data or b'')} bytes"
        return f"ResultHandle({self.name!r}, {state})"


@dataclass
class OutputResult:
    """
    Metadata for one realized output document.

    Attributes:
        name: Output file name
        page_count: Number of pages in the output
        byte_size: Size of the serialized output in bytes
        handle: Handle used to retrieve the output bytes
    """
    name: str
    page_count: int
    byte_size: int
    handle: ResultHandle

    def __str__(self) -> str:
        return f"OutputResult(name='{self.name}', pages={self.page_count}, bytes={self.byte_size})"
