"""Translate a split strategy into concrete :class:`OutputSpec` instructions.

Every function in this module is pure: the result only depends on the pages,
the plan and the strategy parameters passed in.
"""

from __future__ import annotations

import logging
import math
import re
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

from .exceptions import InvalidChunkSizeError
from .types import OutputSpec, PageSet, Range, SplitMode

LOGGER = logging.getLogger("split_planner.planner")

DEFAULT_BASE_NAME = "document"

_SINGLE_PAGE = re.compile(r"^(\d+)$")
_PAGE_RANGE = re.compile(r"^(\d+)\s*-\s*(\d+)$")
_NON_ALNUM = re.compile(r"[^0-9A-Za-z]+")
_WHITESPACE = re.compile(r"\s+")


class EmptyPlan:
    """Returned instead of outputs when the strategy has nothing to produce."""

    _instance: Optional["EmptyPlan"] = None

    def __new__(cls) -> "EmptyPlan":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "EmptyPlan"


EMPTY_PLAN = EmptyPlan()

PlanResult = Union[List[OutputSpec], EmptyPlan]


def is_empty_plan(result: PlanResult) -> bool:
    return isinstance(result, EmptyPlan)


def sanitize_label(label: str, separator: str = "_") -> str:
    """Collapse every run of non-alphanumeric characters into ``separator``."""

    return _NON_ALNUM.sub(separator, label).strip(separator)


def base_name_for(document_name: Optional[str]) -> str:
    """Derive the output base name from a document file name."""

    if not document_name or not document_name.strip():
        return DEFAULT_BASE_NAME
    name = Path(document_name.strip()).name
    if name.lower().endswith(".pdf"):
        name = name[:-4]
    name = _WHITESPACE.sub("_", name.strip())
    return name or DEFAULT_BASE_NAME


def build_output_name(base_name: str, sequence: int, label: Optional[str] = None) -> str:
    """Construct the file name of the ``sequence``-th (1-based) output."""

    suffix = sanitize_label(label) if label else ""
    if suffix:
        return f"{base_name}_part_{sequence}_{suffix}.pdf"
    return f"{base_name}_part_{sequence}.pdf"


def _rotation_overrides(pages: PageSet, indices: Iterable[int]) -> dict:
    return {index: pages[index].rotation for index in indices}


def _make_spec(pages: PageSet, name: str, indices: Sequence[int]) -> OutputSpec:
    page_indices = tuple(indices)
    return OutputSpec(
        name=name,
        page_indices=page_indices,
        rotation_overrides=_rotation_overrides(pages, page_indices),
    )


def plan_explicit_ranges(
    pages: PageSet,
    ranges: Sequence[Range],
    base_name: str = DEFAULT_BASE_NAME,
) -> PlanResult:
    """One output per range, in plan order; overlapping ranges stay independent."""

    if not ranges:
        return EMPTY_PLAN

    return [
        _make_spec(
            pages,
            build_output_name(base_name, sequence, item.label),
            range(item.start - 1, item.end),
        )
        for sequence, item in enumerate(ranges, start=1)
    ]


def plan_fixed_chunks(
    pages: PageSet,
    chunk_size: int,
    base_name: str = DEFAULT_BASE_NAME,
) -> PlanResult:
    """Partition all pages into consecutive chunks of ``chunk_size`` pages."""

    if chunk_size < 1:
        raise InvalidChunkSizeError(f"Chunk size must be >= 1, got {chunk_size}")

    page_count = pages.page_count
    num_chunks = math.ceil(page_count / chunk_size)
    specs: List[OutputSpec] = []
    for chunk_index in range(num_chunks):
        start = chunk_index * chunk_size
        end = min(start + chunk_size, page_count)
        specs.append(
            _make_spec(pages, build_output_name(base_name, chunk_index + 1), range(start, end))
        )
    return specs


def parse_extract_expression(expression: str, page_count: int) -> List[int]:
    """Resolve a page list such as ``"1, 3, 5-8"`` into sorted 0-based indices.

    Tokens that are not a page number or an ascending ``a-b`` range are
    skipped, as are pages outside the document.
    """

    indices: set[int] = set()
    for token in (expression or "").split(","):
        token = token.strip()
        if not token:
            continue

        single = _SINGLE_PAGE.match(token)
        if single:
            start = end = int(single.group(1))
        else:
            span = _PAGE_RANGE.match(token)
            if not span:
                LOGGER.debug("Skipping unparseable page token %r", token)
                continue
            start, end = int(span.group(1)), int(span.group(2))
            if start > end:
                LOGGER.debug("Skipping inverted page range %r", token)
                continue

        indices.update(range(max(start, 1) - 1, min(end, page_count)))

    return sorted(indices)


def plan_extraction(
    pages: PageSet,
    expression: str,
    base_name: str = DEFAULT_BASE_NAME,
) -> PlanResult:
    """Collect the pages named by ``expression`` into a single output."""

    indices = parse_extract_expression(expression, pages.page_count)
    if not indices:
        return EMPTY_PLAN
    return [_make_spec(pages, f"{base_name}_extracted.pdf", indices)]


def build_split_plan(
    pages: PageSet,
    mode: SplitMode,
    *,
    ranges: Sequence[Range] = (),
    chunk_size: int = 1,
    expression: str = "",
    base_name: str = DEFAULT_BASE_NAME,
) -> PlanResult:
    """Dispatch to the strategy selected by ``mode``."""

    mode = SplitMode(mode)
    if mode.uses_ranges:
        result = plan_explicit_ranges(pages, ranges, base_name)
    elif mode is SplitMode.FIXED:
        result = plan_fixed_chunks(pages, chunk_size, base_name)
    else:
        result = plan_extraction(pages, expression, base_name)

    if is_empty_plan(result):
        LOGGER.info("Split plan for mode '%s' is empty", mode.value)
    else:
        LOGGER.debug("Planned %s output(s) for mode '%s'", len(result), mode.value)
    return result


__all__ = [
    "EMPTY_PLAN",
    "EmptyPlan",
    "PlanResult",
    "base_name_for",
    "build_output_name",
    "build_split_plan",
    "is_empty_plan",
    "parse_extract_expression",
    "plan_explicit_ranges",
    "plan_extraction",
    "plan_fixed_chunks",
    "sanitize_label",
]
