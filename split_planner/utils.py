"""Utility helpers shared by the session and the command-line interface."""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .exceptions import InvalidRotationError, RangeValidationError
from .types import OutputResult

_RANGE_OPTION_RE = re.compile(r"^\s*(\d+)\s*(?:-\s*(\d+))?\s*(?::(.*))?$")
_ROTATE_OPTION_RE = re.compile(r"^\s*(\d+)\s*:\s*(-?\d+)\s*$")


def format_file_size(size_bytes: float) -> str:
    """
    Format file size in human-readable format.

    Args:
        size_bytes: File size in bytes

    Returns:
        Formatted string (e.g., "1.5 MB", "500.0 KB")
    """
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if size_bytes < 1024.0:
            return f"{size_bytes:.1f} {unit}"
        size_bytes /= 1024.0
    return f"{size_bytes:.1f} PB"


def summarize_results(results: Sequence[OutputResult]) -> List[Dict[str, Any]]:
    """
    Describe realized outputs for reporting.

    Each entry holds the output ``name``, its ``page_count`` and ``byte_size``,
    and ``share``: the percentage of all output pages it contains.
    """
    total_pages = sum(result.page_count for result in results)
    summary = []
    for result in results:
        share = (result.page_count / total_pages * 100.0) if total_pages else 0.0
        summary.append(
            {
                "name": result.name,
                "page_count": result.page_count,
                "byte_size": result.byte_size,
                "share": round(share, 1),
            }
        )
    return summary


def parse_range_option(value: str) -> Tuple[int, int, Optional[str]]:
    """Parse ``"START-END:Label"`` (or ``"PAGE"``) into its parts.

    >>> parse_range_option("1-5:Intro")
    (1, 5, 'Intro')
    """
    match = _RANGE_OPTION_RE.match(value or "")
    if not match:
        raise RangeValidationError(f"Invalid range '{value}'. Expected START-END[:LABEL].")
    start = int(match.group(1))
    end = int(match.group(2)) if match.group(2) else start
    label = (match.group(3) or "").strip() or None
    return start, end, label


def parse_rotation_option(value: str) -> Tuple[int, int]:
    """Parse ``"PAGE:DEGREES"`` into a one-based page number and degrees."""

    match = _ROTATE_OPTION_RE.match(value or "")
    if not match:
        raise InvalidRotationError(f"Invalid rotation '{value}'. Expected PAGE:DEGREES.")
    return int(match.group(1)), int(match.group(2))
