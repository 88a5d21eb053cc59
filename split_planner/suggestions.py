"""Integration of oracle-suggested ranges into the segmentation plan."""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Sequence

from .backends.base import SuggestionOracle
from .controller import SegmentationController
from .exceptions import (
    OracleError,
    RangeValidationError,
    SuggestionFailedError,
    SuggestionInProgressError,
)
from .types import Range, palette_color

LOGGER = logging.getLogger("split_planner.suggestions")


def _coerce_page(item: Mapping[str, Any], key: str) -> int:
    value = item.get(key)
    if isinstance(value, bool):
        raise SuggestionFailedError(f"Suggested range has a non-numeric '{key}': {value!r}")
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, int):
        return value
    raise SuggestionFailedError(f"Suggested range has a non-numeric '{key}': {value!r}")


def ranges_from_reply(reply: Sequence[Any]) -> List[Range]:
    """Convert raw ``{start, end, label}`` items into colored ranges."""

    if not isinstance(reply, (list, tuple)):
        raise SuggestionFailedError("Oracle reply is not a list of ranges.")
    if not reply:
        raise SuggestionFailedError("Oracle returned no ranges.")

    ranges: List[Range] = []
    for position, item in enumerate(reply):
        if not isinstance(item, Mapping):
            raise SuggestionFailedError(f"Suggested range #{position + 1} is not an object.")
        label = item.get("label")
        ranges.append(
            Range(
                start=_coerce_page(item, "start"),
                end=_coerce_page(item, "end"),
                label=str(label).strip() if label is not None and str(label).strip() else f"Part {position + 1}",
                color=palette_color(position),
            )
        )
    return ranges


class SuggestionAdapter:
    """Single-flight bridge between a :class:`SuggestionOracle` and the plan."""

    def __init__(self, oracle: SuggestionOracle, controller: SegmentationController) -> None:
        self.oracle = oracle
        self.controller = controller
        self._loading = False

    @property
    def loading(self) -> bool:
        return self._loading

    async def request_suggestions(self, prompt_text: str) -> List[Range]:
        """Ask the oracle for ranges and apply them as one undoable update.

        Raises:
            SuggestionInProgressError: If another request is still pending.
            SuggestionFailedError: If the oracle fails or its reply is unusable.
                The plan is left untouched in that case.
        """

        if self._loading:
            raise SuggestionInProgressError()
        if not prompt_text or not prompt_text.strip():
            raise SuggestionFailedError("Suggestion prompt cannot be empty.")

        self._loading = True
        try:
            reply = await self.oracle.suggest(prompt_text, self.controller.page_count)
        except SuggestionInProgressError:
            raise
        except OracleError as exc:
            LOGGER.warning("Suggestion oracle failed: %s", exc)
            raise SuggestionFailedError(f"Failed to generate smart split suggestions: {exc.message}") from exc
        except Exception as exc:
            LOGGER.warning("Suggestion oracle raised %s: %s", type(exc).__name__, exc)
            raise SuggestionFailedError(f"Failed to generate smart split suggestions: {exc}") from exc
        finally:
            self._loading = False

        ranges = ranges_from_reply(reply)
        try:
            self.controller.replace_plan(ranges)
        except RangeValidationError as exc:
            LOGGER.warning("Rejected suggested ranges: %s", exc)
            raise SuggestionFailedError(f"Suggested ranges are invalid: {exc.message}") from exc

        LOGGER.info("Applied %s suggested range(s)", len(ranges))
        return ranges


__all__ = ["SuggestionAdapter", "ranges_from_reply"]
