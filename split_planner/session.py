"""The owned state aggregate exposed to applications.

A :class:`SplitSession` holds everything one user works on: the loaded
document, its pages and rotations, the segmentation plan and its history, the
active strategy and its parameters, and the processing pipeline.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union, cast

from .backends.base import ArchivePackager, DocumentCodec, SuggestionOracle
from .backends.gemini_backend import GeminiOracle
from .backends.pypdf_backend import PypdfCodec
from .backends.zip_backend import ZipArchivePackager
from .config import Settings
from .controller import SegmentationController
from .exceptions import (
    EmptyPlanError,
    InvalidChunkSizeError,
    NoDocumentError,
    NoResultsError,
    PlanLockedError,
    SuggestionInProgressError,
)
from .orchestrator import DEFAULT_STAGES, CodecRealizer, ProcessOrchestrator, ProcessState, Realizer
from .planner import PlanResult, base_name_for, build_split_plan, is_empty_plan
from .suggestions import SuggestionAdapter
from .types import (
    HistoryStatus,
    OutputResult,
    Page,
    PageSet,
    Plan,
    ProcessStatus,
    Range,
    SplitMode,
)
from .utils import summarize_results

LOGGER = logging.getLogger("split_planner.session")

RealizerFactory = Callable[[bytes], Realizer]


class SplitSession:
    """Commands and queries for planning and running one document split."""

    def __init__(
        self,
        *,
        codec: Optional[DocumentCodec] = None,
        oracle: Optional[SuggestionOracle] = None,
        packager: Optional[ArchivePackager] = None,
        settings: Optional[Settings] = None,
        realizer_factory: Optional[RealizerFactory] = None,
        stages: Sequence[str] = DEFAULT_STAGES,
    ) -> None:
        self.settings = settings or Settings.from_env()
        self.codec: DocumentCodec = codec or PypdfCodec()
        self.packager: ArchivePackager = packager or ZipArchivePackager()
        self.oracle: SuggestionOracle = oracle or GeminiOracle(
            self.settings.gemini_api_key,
            model=self.settings.gemini_model,
            timeout=self.settings.oracle_timeout,
        )
        self._realizer_factory: RealizerFactory = realizer_factory or (
            lambda data: CodecRealizer(self.codec, data)
        )
        self._stages = tuple(stages)

        self._controller = SegmentationController(history_limit=self.settings.history_limit)
        self._suggestions = SuggestionAdapter(self.oracle, self._controller)
        self._orchestrator: Optional[ProcessOrchestrator] = None

        self._data: Optional[bytes] = None
        self._document_name: Optional[str] = None
        self._pages: Optional[PageSet] = None
        self._mode = SplitMode.RANGES
        self._chunk_size = 1
        self._extract_expression = ""

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def is_loaded(self) -> bool:
        return self._pages is not None

    @property
    def document_name(self) -> Optional[str]:
        return self._document_name

    @property
    def page_count(self) -> int:
        return self._pages.page_count if self._pages is not None else 0

    @property
    def pages(self) -> Tuple[Page, ...]:
        if self._pages is None:
            return ()
        return tuple(Page(page.index, page.number, page.rotation) for page in self._pages)

    @property
    def mode(self) -> SplitMode:
        return self._mode

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    @property
    def extract_expression(self) -> str:
        return self._extract_expression

    @property
    def plan(self) -> Plan:
        return self._controller.plan

    @property
    def history_status(self) -> HistoryStatus:
        return self._controller.history_status

    @property
    def loading_suggestions(self) -> bool:
        return self._suggestions.loading

    @property
    def state(self) -> ProcessState:
        return self._orchestrator.state if self._orchestrator is not None else ProcessState.IDLE

    @property
    def is_running(self) -> bool:
        return self._orchestrator is not None and self._orchestrator.is_running

    @property
    def process_status(self) -> ProcessStatus:
        return self._orchestrator.status if self._orchestrator is not None else ()

    @property
    def results(self) -> List[OutputResult]:
        return self._orchestrator.results if self._orchestrator is not None else []

    @property
    def error(self) -> Optional[str]:
        return self._orchestrator.error if self._orchestrator is not None else None

    @property
    def can_split(self) -> bool:
        if not self.is_loaded or self.is_running or self.loading_suggestions:
            return False
        return not is_empty_plan(self.build_plan())

    # ------------------------------------------------------------------
    # Document lifecycle
    # ------------------------------------------------------------------
    def load_document(self, data: bytes, name: Optional[str] = None) -> int:
        """Load ``data`` and start a fresh plan; return the page count."""

        if self.is_running:
            raise PlanLockedError("A document cannot be loaded while a split is running.")
        if self.loading_suggestions:
            raise SuggestionInProgressError("A document cannot be loaded while suggestions are pending.")

        page_count = self.codec.load_page_count(data)
        if self._orchestrator is not None:
            self._orchestrator.reset()

        self._data = data
        self._document_name = name
        self._pages = PageSet(page_count)
        self._controller.reset_plan(page_count)
        self._mode = SplitMode.RANGES
        self._chunk_size = 1
        self._extract_expression = ""
        self._orchestrator = ProcessOrchestrator(
            self._realizer_factory(data),
            stages=self._stages,
            tick_interval=self.settings.tick_interval,
        )
        LOGGER.info("Loaded document %s with %s pages", name or "<unnamed>", page_count)
        return page_count

    def reset(self) -> None:
        """Forget the document, plan and results, releasing result handles."""

        if self.is_running:
            raise PlanLockedError("The session cannot be reset while a split is running.")
        if self.loading_suggestions:
            raise SuggestionInProgressError("The session cannot be reset while suggestions are pending.")
        if self._orchestrator is not None:
            self._orchestrator.reset()
        self._orchestrator = None
        self._data = None
        self._document_name = None
        self._pages = None
        self._controller.history.clear()
        self._mode = SplitMode.RANGES
        self._chunk_size = 1
        self._extract_expression = ""
        LOGGER.info("Session reset")

    # ------------------------------------------------------------------
    # Plan commands
    # ------------------------------------------------------------------
    def set_mode(self, mode: Union[SplitMode, str]) -> None:
        self._ensure_editable()
        self._mode = SplitMode(mode)

    def add_range(self, start: int, end: int, label: Optional[str] = None) -> Range:
        self._ensure_editable()
        return self._controller.add_range(start, end, label)

    def append_remaining_range(self, label: Optional[str] = None) -> Optional[Range]:
        self._ensure_editable()
        return self._controller.append_remaining_range(label)

    def remove_range(self, range_id: str) -> None:
        self._ensure_editable()
        self._controller.remove_range(range_id)

    def relabel(self, range_id: str, label: str) -> None:
        self._ensure_editable()
        self._controller.relabel(range_id, label)

    def recolor(self, range_id: str, color: str) -> None:
        self._ensure_editable()
        self._controller.recolor(range_id, color)

    def undo(self) -> Plan:
        self._ensure_editable()
        return self._controller.undo()

    def redo(self) -> Plan:
        self._ensure_editable()
        return self._controller.redo()

    def rotate_page(self, index: int, degrees: int = 90) -> int:
        return self._editable_pages().rotate(index, degrees)

    def set_fixed_chunk_size(self, chunk_size: int) -> None:
        self._ensure_editable()
        if chunk_size < 1:
            raise InvalidChunkSizeError(f"Chunk size must be >= 1, got {chunk_size}")
        self._chunk_size = chunk_size

    def set_extract_expression(self, expression: str) -> None:
        self._ensure_editable()
        self._extract_expression = expression or ""

    async def request_suggestions(self, prompt_text: str) -> List[Range]:
        """Replace the plan with oracle suggestions and switch to range mode."""

        self._ensure_editable()
        ranges = await self._suggestions.request_suggestions(prompt_text)
        self._mode = SplitMode.RANGES
        return ranges

    # ------------------------------------------------------------------
    # Splitting
    # ------------------------------------------------------------------
    def build_plan(self) -> PlanResult:
        return build_split_plan(
            self._loaded_pages(),
            self._mode,
            ranges=self._controller.plan,
            chunk_size=self._chunk_size,
            expression=self._extract_expression,
            base_name=base_name_for(self._document_name),
        )

    async def start_split(self) -> ProcessState:
        """Freeze the current plan and run it; return the terminal state.

        Raises:
            EmptyPlanError: If the active strategy produces no outputs. The
                realization collaborator is not invoked.
        """

        self._ensure_editable()
        specs = self.build_plan()
        if is_empty_plan(specs):
            raise EmptyPlanError(f"Nothing to split in '{self._mode.value}' mode.")

        orchestrator = cast(ProcessOrchestrator, self._orchestrator)
        return await orchestrator.run(specs)

    def pack_results(self) -> bytes:
        """Bundle all realized outputs into a single archive."""

        if self.state is not ProcessState.DONE:
            raise NoResultsError()
        return self.packager.pack((result.name, result.handle.read()) for result in self.results)

    def summarize_results(self) -> List[Dict[str, Any]]:
        if self.state is not ProcessState.DONE:
            raise NoResultsError()
        return summarize_results(self.results)

    # ------------------------------------------------------------------
    def _loaded_pages(self) -> PageSet:
        if self._pages is None:
            raise NoDocumentError()
        return self._pages

    def _editable_pages(self) -> PageSet:
        """Return the page set, refusing edits during a split or a pending suggestion."""

        pages = self._loaded_pages()
        if self.is_running:
            raise PlanLockedError()
        if self.loading_suggestions:
            raise SuggestionInProgressError("The plan cannot be edited while suggestions are pending.")
        return pages

    def _ensure_editable(self) -> None:
        self._editable_pages()


__all__ = ["SplitSession"]
