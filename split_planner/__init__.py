"""
Split Planner - Plan, preview and realize PDF splits.

This library lets you carve the pages of a document into output groups using
labeled ranges, fixed-size chunks, page-list extraction, or ranges suggested by
a language model. Range edits can be undone and redone, pages can be rotated
before splitting, and results can be bundled into a single ZIP archive.

Quick Start:
    >>> import asyncio
    >>> from split_planner import SplitSession
    >>> session = SplitSession()
    >>> session.load_document(open('input.pdf', 'rb').read(), name='input.pdf')
    >>> session.add_range(1, 3, 'Intro')
    >>> asyncio.run(session.start_split())
    >>> archive = session.pack_results()

Main Classes:
    - SplitSession: Owns the document, plan, history and processing state
    - SegmentationController: Validated, undoable range editing
    - ProcessOrchestrator: Staged processing pipeline

Data Classes:
    - Range: Labeled, colored interval of pages
    - OutputSpec: Resolved instructions for one output document
    - OutputResult: Metadata and handle of one realized output

Exceptions:
    - SplitPlannerException: Base exception
    - RangeValidationError: Invalid range, color, chunk size or rotation
    - EmptyPlanError: Nothing to split
    - SuggestionFailedError: Suggested ranges could not be applied

For CLI usage, use the 'split-planner' command after installation.
"""

# Core classes
from split_planner.session import SplitSession
from split_planner.controller import SegmentationController
from split_planner.history import SegmentationHistory
from split_planner.orchestrator import ProcessOrchestrator, ProcessState
from split_planner.suggestions import SuggestionAdapter
from split_planner.config import Settings

# Planning
from split_planner.planner import (
    EMPTY_PLAN,
    build_split_plan,
    is_empty_plan,
    parse_extract_expression,
)

# Data types
from split_planner.types import (
    RANGE_COLORS,
    HistoryStatus,
    OutputResult,
    OutputSpec,
    Page,
    ProcessStage,
    Range,
    ResultHandle,
    SplitMode,
    StageStatus,
)

# Exceptions
from split_planner.exceptions import (
    SplitPlannerException,
    RangeValidationError,
    OutOfBoundsError,
    InvertedBoundsError,
    InvalidColorError,
    InvalidChunkSizeError,
    InvalidRotationError,
    EmptyPlanError,
    SuggestionFailedError,
    SuggestionInProgressError,
    LoadError,
    EncryptedDocumentError,
    ExtractError,
    OracleError,
    PlanLockedError,
    NoDocumentError,
    NoResultsError,
)

# Utility functions
from split_planner.utils import format_file_size, summarize_results

__version__ = "1.0.0"
__author__ = "Split Planner Contributors"
__license__ = "MIT"

__all__ = [
    # Main classes
    "SplitSession",
    "SegmentationController",
    "SegmentationHistory",
    "ProcessOrchestrator",
    "ProcessState",
    "SuggestionAdapter",
    "Settings",
    # Planning
    "EMPTY_PLAN",
    "build_split_plan",
    "is_empty_plan",
    "parse_extract_expression",
    # Data types
    "RANGE_COLORS",
    "HistoryStatus",
    "OutputResult",
    "OutputSpec",
    "Page",
    "ProcessStage",
    "Range",
    "ResultHandle",
    "SplitMode",
    "StageStatus",
    # Exceptions
    "SplitPlannerException",
    "RangeValidationError",
    "OutOfBoundsError",
    "InvertedBoundsError",
    "InvalidColorError",
    "InvalidChunkSizeError",
    "InvalidRotationError",
    "EmptyPlanError",
    "SuggestionFailedError",
    "SuggestionInProgressError",
    "LoadError",
    "EncryptedDocumentError",
    "ExtractError",
    "OracleError",
    "PlanLockedError",
    "NoDocumentError",
    "NoResultsError",
    # Utility functions
    "format_file_size",
    "summarize_results",
    # Version info
    "__version__",
]
