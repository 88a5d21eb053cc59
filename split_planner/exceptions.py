"""
Custom exceptions for Split Planner.

This module defines all custom exceptions used throughout the library.
"""


class SplitPlannerException(Exception):
    """Base exception for all Split Planner errors."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    @property
    def default_message(self) -> str:
        return "An unknown split planner error occurred."


class RangeValidationError(SplitPlannerException):
    """Raised when a requested plan mutation violates the range invariant."""

    @property
    def default_message(self) -> str:
        return "Invalid page range specification."


class OutOfBoundsError(RangeValidationError):
    """Raised when a page number falls outside the loaded document."""

    @property
    def default_message(self) -> str:
        return "Requested page number is out of bounds."


class InvertedBoundsError(RangeValidationError):
    """Raised when a range starts after it ends."""

    @property
    def default_message(self) -> str:
        return "Range start page must be <= end page."


class InvalidColorError(RangeValidationError):
    """Raised when a color is not part of the range palette."""

    @property
    def default_message(self) -> str:
        return "Color is not part of the range palette."


class InvalidChunkSizeError(RangeValidationError):
    """Raised when a fixed chunk size is smaller than one page."""

    @property
    def default_message(self) -> str:
        return "Chunk size must be >= 1."


class InvalidRotationError(RangeValidationError):
    """Raised when a rotation is not a multiple of 90 degrees."""

    @property
    def default_message(self) -> str:
        return "Rotation must be a multiple of 90 degrees."


class EmptyPlanError(SplitPlannerException):
    """Raised when a split is requested but the active plan yields no output."""

    @property
    def default_message(self) -> str:
        return "Nothing to split: the active plan is empty."


class SuggestionFailedError(SplitPlannerException):
    """Raised when the suggestion oracle fails or returns an unusable reply."""

    @property
    def default_message(self) -> str:
        return "Failed to generate split suggestions."


class SuggestionInProgressError(SplitPlannerException):
    """Raised when a suggestion request is issued while another is pending."""

    @property
    def default_message(self) -> str:
        return "A suggestion request is already in progress."


class LoadError(SplitPlannerException):
    """Raised when a document cannot be loaded."""

    @property
    def default_message(self) -> str:
        return "Invalid or corrupted PDF document."


class EncryptedDocumentError(LoadError):
    """Raised when a document is encrypted and cannot be processed."""

    @property
    def default_message(self) -> str:
        return "PDF is encrypted and cannot be processed without a password."


class ExtractError(SplitPlannerException):
    """Raised when pages cannot be extracted into an output document."""

    @property
    def default_message(self) -> str:
        return "Failed to extract pages into a new document."


class OracleError(SplitPlannerException):
    """Raised by suggestion oracles when the remote call fails."""

    @property
    def default_message(self) -> str:
        return "Suggestion oracle request failed."


class PlanLockedError(SplitPlannerException):
    """Raised when the plan is edited while a split is running."""

    @property
    def default_message(self) -> str:
        return "The plan cannot be changed while a split is running."


class OrchestratorBusyError(SplitPlannerException):
    """Raised when a split is started while another one is running."""

    @property
    def default_message(self) -> str:
        return "A split is already running."


class NoDocumentError(SplitPlannerException):
    """Raised when a command needs a loaded document and none is loaded."""

    @property
    def default_message(self) -> str:
        return "No document has been loaded."


class NoResultsError(SplitPlannerException):
    """Raised when results are requested before a split has completed."""

    @property
    def default_message(self) -> str:
        return "No split results are available."


class HandleReleasedError(SplitPlannerException):
    """Raised when a released result handle is read."""

    @property
    def default_message(self) -> str:
        return "The result handle has been released."
