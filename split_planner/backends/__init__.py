"""Collaborator backends for Split Planner."""

from .base import ArchivePackager, DocumentCodec, SuggestionOracle
from .gemini_backend import GeminiOracle
from .pypdf_backend import PypdfCodec
from .zip_backend import ZipArchivePackager

__all__ = [
    "ArchivePackager",
    "DocumentCodec",
    "SuggestionOracle",
    "GeminiOracle",
    "PypdfCodec",
    "ZipArchivePackager",
]
