"""Collaborator protocols consumed by the split planner core."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Protocol, Tuple

from ..types import OutputSpec


class DocumentCodec(Protocol):
    """Reads page counts and realizes :class:`OutputSpec` instructions."""

    def load_page_count(self, data: bytes) -> int:
        """Return the number of pages in ``data`` or raise ``LoadError``."""

    def extract_and_rotate(self, data: bytes, spec: OutputSpec) -> Tuple[bytes, int]:
        """Build the output described by ``spec`` and return ``(bytes, byte_size)``."""


class ArchivePackager(Protocol):
    """Bundles several named outputs into a single archive."""

    def pack(self, entries: Iterable[Tuple[str, bytes]]) -> bytes:
        """Return the archive bytes for ``entries``."""


class SuggestionOracle(Protocol):
    """Turns a natural language request into raw page ranges."""

    async def suggest(self, prompt_text: str, page_count: int) -> List[Dict[str, Any]]:
        """Return ``{"start", "end", "label"}`` items or raise ``OracleError``."""
