"""ZIP archive packager for realized outputs."""

from __future__ import annotations

import io
from pathlib import PurePosixPath
from typing import Iterable, Set, Tuple
from zipfile import ZIP_DEFLATED, ZipFile, ZipInfo

from .base import ArchivePackager

ARCHIVE_TIMESTAMP = (1980, 1, 1, 0, 0, 0)


def _zipinfo(name: str) -> ZipInfo:
    info = ZipInfo(name)
    info.date_time = ARCHIVE_TIMESTAMP
    info.compress_type = ZIP_DEFLATED
    info.external_attr = 0o644 << 16
    return info


def unique_entry_name(name: str, used: Set[str]) -> str:
    """Return ``name`` or ``name`` with a numeric suffix not yet in ``used``."""

    candidate = name
    path = PurePosixPath(name)
    counter = 2
    while candidate in used:
        candidate = f"{path.stem}_{counter}{path.suffix}"
        counter += 1
    used.add(candidate)
    return candidate


class ZipArchivePackager(ArchivePackager):
    """Pack outputs into a deflated ZIP archive held in memory."""

    def pack(self, entries: Iterable[Tuple[str, bytes]]) -> bytes:
        buffer = io.BytesIO()
        used: Set[str] = set()
        with ZipFile(buffer, "w", compression=ZIP_DEFLATED) as archive:
            for name, data in entries:
                archive.writestr(_zipinfo(unique_entry_name(name, used)), data)
        return buffer.getvalue()
