"""pypdf backend implementation for Split Planner."""

from __future__ import annotations

import io
from typing import Optional, Tuple

from pypdf import PdfReader, PdfWriter
from pypdf.errors import PdfReadError
from pypdf.generic import NameObject, NumberObject

from ..exceptions import EncryptedDocumentError, ExtractError, LoadError
from ..types import OutputSpec
from .base import DocumentCodec


class PypdfCodec(DocumentCodec):
    """Document codec that uses `pypdf` under the hood."""

    def __init__(self, *, password: Optional[str] = None, producer: str = "Split Planner") -> None:
        self.password = password
        self.producer = producer
        self._cached: Optional[Tuple[bytes, PdfReader]] = None

    def _reader(self, data: bytes) -> PdfReader:
        if self._cached is not None and self._cached[0] is data:
            return self._cached[1]

        if not data:
            raise LoadError("Document is empty.")

        try:
            reader = PdfReader(io.BytesIO(data))
        except PdfReadError as exc:
            raise LoadError(f"Corrupted or invalid PDF document. Error: {exc}") from exc
        except Exception as exc:
            raise LoadError(f"Unexpected error reading PDF. Error: {exc}") from exc

        if reader.is_encrypted:
            if self.password:
                if reader.decrypt(self.password) == 0:
                    raise EncryptedDocumentError("Failed to decrypt PDF with supplied password.")
            else:
                raise EncryptedDocumentError("PDF is encrypted. Supply a password to process this file.")

        self._cached = (data, reader)
        return reader

    def load_page_count(self, data: bytes) -> int:
        if self._cached is not None and self._cached[0] is not data:
            self._cached = None
        reader = self._reader(data)
        try:
            num_pages = len(reader.pages)
        except PdfReadError as exc:
            raise LoadError(f"Unable to read the page tree. Error: {exc}") from exc
        if num_pages == 0:
            raise LoadError("PDF has no pages.")
        return num_pages

    def extract_and_rotate(self, data: bytes, spec: OutputSpec) -> Tuple[bytes, int]:
        try:
            reader = self._reader(data)
        except LoadError as exc:
            raise ExtractError(f"Cannot extract '{spec.name}': {exc.message}") from exc

        num_pages = len(reader.pages)
        writer = PdfWriter()
        try:
            for index in spec.page_indices:
                if index < 0 or index >= num_pages:
                    raise ExtractError(
                        f"Page index {index} is out of bounds for '{spec.name}'. Document has {num_pages} pages."
                    )
                source = reader.pages[index]
                base_rotation = source.rotation
                page = writer.add_page(source)
                extra = spec.rotation_for(index)
                if extra:
                    # absolute value, so a page added twice is not rotated twice
                    page[NameObject("/Rotate")] = NumberObject((base_rotation + extra) % 360)

            self._copy_metadata(reader, writer, title_suffix=f" - {spec.name}")

            buffer = io.BytesIO()
            writer.write(buffer)
        except ExtractError:
            raise
        except Exception as exc:
            raise ExtractError(f"Unexpected error writing '{spec.name}'. Error: {exc}") from exc

        payload = buffer.getvalue()
        return payload, len(payload)

    def _copy_metadata(self, reader: PdfReader, writer: PdfWriter, *, title_suffix: str = "") -> None:
        metadata_dict = {}
        metadata = reader.metadata

        if metadata and metadata.title:
            metadata_dict["/Title"] = f"{metadata.title}{title_suffix}"
        if metadata and metadata.author:
            metadata_dict["/Author"] = metadata.author
        if metadata and metadata.subject:
            metadata_dict["/Subject"] = metadata.subject
        if metadata and metadata.creator:
            metadata_dict["/Creator"] = metadata.creator

        metadata_dict.setdefault("/Producer", self.producer)
        writer.add_metadata(metadata_dict)
