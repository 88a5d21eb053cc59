from __future__ import annotations

import io
from pathlib import Path
from typing import Callable, Optional
import sys

import pytest
from pypdf import PdfWriter

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from split_planner.config import Settings  # noqa: E402


def build_pdf_bytes(page_count: int, title: Optional[str] = "Sample") -> bytes:
    """Build a PDF whose page ``i`` is ``100 + i`` points wide."""

    writer = PdfWriter()
    for index in range(page_count):
        writer.add_blank_page(width=100 + index, height=200)
    if title is not None:
        writer.add_metadata({"/Producer": "split-planner-tests", "/Title": title})
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


@pytest.fixture()
def pdf_bytes() -> bytes:
    return build_pdf_bytes(10)


@pytest.fixture()
def make_pdf_bytes() -> Callable[..., bytes]:
    return build_pdf_bytes


@pytest.fixture()
def sample_pdf(tmp_path: Path) -> Path:
    pdf_path = tmp_path / "sample.pdf"
    pdf_path.write_bytes(build_pdf_bytes(5))
    return pdf_path


@pytest.fixture()
def pdf_factory(tmp_path: Path) -> Callable[..., Path]:
    def _create(filename: str, page_count: int = 1, title: Optional[str] = None) -> Path:
        path = tmp_path / filename
        path.write_bytes(build_pdf_bytes(page_count, title=title))
        return path

    return _create


@pytest.fixture()
def fast_settings() -> Settings:
    return Settings(gemini_api_key="test-key", tick_interval=0.0)
