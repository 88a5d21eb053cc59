from __future__ import annotations

import pytest

from split_planner.exceptions import InvalidChunkSizeError
from split_planner.planner import (
    EMPTY_PLAN,
    base_name_for,
    build_output_name,
    build_split_plan,
    is_empty_plan,
    parse_extract_expression,
    plan_explicit_ranges,
    plan_extraction,
    plan_fixed_chunks,
    sanitize_label,
)
from split_planner.types import RANGE_COLORS, PageSet, Range, SplitMode


def _range(start: int, end: int, label: str = "Part") -> Range:
    return Range(start=start, end=end, label=label, color=RANGE_COLORS[0])


@pytest.fixture()
def pages() -> PageSet:
    return PageSet(10)


def test_fixed_chunks_cover_every_page(pages: PageSet) -> None:
    specs = plan_fixed_chunks(pages, 3, "report")

    assert [spec.page_count for spec in specs] == [3, 3, 3, 1]
    assert specs[-1].page_indices == (9,)
    assert [spec.name for spec in specs] == [f"report_part_{n}.pdf" for n in range(1, 5)]

    covered = [index for spec in specs for index in spec.page_indices]
    assert covered == list(range(10))


def test_fixed_chunk_larger_than_document(pages: PageSet) -> None:
    specs = plan_fixed_chunks(pages, 50)
    assert len(specs) == 1
    assert specs[0].page_count == 10


@pytest.mark.parametrize("size", [0, -2])
def test_fixed_chunk_size_must_be_positive(pages: PageSet, size: int) -> None:
    with pytest.raises(InvalidChunkSizeError):
        plan_fixed_chunks(pages, size)


def test_overlapping_ranges_produce_independent_outputs(pages: PageSet) -> None:
    specs = plan_explicit_ranges(pages, [_range(1, 5, "Intro"), _range(3, 8, "Body")], "doc")

    assert [spec.page_count for spec in specs] == [5, 6]
    assert specs[0].page_indices == (0, 1, 2, 3, 4)
    assert specs[1].page_indices == (2, 3, 4, 5, 6, 7)
    assert [spec.name for spec in specs] == ["doc_part_1_Intro.pdf", "doc_part_2_Body.pdf"]


def test_no_ranges_is_empty_plan(pages: PageSet) -> None:
    result = plan_explicit_ranges(pages, [])

    assert result is EMPTY_PLAN
    assert is_empty_plan(result)
    assert not result


def test_extract_expression_is_sorted_and_deduplicated() -> None:
    assert parse_extract_expression("1, 3, 5-8, 5-8, 99", 10) == [0, 2, 4, 5, 6, 7]


@pytest.mark.parametrize(
    "expression, expected",
    [
        ("", []),
        ("abc, 2", [1]),
        ("5-3", []),
        ("0", []),
        ("8-15", [7, 8, 9]),
        ("0-2", [0, 1]),
        ("  4 ,, 4 - 5 ", [3, 4]),
        ("1-2-3, 6", [5]),
    ],
)
def test_extract_expression_skips_invalid_tokens(expression: str, expected: list) -> None:
    assert parse_extract_expression(expression, 10) == expected


def test_extraction_produces_single_output(pages: PageSet) -> None:
    specs = plan_extraction(pages, "2, 4", "my_doc")

    assert len(specs) == 1
    assert specs[0].name == "my_doc_extracted.pdf"
    assert specs[0].page_indices == (1, 3)


def test_extraction_without_pages_is_empty_plan(pages: PageSet) -> None:
    assert plan_extraction(pages, "99, nope") is EMPTY_PLAN


def test_rotation_is_captured_per_page(pages: PageSet) -> None:
    pages.rotate(1, 90)
    pages.rotate(1, 90)
    specs = plan_explicit_ranges(pages, [_range(1, 3)])

    pages.rotate(1, 90)

    assert specs[0].rotation_for(1) == 180
    assert specs[0].rotation_for(0) == 0


def test_build_split_plan_dispatches_on_mode(pages: PageSet) -> None:
    ranges = [_range(1, 2)]

    assert len(build_split_plan(pages, SplitMode.RANGES, ranges=ranges)) == 1
    assert len(build_split_plan(pages, SplitMode.AI_SMART, ranges=ranges)) == 1
    assert len(build_split_plan(pages, SplitMode.FIXED, chunk_size=5)) == 2
    assert len(build_split_plan(pages, "extract", expression="1-3")) == 1
    assert build_split_plan(pages, SplitMode.RANGES) is EMPTY_PLAN


def test_build_split_plan_is_pure(pages: PageSet) -> None:
    ranges = [_range(1, 5), _range(6, 10)]
    first = build_split_plan(pages, SplitMode.RANGES, ranges=ranges, base_name="x")
    second = build_split_plan(pages, SplitMode.RANGES, ranges=ranges, base_name="x")
    assert first == second


@pytest.mark.parametrize(
    "label, expected",
    [
        ("Chapter 1: Intro", "Chapter_1_Intro"),
        ("  spaced  ", "spaced"),
        ("***", ""),
        ("Éclair", "clair"),
    ],
)
def test_sanitize_label(label: str, expected: str) -> None:
    assert sanitize_label(label) == expected


def test_output_names() -> None:
    assert build_output_name("doc", 2, "Part B") == "doc_part_2_Part_B.pdf"
    assert build_output_name("doc", 3, "!!!") == "doc_part_3.pdf"
    assert build_output_name("doc", 4) == "doc_part_4.pdf"


@pytest.mark.parametrize(
    "name, expected",
    [
        ("report.pdf", "report"),
        ("Annual Report.PDF", "Annual_Report"),
        ("/tmp/files/scan.pdf", "scan"),
        ("notes", "notes"),
        (None, "document"),
        ("   ", "document"),
    ],
)
def test_base_name_for(name, expected) -> None:
    assert base_name_for(name) == expected
