from __future__ import annotations

import asyncio
import io
from unittest.mock import AsyncMock, MagicMock
from zipfile import ZipFile

import pytest
from pypdf import PdfReader

from split_planner import SplitSession
from split_planner.exceptions import (
    EmptyPlanError,
    ExtractError,
    InvalidChunkSizeError,
    LoadError,
    NoDocumentError,
    NoResultsError,
    OracleError,
    OutOfBoundsError,
    PlanLockedError,
    SuggestionFailedError,
    SuggestionInProgressError,
)
from split_planner.orchestrator import ProcessState
from split_planner.types import SplitMode


@pytest.fixture()
def oracle() -> AsyncMock:
    return AsyncMock()


@pytest.fixture()
def session(fast_settings, oracle) -> SplitSession:
    return SplitSession(oracle=oracle, settings=fast_settings)


@pytest.fixture()
def loaded(session: SplitSession, pdf_bytes: bytes) -> SplitSession:
    session.load_document(pdf_bytes, name="report.pdf")
    return session


def _clear_ranges(session: SplitSession) -> None:
    for item in session.plan:
        session.remove_range(item.id)


class TestDocumentLifecycle:
    def test_commands_require_a_document(self, session: SplitSession) -> None:
        assert not session.is_loaded
        assert session.page_count == 0
        assert session.pages == ()
        assert session.process_status == ()
        assert session.state is ProcessState.IDLE
        assert not session.can_split

        with pytest.raises(NoDocumentError):
            session.add_range(1, 2)
        with pytest.raises(NoDocumentError):
            session.set_mode(SplitMode.FIXED)
        with pytest.raises(NoDocumentError):
            session.rotate_page(0)
        with pytest.raises(NoDocumentError):
            session.build_plan()
        with pytest.raises(NoDocumentError):
            asyncio.run(session.start_split())

    def test_load_document(self, loaded: SplitSession) -> None:
        assert loaded.page_count == 10
        assert loaded.document_name == "report.pdf"
        assert loaded.mode is SplitMode.RANGES
        assert [page.number for page in loaded.pages] == list(range(1, 11))
        assert len(loaded.plan) == 1
        assert (loaded.plan[0].start, loaded.plan[0].end) == (1, 10)
        assert loaded.plan[0].label == "Full Document"
        assert not loaded.history_status.can_undo
        assert loaded.can_split

    def test_load_invalid_document(self, session: SplitSession) -> None:
        with pytest.raises(LoadError):
            session.load_document(b"nonsense", name="bad.pdf")
        assert not session.is_loaded

    def test_reload_starts_a_fresh_plan(self, loaded: SplitSession, make_pdf_bytes) -> None:
        loaded.add_range(1, 2)
        loaded.rotate_page(0)
        loaded.set_mode(SplitMode.FIXED)

        loaded.load_document(make_pdf_bytes(4), name="other.pdf")

        assert loaded.page_count == 4
        assert len(loaded.plan) == 1
        assert loaded.mode is SplitMode.RANGES
        assert all(page.rotation == 0 for page in loaded.pages)
        assert not loaded.history_status.can_undo

    def test_reset_forgets_document(self, loaded: SplitSession) -> None:
        asyncio.run(loaded.start_split())
        handle = loaded.results[0].handle

        loaded.reset()

        assert handle.released
        assert not loaded.is_loaded
        assert loaded.plan == ()
        with pytest.raises(NoDocumentError):
            loaded.add_range(1, 2)

    def test_pages_query_returns_copies(self, loaded: SplitSession) -> None:
        loaded.pages[0].rotation = 90
        assert loaded.pages[0].rotation == 0


class TestPlanCommands:
    def test_range_editing_with_undo_redo(self, loaded: SplitSession) -> None:
        _clear_ranges(loaded)
        loaded.add_range(1, 4, "Intro")
        rest = loaded.append_remaining_range()

        assert (rest.start, rest.end) == (5, 10)

        loaded.undo()
        assert [item.label for item in loaded.plan] == ["Intro"]
        loaded.redo()
        assert [item.label for item in loaded.plan] == ["Intro", "Part 2"]

        loaded.relabel(rest.id, "Rest")
        assert loaded.plan[-1].label == "Rest"

    def test_invalid_range_leaves_plan_unchanged(self, loaded: SplitSession) -> None:
        before = loaded.plan
        with pytest.raises(OutOfBoundsError):
            loaded.add_range(5, 11)
        assert loaded.plan == before

    def test_rotate_page(self, loaded: SplitSession) -> None:
        assert loaded.rotate_page(2) == 90
        assert loaded.rotate_page(2, 270) == 0
        assert loaded.rotate_page(2, -90) == 270
        with pytest.raises(OutOfBoundsError):
            loaded.rotate_page(10)

    def test_chunk_size_must_be_positive(self, loaded: SplitSession) -> None:
        with pytest.raises(InvalidChunkSizeError):
            loaded.set_fixed_chunk_size(0)
        assert loaded.chunk_size == 1

    def test_can_split_follows_plan(self, loaded: SplitSession) -> None:
        _clear_ranges(loaded)
        assert not loaded.can_split

        loaded.set_mode(SplitMode.EXTRACT)
        loaded.set_extract_expression("42")
        assert not loaded.can_split

        loaded.set_extract_expression("2-3")
        assert loaded.can_split


class TestSplitting:
    def test_ranges_split_end_to_end(self, loaded: SplitSession) -> None:
        _clear_ranges(loaded)
        loaded.add_range(1, 5, "Intro")
        loaded.add_range(3, 8)

        state = asyncio.run(loaded.start_split())

        assert state is ProcessState.DONE
        assert [r.name for r in loaded.results] == [
            "report_part_1_Intro.pdf",
            "report_part_2_Part_2.pdf",
        ]
        assert [r.page_count for r in loaded.results] == [5, 6]
        second = PdfReader(io.BytesIO(loaded.results[1].handle.read()))
        assert [int(float(page.mediabox.width)) for page in second.pages] == [102, 103, 104, 105, 106, 107]
        assert all(item.progress == 100 for item in loaded.process_status)

    def test_fixed_chunks(self, loaded: SplitSession) -> None:
        loaded.set_mode(SplitMode.FIXED)
        loaded.set_fixed_chunk_size(3)

        asyncio.run(loaded.start_split())

        assert [r.page_count for r in loaded.results] == [3, 3, 3, 1]
        assert loaded.results[-1].name == "report_part_4.pdf"

    def test_extraction(self, loaded: SplitSession) -> None:
        loaded.set_mode(SplitMode.EXTRACT)
        loaded.set_extract_expression("1, 3, 5-8, 5-8, 99")

        asyncio.run(loaded.start_split())

        assert len(loaded.results) == 1
        assert loaded.results[0].name == "report_extracted.pdf"
        assert loaded.results[0].page_count == 6

    def test_rotation_reaches_output(self, loaded: SplitSession) -> None:
        loaded.rotate_page(0, 90)
        loaded.rotate_page(1, 180)

        asyncio.run(loaded.start_split())

        reader = PdfReader(io.BytesIO(loaded.results[0].handle.read()))
        assert [page.rotation for page in reader.pages[:3]] == [90, 180, 0]

    def test_empty_plan_never_invokes_realizer(self, fast_settings, oracle, pdf_bytes) -> None:
        realizer = AsyncMock()
        session = SplitSession(oracle=oracle, settings=fast_settings, realizer_factory=lambda data: realizer)
        session.load_document(pdf_bytes)
        _clear_ranges(session)

        with pytest.raises(EmptyPlanError):
            asyncio.run(session.start_split())

        realizer.realize.assert_not_called()
        assert session.state is ProcessState.IDLE

    def test_realization_failure(self, fast_settings, oracle) -> None:
        codec = MagicMock()
        codec.load_page_count.return_value = 3
        codec.extract_and_rotate.side_effect = ExtractError("cannot write")
        session = SplitSession(codec=codec, oracle=oracle, settings=fast_settings)
        session.load_document(b"%PDF", name="x.pdf")

        state = asyncio.run(session.start_split())

        assert state is ProcessState.FAILED
        assert session.error == "cannot write"
        assert session.results == []
        with pytest.raises(NoResultsError):
            session.pack_results()

    def test_plan_is_locked_while_running(self, fast_settings, oracle, pdf_bytes) -> None:
        async def scenario():
            release = asyncio.Event()

            async def realize(specs):
                await release.wait()
                return []

            realizer = AsyncMock()
            realizer.realize.side_effect = realize
            session = SplitSession(oracle=oracle, settings=fast_settings, realizer_factory=lambda data: realizer)
            session.load_document(pdf_bytes)
            frozen = session.plan

            split = asyncio.ensure_future(session.start_split())
            while not session.is_running:
                await asyncio.sleep(0)

            for command in (
                lambda: session.add_range(1, 2),
                lambda: session.remove_range(frozen[0].id),
                lambda: session.rotate_page(0),
                lambda: session.set_mode(SplitMode.FIXED),
                lambda: session.undo(),
                lambda: session.load_document(pdf_bytes),
                lambda: session.reset(),
            ):
                with pytest.raises(PlanLockedError):
                    command()
            with pytest.raises(PlanLockedError):
                await session.start_split()
            with pytest.raises(PlanLockedError):
                await session.request_suggestions("anything")
            assert not session.can_split

            release.set()
            assert await split is ProcessState.DONE
            assert session.plan == frozen
            session.add_range(1, 2)

        asyncio.run(scenario())

    def test_pack_results(self, loaded: SplitSession) -> None:
        with pytest.raises(NoResultsError):
            loaded.pack_results()

        loaded.set_mode(SplitMode.FIXED)
        loaded.set_fixed_chunk_size(5)
        asyncio.run(loaded.start_split())

        with ZipFile(io.BytesIO(loaded.pack_results())) as bundle:
            assert bundle.namelist() == ["report_part_1.pdf", "report_part_2.pdf"]
            assert len(PdfReader(io.BytesIO(bundle.read("report_part_2.pdf"))).pages) == 5

    def test_summarize_results(self, loaded: SplitSession) -> None:
        with pytest.raises(NoResultsError):
            loaded.summarize_results()

        loaded.set_mode(SplitMode.FIXED)
        loaded.set_fixed_chunk_size(4)
        asyncio.run(loaded.start_split())

        summary = loaded.summarize_results()
        assert [entry["page_count"] for entry in summary] == [4, 4, 2]
        assert [entry["share"] for entry in summary] == [40.0, 40.0, 20.0]
        assert all(entry["byte_size"] > 0 for entry in summary)

    def test_new_split_releases_previous_results(self, loaded: SplitSession) -> None:
        asyncio.run(loaded.start_split())
        previous = loaded.results[0].handle

        asyncio.run(loaded.start_split())

        assert previous.released
        assert not loaded.results[0].handle.released


class TestSuggestions:
    @pytest.mark.asyncio
    async def test_suggestions_replace_plan_and_switch_mode(self, loaded: SplitSession, oracle) -> None:
        oracle.suggest.return_value = [
            {"start": 1, "end": 3, "label": "Intro"},
            {"start": 4, "end": 10, "label": "Body"},
        ]
        loaded.set_mode(SplitMode.AI_SMART)

        ranges = await loaded.request_suggestions("Split after the intro")

        assert loaded.mode is SplitMode.RANGES
        assert [item.label for item in loaded.plan] == ["Intro", "Body"]
        assert list(loaded.plan) == ranges
        oracle.suggest.assert_awaited_once_with("Split after the intro", 10)

    @pytest.mark.asyncio
    async def test_failed_suggestion_keeps_plan_and_mode(self, loaded: SplitSession, oracle) -> None:
        oracle.suggest.side_effect = OracleError("quota")
        loaded.set_mode(SplitMode.AI_SMART)
        before = loaded.plan

        with pytest.raises(SuggestionFailedError):
            await loaded.request_suggestions("anything")

        assert loaded.plan == before
        assert loaded.mode is SplitMode.AI_SMART
        assert not loaded.history_status.can_undo

    @pytest.mark.asyncio
    async def test_split_waits_for_pending_suggestions(self, loaded: SplitSession, oracle) -> None:
        release = asyncio.Event()

        async def slow_suggest(prompt_text, page_count):
            await release.wait()
            return [{"start": 1, "end": 2, "label": "A"}]

        oracle.suggest.side_effect = slow_suggest
        pending = asyncio.ensure_future(loaded.request_suggestions("anything"))
        await asyncio.sleep(0)

        assert loaded.loading_suggestions
        assert not loaded.can_split
        with pytest.raises(SuggestionInProgressError):
            await loaded.start_split()
        with pytest.raises(SuggestionInProgressError):
            await loaded.request_suggestions("again")

        release.set()
        await pending
        assert [item.label for item in loaded.plan] == ["A"]

    @pytest.mark.asyncio
    async def test_plan_is_locked_while_suggestions_are_pending(self, loaded: SplitSession, oracle) -> None:
        release = asyncio.Event()

        async def slow_suggest(prompt_text, page_count):
            await release.wait()
            return [{"start": 1, "end": 2, "label": "Late"}]

        oracle.suggest.side_effect = slow_suggest
        original = loaded.plan
        pending = asyncio.ensure_future(loaded.request_suggestions("anything"))
        await asyncio.sleep(0)

        for command in (
            lambda: loaded.add_range(3, 4, "Mine"),
            lambda: loaded.remove_range(original[0].id),
            lambda: loaded.relabel(original[0].id, "Renamed"),
            lambda: loaded.undo(),
            lambda: loaded.rotate_page(0),
            lambda: loaded.set_mode(SplitMode.FIXED),
            lambda: loaded.set_fixed_chunk_size(2),
        ):
            with pytest.raises(SuggestionInProgressError):
                command()
        assert loaded.plan == original

        release.set()
        await pending
        assert [item.label for item in loaded.plan] == ["Late"]
        loaded.add_range(3, 4, "Mine")
        assert [item.label for item in loaded.plan] == ["Late", "Mine"]

    @pytest.mark.asyncio
    async def test_reset_and_reload_wait_for_pending_suggestions(self, loaded: SplitSession, oracle, pdf_bytes) -> None:
        release = asyncio.Event()

        async def slow_suggest(prompt_text, page_count):
            await release.wait()
            return [{"start": 1, "end": 2, "label": "Late"}]

        oracle.suggest.side_effect = slow_suggest
        pending = asyncio.ensure_future(loaded.request_suggestions("anything"))
        await asyncio.sleep(0)

        with pytest.raises(SuggestionInProgressError):
            loaded.reset()
        with pytest.raises(SuggestionInProgressError):
            loaded.load_document(pdf_bytes, name="other.pdf")
        assert loaded.is_loaded
        assert loaded.document_name == "report.pdf"

        release.set()
        await pending
        loaded.reset()
        assert not loaded.is_loaded
        assert loaded.plan == ()
