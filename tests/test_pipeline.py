"""Tests for the single-text pipeline and the service boundary."""

from __future__ import annotations

import asyncio

import pytest

from isnad_engine.config import EngineSettings
from isnad_engine.errors import ErrorKind, InputValidationError, RetryPolicy
from isnad_engine.jobs.orchestrator import BulkJobOrchestrator
from isnad_engine.jobs.store import InMemoryJobStore
from isnad_engine.models import NarratorProfile, SearchRecord
from isnad_engine.narrators.resolver import NarratorResolver
from isnad_engine.pipeline import HadithAnalyzer
from isnad_engine.service import HadithService

ISNAD_TEXT = "حدثنا أبو بكر بن أبي شيبة حدثنا وكيع عن سفيان"


class FakeHistory:
    def __init__(self, records=None, error: Exception | None = None) -> None:
        self.records = records or []
        self.error = error
        self.appended: list[tuple] = []

    def recent(self, limit: int = 1000, user_id=None):
        if self.error is not None:
            raise self.error
        return self.records[:limit]

    def append(self, query: str, result_found: bool, user_id=None):
        self.appended.append((query, result_found, user_id))
        record = SearchRecord(id=str(len(self.appended)), text=query, result_found=result_found, user_id=user_id)
        self.records.insert(0, record)
        return record


class FakeDirectory:
    def resolve(self, name: str):
        if name == "سفيان":
            return NarratorProfile(id=3, name_arabic="سفيان الثوري", credibility="trustworthy", matched_name=name)
        return None


def _service(analyzer: HadithAnalyzer, history=None) -> HadithService:
    orchestrator = BulkJobOrchestrator(analyzer, InMemoryJobStore(), throttle_seconds=0)
    return HadithService(analyzer, orchestrator, history=history)


def test_analyze_text_scenario() -> None:
    analysis = HadithAnalyzer().analyze_text(ISNAD_TEXT)

    assert analysis.original_text == ISNAD_TEXT
    assert analysis.normalized_text == "حدثنا ابو بكر بن ابي شيبه حدثنا وكيع عن سفيان"
    assert analysis.narrator_chain.confidence == 100
    assert analysis.structural_analysis.structure_score == 50
    assert analysis.confidence == 70
    assert analysis.linguistic_features.language == "arabic"
    assert analysis.narrators == []
    assert analysis.similar_texts == []


def test_analyze_empty_text_is_zero() -> None:
    analysis = HadithAnalyzer().analyze_text("")
    assert analysis.candidates == []
    assert analysis.confidence == 0


def test_analyze_rejects_blank_text() -> None:
    with pytest.raises(InputValidationError):
        asyncio.run(HadithAnalyzer().analyze("   "))


def test_analyze_resolves_narrators_and_similar_texts() -> None:
    history = FakeHistory(
        [
            SearchRecord(id="10", text=ISNAD_TEXT),
            SearchRecord(id="11", text="كلام اخر تماما"),
        ]
    )
    analyzer = HadithAnalyzer(
        resolver=NarratorResolver(FakeDirectory(), retry_policy=RetryPolicy(base_delay_seconds=0)),
        history=history,
    )

    analysis = asyncio.run(analyzer.analyze(ISNAD_TEXT))

    assert [narrator.id for narrator in analysis.narrators] == [3]
    assert [match.id for match in analysis.similar_texts] == ["10"]
    assert analysis.similar_texts[0].similarity == 1.0


def test_history_failure_does_not_fail_analysis() -> None:
    analyzer = HadithAnalyzer(history=FakeHistory(error=RuntimeError("database is gone")))
    analysis = asyncio.run(analyzer.analyze(ISNAD_TEXT))
    assert analysis.similar_texts == []
    assert analysis.confidence == 70


def test_find_similar_without_history() -> None:
    assert asyncio.run(HadithAnalyzer().find_similar("قال رسول الله")) == []


@pytest.mark.parametrize(("threshold", "top_k"), [(5.0, 0), (-0.1, 10), (0.7, 0)])
def test_find_similar_rejects_bad_parameters_without_history(threshold: float, top_k: int) -> None:
    with pytest.raises(InputValidationError):
        asyncio.run(HadithAnalyzer().find_similar("قال رسول الله", threshold=threshold, top_k=top_k))


def test_find_similar_parameter_errors_match_with_and_without_history() -> None:
    without_history = _service(HadithAnalyzer())
    with_history = _service(HadithAnalyzer(history=FakeHistory()), history=FakeHistory())

    for service in (without_history, with_history):
        result = asyncio.run(service.find_similar("قال رسول الله", threshold=5.0, top_k=0))
        assert result.success is False
        assert result.error.kind == ErrorKind.VALIDATION


def test_service_analyze_records_search() -> None:
    history = FakeHistory()
    service = _service(HadithAnalyzer(history=history), history=history)

    first = asyncio.run(service.analyze(ISNAD_TEXT, record_search=True, user_id="u1"))
    second = asyncio.run(service.analyze(ISNAD_TEXT))

    assert first.success and second.success
    assert history.appended == [(ISNAD_TEXT, False, "u1")]
    assert first.data.similar_texts == []
    assert [match.similarity for match in second.data.similar_texts] == [1.0]


def test_service_reports_validation_failure() -> None:
    service = _service(HadithAnalyzer())
    result = asyncio.run(service.analyze(""))

    assert result.success is False
    assert result.data is None
    assert result.error.kind == ErrorKind.VALIDATION
    assert result.error.retryable is False
    assert result.error.user_message


def test_service_wraps_unexpected_errors() -> None:
    class BrokenAnalyzer(HadithAnalyzer):
        async def analyze(self, text, *, include_similar=True):
            raise ZeroDivisionError("bad math")

    result = asyncio.run(_service(BrokenAnalyzer()).analyze(ISNAD_TEXT))

    assert result.success is False
    assert result.error.kind == ErrorKind.PROCESSING
    assert "bad math" in result.error.message
    assert "bad math" not in result.error.user_message


def test_service_bulk_flow() -> None:
    service = _service(HadithAnalyzer())

    async def scenario():
        submitted = await service.submit_bulk([ISNAD_TEXT, "قال رسول الله صلى الله عليه وسلم"])
        job_id = submitted.data["job_id"]
        await service.orchestrator.wait(job_id)
        progress = await service.get_progress(job_id)
        exported = await service.export_job(job_id, "csv")
        return progress, exported

    progress, exported = asyncio.run(scenario())

    assert progress.success
    assert progress.data.processed == 2
    assert exported.success
    assert exported.data.splitlines()[0].startswith("Text,Word Count")


def test_service_bulk_failures() -> None:
    service = _service(HadithAnalyzer())

    too_many = asyncio.run(service.submit_bulk(["حدثنا مالك"] * 101))
    missing = asyncio.run(service.get_progress("bulk-0-missing"))
    missing_export = asyncio.run(service.export_job("bulk-0-missing"))

    assert too_many.error.kind == ErrorKind.VALIDATION
    assert missing.error.kind == ErrorKind.NOT_FOUND
    assert missing_export.error.kind == ErrorKind.NOT_FOUND


def test_service_without_database() -> None:
    service = HadithService.from_settings(EngineSettings(skip_database=True))

    assert service.engine is None
    assert asyncio.run(service.search_narrators("سفيان")).data == []
    assert asyncio.run(service.recent_searches()).data == []
    assert asyncio.run(service.narrator_opinions(1)).error.kind == ErrorKind.NOT_FOUND
    assert asyncio.run(service.search_narrators(" ")).error.kind == ErrorKind.VALIDATION
    assert asyncio.run(service.toggle_bookmark(1, "u1")).error.kind == ErrorKind.NOT_FOUND
    service.close()


def test_service_bookmarks(tmp_path) -> None:
    """Toggle flips the bookmark; status reads it back for the same user."""
    service = HadithService.from_settings(EngineSettings(database_url=f"sqlite:///{tmp_path / 'service.db'}"))
    narrator = service.directory.add_narrator("سفيان الثوري", "trustworthy")

    async def scenario():
        added = await service.toggle_bookmark(narrator.id, "u1")
        status = await service.bookmark_status(narrator.id, "u1")
        other = await service.bookmark_status(narrator.id, "u2")
        removed = await service.toggle_bookmark(narrator.id, "u1")
        return added, status, other, removed

    added, status, other, removed = asyncio.run(scenario())
    service.close()

    assert added.data.is_bookmarked is True
    assert status.data.is_bookmarked is True
    assert other.data.is_bookmarked is False
    assert removed.data.is_bookmarked is False
    assert removed.data.user_id == "u1"


def test_service_bookmark_failures(tmp_path) -> None:
    service = HadithService.from_settings(EngineSettings(database_url=f"sqlite:///{tmp_path / 'service.db'}"))
    narrator = service.directory.add_narrator("سفيان الثوري", "trustworthy")

    anonymous = asyncio.run(service.toggle_bookmark(narrator.id, "  "))
    missing = asyncio.run(service.toggle_bookmark(9999, "u1"))
    missing_status = asyncio.run(service.bookmark_status(9999, "u1"))
    service.close()

    assert anonymous.error.kind == ErrorKind.VALIDATION
    assert anonymous.error.user_message == "Authentication required."
    assert missing.error.kind == ErrorKind.NOT_FOUND
    assert missing_status.error.kind == ErrorKind.NOT_FOUND
