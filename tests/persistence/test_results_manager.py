# ABOUTME: Tests for routing chunk outcomes to the record store, error files, and input file
# ABOUTME: Uses a fixed clock and tmp_path so the dated output path is predictable

import json
from datetime import date

import pytest

from prebid_monitor.core.models import (
    ExtractedPageData,
    FailureOutcome,
    NoSignalOutcome,
    SourceKind,
    SuccessOutcome,
    UrlSource,
)
from prebid_monitor.persistence.manager import ResultsManager

TODAY = date(2024, 6, 3)


def _success(url: str) -> SuccessOutcome:
    return SuccessOutcome(
        url=url, data=ExtractedPageData(url=url, scan_date=TODAY, detected_libraries=["googletag"])
    )


@pytest.fixture
def manager(tmp_path):
    return ResultsManager(tmp_path / "store", tmp_path / "errors", clock=lambda: TODAY)


class TestResultsManager:
    @pytest.mark.asyncio
    async def test_routes_every_outcome_kind(self, manager, tmp_path):
        outcomes = [
            _success("https://ok.com"),
            NoSignalOutcome(url="https://empty.com"),
            FailureOutcome(url="https://dns.com", error_code="ERR_NAME_NOT_RESOLVED"),
            FailureOutcome(url="https://crash.com", error_code="TARGET_CLOSED", message="Target closed"),
        ]

        records = await manager.persist(outcomes, [o.url for o in outcomes])

        assert [r.url for r in records] == ["https://ok.com"]
        errors = tmp_path / "errors"
        assert (errors / "no_prebid.txt").read_text(encoding="utf-8") == "https://empty.com\n"
        assert (errors / "navigation_errors.txt").read_text(encoding="utf-8") == "https://dns.com\n"
        assert (errors / "error_processing.txt").read_text(encoding="utf-8") == "https://crash.com\n"

        stored = json.loads((tmp_path / "store" / "Jun-2024" / "2024-06-03.json").read_text(encoding="utf-8"))
        assert [entry["url"] for entry in stored] == ["https://ok.com"]

    @pytest.mark.asyncio
    async def test_no_successes_writes_no_store_file(self, manager, tmp_path):
        await manager.persist([NoSignalOutcome(url="https://empty.com")], ["https://empty.com"])

        assert not (tmp_path / "store").exists()

    @pytest.mark.asyncio
    async def test_reconciles_local_text_source(self, manager, tmp_path):
        input_file = tmp_path / "input.txt"
        input_file.write_text("https://a.com\nhttps://b.com\nhttps://c.com\nhttps://d.com\n", encoding="utf-8")
        source = UrlSource(kind=SourceKind.LOCAL_FILE, location=str(input_file))
        outcomes = [
            NoSignalOutcome(url="https://a.com"),
            _success("https://b.com"),
            FailureOutcome(url="https://c.com", error_code="TIMEOUT"),
        ]

        await manager.persist(outcomes, ["https://a.com", "https://b.com", "https://c.com"], source)

        assert input_file.read_text(encoding="utf-8") == "https://a.com\nhttps://c.com\nhttps://d.com\n"

    @pytest.mark.asyncio
    async def test_repository_source_not_reconciled(self, manager, tmp_path):
        source = UrlSource(kind=SourceKind.REPOSITORY, location="https://github.com/acme/sites")

        records = await manager.persist([_success("https://a.com")], ["https://a.com"], source)

        assert len(records) == 1
        assert not list(tmp_path.glob("*.txt"))

    @pytest.mark.asyncio
    async def test_empty_outcomes(self, manager, tmp_path):
        assert await manager.persist([], []) == []
        assert not (tmp_path / "errors").exists()
