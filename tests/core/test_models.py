# ABOUTME: Tests for the domain models shared across the pipeline
# ABOUTME: Covers record serialization, outcome discrimination, and source helpers

from datetime import date
from pathlib import Path

import pytest
from pydantic import TypeAdapter, ValidationError

from prebid_monitor.core.models import (
    ExtractedPageData,
    FailureOutcome,
    InspectionResult,
    IntegrationInstance,
    NoSignalOutcome,
    ScanBatch,
    ScanRequest,
    ScanSummary,
    SourceKind,
    SuccessOutcome,
    TaskOutcome,
    UrlSource,
)


class TestExtractedPageData:
    def test_to_record_uses_camel_case_and_iso_date(self):
        data = ExtractedPageData(
            url="https://a.com",
            scan_date=date(2024, 6, 3),
            detected_libraries=["googletag"],
            integration_instances=[IntegrationInstance(instance_name="pbjs", version="8.1.0", module_names=["core"])],
        )

        assert data.to_record() == {
            "url": "https://a.com",
            "scanDate": "2024-06-03",
            "detectedLibraries": ["googletag"],
            "integrationInstances": [{"instanceName": "pbjs", "version": "8.1.0", "moduleNames": ["core"]}],
        }

    def test_record_round_trips_through_aliases(self):
        record = {
            "url": "https://a.com",
            "scanDate": "2024-06-03",
            "detectedLibraries": [],
            "integrationInstances": [{"instanceName": "pbjs", "version": "9.0.0", "moduleNames": []}],
        }

        data = ExtractedPageData.model_validate(record)

        assert data.integration_instances[0].instance_name == "pbjs"
        assert data.scan_date == date(2024, 6, 3)


class TestInspectionResult:
    def test_has_signal(self):
        assert not InspectionResult().has_signal
        assert InspectionResult(detected_libraries=["apstag"]).has_signal
        assert InspectionResult(
            integration_instances=[IntegrationInstance(instance_name="pbjs", version="8.0.0")]
        ).has_signal

    def test_libraries_deduplicated(self):
        result = InspectionResult(detected_libraries=["googletag", "apstag", "googletag"])
        assert result.detected_libraries == ["googletag", "apstag"]


class TestTaskOutcome:
    def test_discriminated_by_kind(self):
        adapter = TypeAdapter(TaskOutcome)

        failure = adapter.validate_python({"kind": "failure", "url": "https://a.com", "error_code": "TIMEOUT"})
        no_signal = adapter.validate_python({"kind": "no_signal", "url": "https://b.com"})

        assert isinstance(failure, FailureOutcome)
        assert isinstance(no_signal, NoSignalOutcome)

    def test_outcomes_are_immutable(self):
        outcome = NoSignalOutcome(url="https://a.com")
        with pytest.raises(ValidationError):
            outcome.url = "https://b.com"  # type: ignore[misc]

    def test_success_carries_data(self):
        data = ExtractedPageData(url="https://a.com", scan_date=date(2024, 1, 1), detected_libraries=["ats"])
        outcome = SuccessOutcome(url="https://a.com", data=data)
        assert outcome.kind == "success"


class TestUrlSource:
    @pytest.mark.parametrize(
        "kind,location,expected",
        [
            (SourceKind.LOCAL_FILE, "input.txt", True),
            (SourceKind.LOCAL_FILE, "lists/INPUT.TXT", True),
            (SourceKind.LOCAL_FILE, "input.csv", False),
            (SourceKind.LOCAL_FILE, "input.json", False),
            (SourceKind.REPOSITORY, "https://github.com/acme/sites/blob/main/input.txt", False),
        ],
    )
    def test_is_line_file(self, kind, location, expected):
        assert UrlSource(kind=kind, location=location).is_line_file is expected


class TestScanBatchAndRequest:
    def test_batch_length(self):
        assert len(ScanBatch(urls=("https://a.com", "https://b.com"))) == 2

    def test_request_defaults(self):
        request = ScanRequest()
        assert request.max_parallelism == 5
        assert request.visit_timeout_ms == 60000
        assert request.output_dir == Path("store")
        assert request.error_dir == Path("errors")

    def test_request_rejects_zero_parallelism(self):
        with pytest.raises(ValidationError):
            ScanRequest(max_parallelism=0)

    def test_request_accepts_non_positive_chunk_size(self):
        assert ScanRequest(chunk_size=-1).chunk_size == -1

    def test_summary_completed(self):
        assert ScanSummary().completed
        assert not ScanSummary(halted_reason="no_urls").completed
