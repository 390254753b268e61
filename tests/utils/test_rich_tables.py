# ABOUTME: Tests for the Rich tables printed at the end of a scan
# ABOUTME: Renders tables into a recording console and checks the visible text

from datetime import date

from rich.console import Console

from prebid_monitor.core.models import ExtractedPageData, IntegrationInstance, ScanSummary
from prebid_monitor.utils.rich_tables import (
    create_detections_table,
    create_scan_summary_table,
    print_rich_table,
)


def _render(table) -> str:
    console = Console(record=True, width=200)
    print_rich_table(console, table)
    return console.export_text()


def test_summary_table_counts():
    summary = ScanSummary(source="input.txt", total_urls=10, scoped_urls=4, successes=2, no_signal=1, failures=1)

    text = _render(create_scan_summary_table(summary))

    assert "Scan Summary" in text
    assert "input.txt" in text
    assert "Stopped" not in text


def test_summary_table_shows_halt_reason():
    text = _render(create_scan_summary_table(ScanSummary(halted_reason="empty_range")))

    assert "Range selected no URLs" in text


def test_detections_table_lists_versions_and_module_counts():
    record = ExtractedPageData(
        url="https://news.example",
        scan_date=date(2024, 6, 3),
        detected_libraries=["apstag", "googletag"],
        integration_instances=[IntegrationInstance(instance_name="pbjs", version="8.1.0", module_names=["a", "b"])],
    )

    text = _render(create_detections_table([record]))

    assert "https://news.example" in text
    assert "apstag, googletag" in text
    assert "pbjs@8.1.0" in text
