# ABOUTME: Rich table builders for scan summaries, detected integrations, and logging status
# ABOUTME: Keeps CLI display formatting out of the pipeline code

from typing import Any

from rich.box import ROUNDED, SIMPLE
from rich.console import Console
from rich.table import Table

from prebid_monitor.core.models import ExtractedPageData, ScanSummary

HALT_MESSAGES = {
    "no_source": "❌ No input file or repository given",
    "no_urls": "⚠️ No URLs found in source",
    "empty_range": "⚠️ Range selected no URLs",
}


def create_key_value_table(
    title: str,
    data: dict[str, str],
    title_style: str = "bold cyan",
    key_style: str = "bold blue",
    value_style: str = "green",
    box_style=ROUNDED,
) -> Table:
    """Create a two-column key-value table.

    Args:
        title: Table title with emoji/styling
        data: Dictionary of key-value pairs to display
        title_style: Style for the table title
        key_style: Style for the key column
        value_style: Style for the value column
        box_style: Border style for the table

    Returns:
        Formatted Rich table ready for printing
    """
    table = Table(
        title=f"[{title_style}]{title}[/{title_style}]",
        box=box_style,
        show_header=True,
        header_style="bold magenta",
        border_style="cyan",
        title_justify="left",
        expand=False,
    )

    table.add_column("Field", style=key_style, width=None, no_wrap=False)
    table.add_column("Value", style=value_style, width=None, no_wrap=False)

    for key, value in data.items():
        table.add_row(key, str(value))

    return table


def create_multi_column_table(
    title: str,
    columns: list[tuple[str, str]],
    rows: list[list[str]],
    title_style: str = "bold cyan",
    header_style: str = "bold magenta",
    box_style=ROUNDED,
) -> Table:
    """Create a zebra-striped table with the given columns."""
    table = Table(
        title=f"[{title_style}]{title}[/{title_style}]",
        box=box_style,
        show_header=True,
        header_style=header_style,
        border_style="cyan",
        title_justify="left",
        row_styles=["", "dim"],
        expand=True,
    )

    for name, style in columns:
        table.add_column(name, style=style)

    for row in rows:
        table.add_row(*row)

    return table


def create_scan_summary_table(summary: ScanSummary) -> Table:
    """Create the end-of-run summary table.

    Args:
        summary: Totals returned by the pipeline

    Returns:
        Styled summary table
    """
    summary_data = {
        "📂 Source": summary.source or "None",
        "🔗 URLs Loaded": str(summary.total_urls),
        "🎯 URLs In Range": str(summary.scoped_urls),
        "📦 Chunks": str(summary.chunks_processed),
        "✅ Detected": str(summary.successes),
        "🚫 No Ad Tech": str(summary.no_signal),
        "❌ Failed": str(summary.failures),
    }
    if summary.halted_reason:
        summary_data["🛑 Stopped"] = HALT_MESSAGES.get(summary.halted_reason, summary.halted_reason)

    return create_key_value_table(
        title="🔎 Scan Summary",
        data=summary_data,
        title_style="bold green" if summary.completed else "bold yellow",
        key_style="cyan",
        value_style="white",
        box_style=SIMPLE,
    )


def create_detections_table(records: list[ExtractedPageData]) -> Table:
    """Create a table of detected libraries and Prebid.js versions per URL."""
    rows = [
        [
            record.url,
            ", ".join(record.detected_libraries) or "-",
            ", ".join(f"{i.instance_name}@{i.version}" for i in record.integration_instances) or "-",
            str(sum(len(i.module_names) for i in record.integration_instances)),
        ]
        for record in records
    ]
    return create_multi_column_table(
        title="📡 Detected Integrations",
        columns=[("URL", "cyan"), ("Libraries", "green"), ("Prebid.js", "magenta"), ("Modules", "white")],
        rows=rows,
    )


def create_logging_status_table(status: dict[str, Any]) -> Table:
    """Create a logging configuration status table.

    Args:
        status: Logging status dictionary

    Returns:
        Styled logging configuration table
    """
    logging_data = {
        "🔧 Mode": status["mode"].title(),
        "📁 Log Directory": status["log_directory"] or "N/A (production mode)",
        "🔇 Suppressed Libraries": ", ".join(status["third_party_suppressed"]),
    }

    if status["log_files"]["main"]:
        logging_data["📝 Main Log"] = status["log_files"]["main"]
    if status["log_files"]["json"]:
        logging_data["📊 JSON Log"] = status["log_files"]["json"]
    if status["log_files"]["errors"]:
        logging_data["🚨 Error Log"] = status["log_files"]["errors"]

    return create_key_value_table(
        title="🔍 Logging Configuration",
        data=logging_data,
        title_style="bold green",
        key_style="blue",
        value_style="white",
    )


def print_rich_table(console: Console, table: Table) -> None:
    """Print a rich table with consistent spacing and style.

    Args:
        console: Rich console instance
        table: Configured table to print
    """
    console.print()  # Add spacing before
    console.print(table)
    console.print()  # Add spacing after
