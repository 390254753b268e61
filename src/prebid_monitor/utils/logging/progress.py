# ABOUTME: Chunk-level progress display using Rich's built-in capabilities
# ABOUTME: Shows a spinner with a running count of scanned URLs during a run

from typing import Any

from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn


class ScanProgressTracker:
    """Advance a Rich task as chunks finish."""

    def __init__(self, progress: Progress, task_id: Any):
        self.progress = progress
        self.task_id = task_id

    def start(self, total_urls: int) -> None:
        self.progress.update(self.task_id, total=total_urls)

    def chunk_done(self, chunk: int, total_chunks: int, scanned: int) -> None:
        self.progress.update(
            self.task_id,
            advance=scanned,
            description=f"🔎 Scanned chunk {chunk}/{total_chunks}",
        )


def create_scan_progress(
    console: Console, initial_description: str = "🔎 Loading URLs..."
) -> tuple[Progress, ScanProgressTracker]:
    """Create a progress display for a scan run.

    Args:
        console: Rich console instance
        initial_description: Initial progress description

    Returns:
        Tuple of (progress, tracker)
    """
    progress = Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        console=console,
        transient=True,
    )

    task_id = progress.add_task(initial_description, total=None)
    return progress, ScanProgressTracker(progress, task_id)
