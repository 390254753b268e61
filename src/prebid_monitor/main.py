# ABOUTME: Main CLI application entry point using asyncclick for native async support
# ABOUTME: Provides the scan command for Prebid.js and ad-tech detection plus logging status

from pathlib import Path

import asyncclick as click
from rich.console import Console
from rich.panel import Panel

from prebid_monitor.config import get_config
from prebid_monitor.core.errors import ExecutionSetupError
from prebid_monitor.core.models import ConcurrencyMode, ScanBatch, ScanRequest, SourceKind, UrlSource
from prebid_monitor.core.pipeline import ScanPipeline, ScanState
from prebid_monitor.execution.crawl4ai import crawl4ai_inspector_provider
from prebid_monitor.utils.logging import (
    LoggingMode,
    configure_logging,
    create_scan_progress,
    get_logger,
    get_logging_status,
)
from prebid_monitor.utils.rich_tables import (
    create_detections_table,
    create_logging_status_table,
    create_scan_summary_table,
    print_rich_table,
)

console = Console()

# Legacy mode names accepted alongside the current ones
MODE_ALIASES = {
    "sequential": ConcurrencyMode.SEQUENTIAL,
    "vanilla": ConcurrencyMode.SEQUENTIAL,
    "pooled": ConcurrencyMode.POOLED,
    "cluster": ConcurrencyMode.POOLED,
}


def _resolve_source(input_file: str | None, github_repo: str | None) -> UrlSource | None:
    """Pick the URL source; a repository wins over an input file."""
    logger = get_logger(__name__)
    if github_repo:
        if input_file:
            logger.warning(
                "Both GitHub repository and input file given, using the repository",
                github_repo=github_repo,
                input_file=input_file,
            )
        return UrlSource(kind=SourceKind.REPOSITORY, location=github_repo)

    location = input_file or str(get_config().default_input_file)
    if not location:
        return None
    return UrlSource(kind=SourceKind.LOCAL_FILE, location=location)


@click.command()
@click.argument("input_file", required=False)
@click.option("--github-repo", help="GitHub repository or /blob/ file URL to load URLs from")
@click.option("--num-urls", type=click.IntRange(min=1), help="Maximum URLs to load from a GitHub repository")
@click.option(
    "--mode",
    type=click.Choice(sorted(MODE_ALIASES), case_sensitive=False),
    help="Visit URLs one at a time (sequential) or with a worker pool (pooled)",
)
@click.option("--concurrency", type=click.IntRange(min=1), help="Number of workers in pooled mode")
@click.option("--timeout", "timeout_ms", type=click.IntRange(min=1), help="Per-page navigation timeout in milliseconds")
@click.option("--headless/--no-headless", default=None, help="Run the browser without a window")
@click.option("--output-dir", type=click.Path(file_okay=False, path_type=Path), help="Root of the dated result store")
@click.option("--error-dir", type=click.Path(file_okay=False, path_type=Path), help="Directory for error URL lists")
@click.option("--range", "range_spec", help="1-based inclusive URL range, e.g. 10-50, 10- or -50")
@click.option("--chunk-size", type=int, help="Process URLs in chunks of this size (0 or less disables chunking)")
@click.option("--show-results", is_flag=True, help="Print a table of detected integrations")
@click.pass_context
async def scan(
    ctx,
    input_file: str | None,
    github_repo: str | None,
    num_urls: int | None,
    mode: str | None,
    concurrency: int | None,
    timeout_ms: int | None,
    headless: bool | None,
    output_dir: Path | None,
    error_dir: Path | None,
    range_spec: str | None,
    chunk_size: int | None,
    show_results: bool,
):
    """
    🔎 Scan websites for Prebid.js and other ad-tech libraries.

    URLs come from INPUT_FILE (.txt, .md, .json or .csv) or from a GitHub
    repository. Successful detections are stored under the output directory;
    scanned URLs are removed from plain-text input files.
    """
    config = get_config()
    source = _resolve_source(input_file, github_repo)

    request = ScanRequest(
        source=source,
        mode=MODE_ALIASES[mode.lower()] if mode else ConcurrencyMode(config.concurrency_mode),
        max_parallelism=concurrency or config.max_parallelism,
        visit_timeout_ms=timeout_ms or config.visit_timeout_ms,
        output_dir=output_dir or config.output_dir,
        error_dir=error_dir or config.error_dir,
        range_spec=range_spec,
        chunk_size=config.chunk_size if chunk_size is None else chunk_size,
        max_urls=num_urls or config.max_repository_urls,
    )
    provider = crawl4ai_inspector_provider(
        headless=config.headless if headless is None else headless,
        settle_delay_s=config.settle_delay_s,
        user_agent=config.user_agent,
    )

    await _scan_async(request, provider, ctx.obj["json_output"], show_results)


async def _scan_async(request: ScanRequest, provider, json_output: bool, show_results: bool):
    """Run the pipeline with an optional progress display."""
    logger = get_logger(__name__)
    pipeline = ScanPipeline(inspector_provider=provider)

    if not json_output:
        location = request.source.location if request.source else "none"
        console.print(
            Panel.fit(
                f"🔎 [bold cyan]Prebid Monitor[/bold cyan]\nSource: {location}\nMode: {request.mode.value}",
                border_style="magenta",
            )
        )

    try:
        if json_output:
            summary = await pipeline.run(request)
        else:
            progress, tracker = create_scan_progress(console)

            def on_chunk(batch: ScanBatch, state: ScanState) -> None:
                if batch.number == 1:
                    tracker.start(state.scoped_urls)
                tracker.chunk_done(batch.number, batch.total, len(batch))

            with progress:
                summary = await pipeline.run(request, progress=on_chunk)
    except ExecutionSetupError as e:
        logger.error("Scan aborted", error=str(e))
        if not json_output:
            console.print(f"[red]❌ Could not start the browser: {e}[/red]")
        raise click.exceptions.Exit(1) from e

    if json_output:
        return

    print_rich_table(console, create_scan_summary_table(summary))
    if show_results and summary.records:
        print_rich_table(console, create_detections_table(summary.records))


def _initialize_logging(json_output: bool, log_level: str | None = None, log_file: str | None = None) -> None:
    """Initialize logging configuration."""
    try:
        config = get_config()
        mode = LoggingMode.PRODUCTION if json_output else LoggingMode.INTERACTIVE

        # Use config defaults when CLI parameters are not provided
        final_log_level = log_level or config.log_level
        final_log_file = log_file or (str(config.log_file) if config.log_file else None)

        configure_logging(mode=mode, log_level=final_log_level, log_file=final_log_file)
    except (FileNotFoundError, PermissionError, OSError):
        # Log directory not writable; fall back to defaults
        mode = LoggingMode.PRODUCTION if json_output else LoggingMode.INTERACTIVE
        configure_logging(mode=mode, log_level=log_level or "INFO", log_file=log_file)


@click.command(name="logging-status")
def logging_status():
    """
    📊 Show current logging configuration and status.
    """
    status = get_logging_status()
    logging_table = create_logging_status_table(status)
    print_rich_table(console, logging_table)


@click.group(invoke_without_command=True)
@click.option("--json", is_flag=True, help="Output structured JSON logs instead of rich interface")
@click.option("--log-level", default=None, help="Logging level (DEBUG, INFO, WARNING, ERROR)")
@click.option("--log-file", help="Custom log file path")
@click.pass_context
def app(ctx, json: bool, log_level: str | None, log_file: str | None):
    """
    🔎 Prebid Monitor - Ad-tech detection for websites

    Load URL lists from files or GitHub repositories, visit each page in a
    headless browser, and record which Prebid.js versions and ad libraries
    it runs.
    """
    # Store global options in context for commands to access
    ctx.ensure_object(dict)
    ctx.obj["json_output"] = json

    # Initialize logging once here instead of in each command
    _initialize_logging(json, log_level, log_file)

    # Show help if no command provided
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


app.add_command(scan)
app.add_command(logging_status)


if __name__ == "__main__":
    app()
