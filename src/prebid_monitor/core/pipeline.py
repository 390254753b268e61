# ABOUTME: Scan pipeline that sources URLs, partitions them, and runs each chunk end to end
# ABOUTME: Each chunk is dispatched, persisted, and folded into an immutable run state

from collections.abc import Callable
from dataclasses import dataclass, field, replace

from prebid_monitor.config import Config, get_config
from prebid_monitor.core.errors import ConfigurationError, ExecutionSetupError
from prebid_monitor.core.models import (
    ExtractedPageData,
    FailureOutcome,
    NoSignalOutcome,
    ScanBatch,
    ScanRequest,
    ScanSummary,
    SourceKind,
    TaskOutcome,
    UrlSource,
)
from prebid_monitor.core.partition import apply_range, chunk
from prebid_monitor.execution.base import InspectorProvider
from prebid_monitor.execution.executors import create_executor
from prebid_monitor.persistence.manager import ResultsManager
from prebid_monitor.sourcing.github import GitHubUrlSource
from prebid_monitor.sourcing.local import load_local_urls
from prebid_monitor.utils.logging import get_logger, log_step, with_chunk_context, with_scan_context


@dataclass(frozen=True, slots=True)
class ScanState:
    """Running totals of a scan, replaced after every chunk."""

    total_urls: int = 0
    scoped_urls: int = 0
    chunks_processed: int = 0
    successes: int = 0
    no_signal: int = 0
    failures: int = 0
    records: tuple[ExtractedPageData, ...] = field(default_factory=tuple)

    def advance(self, outcomes: list[TaskOutcome], records: list[ExtractedPageData]) -> "ScanState":
        """Return the state after one more chunk."""
        return replace(
            self,
            chunks_processed=self.chunks_processed + 1,
            successes=self.successes + len(records),
            no_signal=self.no_signal + sum(isinstance(o, NoSignalOutcome) for o in outcomes),
            failures=self.failures + sum(isinstance(o, FailureOutcome) for o in outcomes),
            records=self.records + tuple(records),
        )

    def to_summary(self, source: str | None, halted_reason: str | None = None) -> ScanSummary:
        return ScanSummary(
            source=source,
            total_urls=self.total_urls,
            scoped_urls=self.scoped_urls,
            chunks_processed=self.chunks_processed,
            successes=self.successes,
            no_signal=self.no_signal,
            failures=self.failures,
            records=list(self.records),
            halted_reason=halted_reason,
        )


ProgressCallback = Callable[[ScanBatch, ScanState], None]


class ScanPipeline:
    """Run a scan from URL source to persisted results.

    Stages:
    1. Sourcing: repository fetch or local file read, then URL extraction
    2. Partitioning: optional range selection, then chunking
    3. Per chunk: dispatch to the executor, persist outcomes, fold into state

    Per-URL, persistence and sourcing problems are logged and absorbed. A
    browser that cannot be started aborts the run.
    """

    def __init__(
        self,
        inspector_provider: InspectorProvider,
        repository_source: GitHubUrlSource | None = None,
        results_manager: ResultsManager | None = None,
        config: Config | None = None,
    ):
        self.inspector_provider = inspector_provider
        self.repository_source = repository_source
        self.results_manager = results_manager
        self.config = config or get_config()
        self.logger = get_logger(__name__)

    async def run(self, request: ScanRequest, progress: ProgressCallback | None = None) -> ScanSummary:
        """Execute one scan run.

        Args:
            request: Source, concurrency and output settings for the run
            progress: Called after every chunk with the batch and the new state

        Returns:
            Summary of the run; ``halted_reason`` is set when it stopped early

        Raises:
            ExecutionSetupError: If the page inspector cannot be started
        """
        try:
            source = self._require_source(request)
        except ConfigurationError as e:
            self.logger.error("No URL source provided", error=str(e))
            return ScanSummary(halted_reason="no_source")

        with with_scan_context(source.location, source_kind=source.kind.value) as logger:
            urls = await self._load_urls(source, request)
            state = ScanState(total_urls=len(urls))
            if not urls:
                logger.warning("No URLs to scan")
                return state.to_summary(source.location, halted_reason="no_urls")

            scoped = apply_range(urls, request.range_spec)
            state = replace(state, scoped_urls=len(scoped))
            if not scoped:
                logger.warning("Range selected no URLs", range=request.range_spec, total_urls=len(urls))
                return state.to_summary(source.location, halted_reason="empty_range")

            executor = create_executor(
                request.mode,
                self.inspector_provider,
                max_parallelism=request.max_parallelism,
                visit_timeout_ms=request.visit_timeout_ms,
                deadline_grace_s=self.config.deadline_grace_s,
            )
            results_manager = self.results_manager or ResultsManager(request.output_dir, request.error_dir)

            batches = chunk(scoped, request.chunk_size)
            logger.info(
                "Starting scan",
                urls=len(scoped),
                chunks=len(batches),
                mode=request.mode.value,
                max_parallelism=request.max_parallelism,
            )

            for batch in batches:
                with with_chunk_context(logger, batch.number, batch.total) as chunk_logger:
                    chunk_logger.info("Processing chunk", urls=len(batch))
                    try:
                        outcomes = await executor.dispatch(batch)
                    except ExecutionSetupError as e:
                        chunk_logger.error("Could not start page inspector, aborting run", error=str(e))
                        raise

                    records = await results_manager.persist(outcomes, batch.urls, source)
                    state = state.advance(outcomes, records)
                    chunk_logger.info(
                        "Chunk complete", successes=len(records), scanned=len(outcomes), total_successes=state.successes
                    )

                if progress is not None:
                    progress(batch, state)

            logger.info(
                "Scan complete",
                chunks=state.chunks_processed,
                successes=state.successes,
                no_signal=state.no_signal,
                failures=state.failures,
            )
            return state.to_summary(source.location)

    def _require_source(self, request: ScanRequest) -> UrlSource:
        if request.source is None or not request.source.location.strip():
            raise ConfigurationError("Either an input file or a GitHub repository must be provided")
        return request.source

    @log_step("load_urls")
    async def _load_urls(self, source: UrlSource, request: ScanRequest) -> list[str]:
        if source.kind == SourceKind.LOCAL_FILE:
            return load_local_urls(source.location)

        max_count = request.max_urls or self.config.max_repository_urls
        if self.repository_source is not None:
            return await self.repository_source.fetch_urls(source.location, max_count=max_count)

        repository_source = GitHubUrlSource(api_base=self.config.github_api_base, timeout=self.config.http_timeout_s)
        try:
            return await repository_source.fetch_urls(source.location, max_count=max_count)
        finally:
            await repository_source.close()
