# ABOUTME: Routes task outcomes to the record store, error logs, and input file reconciliation
# ABOUTME: Invoked once per chunk as the single writer of on-disk scan state

from collections.abc import Callable, Iterable, Sequence
from datetime import date
from pathlib import Path

from prebid_monitor.core.models import (
    ExtractedPageData,
    FailureOutcome,
    NoSignalOutcome,
    SuccessOutcome,
    TaskOutcome,
    UrlSource,
)
from prebid_monitor.persistence.error_log import ErrorCategory, ErrorLog, classify_failure
from prebid_monitor.persistence.input_file import reconcile_input_file
from prebid_monitor.persistence.store import RecordStore
from prebid_monitor.utils.logging import get_logger


class ResultsManager:
    """Persist the outcomes of one chunk."""

    def __init__(
        self,
        output_dir: str | Path = "store",
        error_dir: str | Path = "errors",
        clock: Callable[[], date] = date.today,
    ):
        self.store = RecordStore(output_dir)
        self.error_log = ErrorLog(error_dir)
        self.clock = clock
        self.logger = get_logger(__name__)

    async def persist(
        self,
        outcomes: Sequence[TaskOutcome],
        scope_urls: Iterable[str],
        source: UrlSource | None = None,
    ) -> list[ExtractedPageData]:
        """Write a chunk's outcomes to disk.

        Successes go to the dated record store, empty pages and failures to
        their error files in encounter order. Plain-text local sources then
        lose the URLs that succeeded.

        Args:
            outcomes: One outcome per visited URL
            scope_urls: URLs selected for this chunk
            source: Where the URLs came from, used for reconciliation

        Returns:
            The successful extractions, in encounter order
        """
        if not outcomes:
            self.logger.info("No task results to process")
            return []

        records: list[ExtractedPageData] = []
        for outcome in outcomes:
            match outcome:
                case SuccessOutcome(data=data):
                    records.append(data)
                case NoSignalOutcome(url=url):
                    self.logger.warning("No ad-tech data found", url=url)
                    await self.error_log.append(url, ErrorCategory.NO_SIGNAL)
                case FailureOutcome(url=url, error_code=error_code):
                    category = classify_failure(outcome)
                    self.logger.error(
                        "Processing failed", url=url, error_code=error_code, category=category.name
                    )
                    await self.error_log.append(url, category)

        await self.store.append(records, today=self.clock())

        if source is not None and source.is_line_file:
            await reconcile_input_file(source.location, scope_urls, [record.url for record in records])

        self.logger.info("Processed task results", outcomes=len(outcomes), successes=len(records))
        return records
