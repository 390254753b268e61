# ABOUTME: Sequential and pooled executors that visit every URL of a batch exactly once
# ABOUTME: Each dispatch owns one inspector context and tears it down before returning

import asyncio
from collections.abc import AsyncIterator
from contextlib import AsyncExitStack, asynccontextmanager

from prebid_monitor.core.errors import ExecutionSetupError
from prebid_monitor.core.models import ConcurrencyMode, FailureOutcome, ScanBatch, TaskOutcome
from prebid_monitor.execution.base import InspectorProvider, PageInspector, ScanExecutor
from prebid_monitor.execution.visit import QUEUE_FAILURE_CODE, visit_url
from prebid_monitor.utils.logging import get_logger


@asynccontextmanager
async def _open_inspector(provider: InspectorProvider) -> AsyncIterator[PageInspector]:
    """Enter a provider's context, converting setup failures to ExecutionSetupError."""
    async with AsyncExitStack() as stack:
        try:
            inspector = await stack.enter_async_context(provider())
        except Exception as e:
            raise ExecutionSetupError(f"Failed to start page inspector: {e}") from e
        yield inspector


class SequentialExecutor:
    """Visit URLs one at a time with a single shared inspector."""

    def __init__(
        self,
        inspector_provider: InspectorProvider,
        visit_timeout_ms: int = 60000,
        deadline_grace_s: float = 15.0,
    ):
        self.inspector_provider = inspector_provider
        self.visit_timeout_ms = visit_timeout_ms
        self.deadline_s = visit_timeout_ms / 1000 + deadline_grace_s
        self.logger = get_logger(__name__)

    async def dispatch(self, batch: ScanBatch) -> list[TaskOutcome]:
        if not batch.urls:
            return []

        self.logger.info("Dispatching batch sequentially", chunk=batch.number, urls=len(batch))
        outcomes: list[TaskOutcome] = []
        async with _open_inspector(self.inspector_provider) as inspector:
            for position, url in enumerate(batch.urls, start=1):
                self.logger.debug("Visiting URL", url=url, position=position, of=len(batch))
                outcomes.append(await visit_url(inspector, url, self.visit_timeout_ms, self.deadline_s))
        return outcomes


class PooledExecutor:
    """Visit URLs with a bounded pool of workers sharing one inspector.

    Workers pull ``(index, url)`` items from a queue until it is empty, so
    outcomes can be put back in batch order. Any URL left without an outcome
    once the pool finishes is reported as a queue failure.
    """

    def __init__(
        self,
        inspector_provider: InspectorProvider,
        max_parallelism: int = 5,
        visit_timeout_ms: int = 60000,
        deadline_grace_s: float = 15.0,
    ):
        if max_parallelism < 1:
            raise ValueError("max_parallelism must be at least 1")
        self.inspector_provider = inspector_provider
        self.max_parallelism = max_parallelism
        self.visit_timeout_ms = visit_timeout_ms
        self.deadline_s = visit_timeout_ms / 1000 + deadline_grace_s
        self.logger = get_logger(__name__)

    async def dispatch(self, batch: ScanBatch) -> list[TaskOutcome]:
        if not batch.urls:
            return []

        worker_count = min(self.max_parallelism, len(batch))
        self.logger.info("Dispatching batch to worker pool", chunk=batch.number, urls=len(batch), workers=worker_count)

        results: list[TaskOutcome | None] = [None] * len(batch)
        queue: asyncio.Queue[tuple[int, str]] = asyncio.Queue()
        for item in enumerate(batch.urls):
            queue.put_nowait(item)

        async with _open_inspector(self.inspector_provider) as inspector:
            workers = [
                asyncio.create_task(self._worker(worker_id, inspector, queue, results), name=f"scan-worker-{worker_id}")
                for worker_id in range(worker_count)
            ]
            try:
                finished = await asyncio.gather(*workers, return_exceptions=True)
            finally:
                for worker in workers:
                    worker.cancel()
                await asyncio.gather(*workers, return_exceptions=True)

        for worker_id, error in enumerate(finished):
            if isinstance(error, BaseException):
                self.logger.error(
                    "Worker stopped early", worker=worker_id, error=str(error), error_type=type(error).__name__
                )

        outcomes: list[TaskOutcome] = []
        for url, outcome in zip(batch.urls, results, strict=True):
            if outcome is None:
                self.logger.error("URL finished without an outcome", url=url)
                outcome = FailureOutcome(url=url, error_code=QUEUE_FAILURE_CODE, message="No outcome recorded")
            outcomes.append(outcome)
        return outcomes

    async def _worker(
        self,
        worker_id: int,
        inspector: PageInspector,
        queue: asyncio.Queue[tuple[int, str]],
        results: list[TaskOutcome | None],
    ) -> None:
        while True:
            try:
                index, url = queue.get_nowait()
            except asyncio.QueueEmpty:
                return

            try:
                results[index] = await visit_url(inspector, url, self.visit_timeout_ms, self.deadline_s)
            except Exception as e:
                self.logger.error(
                    "Worker failed on URL", worker=worker_id, url=url, error=str(e), error_type=type(e).__name__
                )
                results[index] = FailureOutcome(url=url, error_code=QUEUE_FAILURE_CODE, message=str(e))
            finally:
                queue.task_done()


def create_executor(
    mode: ConcurrencyMode,
    inspector_provider: InspectorProvider,
    max_parallelism: int = 5,
    visit_timeout_ms: int = 60000,
    deadline_grace_s: float = 15.0,
) -> ScanExecutor:
    """Build the executor for the configured concurrency mode."""
    if mode == ConcurrencyMode.SEQUENTIAL:
        return SequentialExecutor(inspector_provider, visit_timeout_ms, deadline_grace_s)
    return PooledExecutor(inspector_provider, max_parallelism, visit_timeout_ms, deadline_grace_s)
