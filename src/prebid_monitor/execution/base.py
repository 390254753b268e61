# ABOUTME: Protocol interfaces for page inspection and batch dispatch
# ABOUTME: Browser automation is injected so executors can run against fakes in tests

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from typing import Protocol

from prebid_monitor.core.models import InspectionResult, ScanBatch, TaskOutcome


class PageInspector(Protocol):
    """Protocol for loading a page and reporting its ad-tech signals."""

    async def inspect(self, url: str, timeout_ms: int) -> InspectionResult:
        """Load ``url`` and report what ad-tech integrations it exposes.

        Args:
            url: Page to load
            timeout_ms: Navigation timeout in milliseconds

        Returns:
            Detected libraries and Prebid.js instances (possibly empty)

        Raises:
            InspectionError: If the page could not be loaded or inspected
        """
        ...


# Zero-arg factory for a browser context; entered once per batch
InspectorProvider = Callable[[], AbstractAsyncContextManager[PageInspector]]


class ScanExecutor(Protocol):
    """Protocol for visiting every URL of a batch exactly once."""

    async def dispatch(self, batch: ScanBatch) -> list[TaskOutcome]:
        """Visit each URL of ``batch`` and return one outcome per URL.

        Raises:
            ExecutionSetupError: If the inspector context cannot be created
        """
        ...
