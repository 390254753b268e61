# ABOUTME: Classifies failed and empty outcomes and appends their URLs to category files
# ABOUTME: Each category has one fixed plain-text file under the error directory

from enum import Enum
from pathlib import Path

import aiofiles
import aiofiles.os

from prebid_monitor.core.errors import PersistenceError
from prebid_monitor.core.models import FailureOutcome
from prebid_monitor.utils.logging import get_logger

NAVIGATION_ERROR_CODES = frozenset(
    {
        "ENOTFOUND",
        "ERR_NAME_NOT_RESOLVED",
        "ERR_CONNECTION_REFUSED",
        "ERR_CONNECTION_RESET",
        "ERR_CONNECTION_CLOSED",
        "ERR_CONNECTION_TIMED_OUT",
        "ERR_TIMED_OUT",
        "ERR_ADDRESS_UNREACHABLE",
        "ERR_INTERNET_DISCONNECTED",
        "TIMEOUT",
    }
)
NAVIGATION_MESSAGE_MARKERS = (
    "timeout",
    "timed out",
    "net::err_name_not_resolved",
    "net::err_connection_refused",
    "getaddrinfo",
    "name or service not known",
    "nodename nor servname provided",
)


class ErrorCategory(str, Enum):
    """Error file a URL is appended to, valued by its file name."""

    NO_SIGNAL = "no_prebid.txt"
    NAVIGATION = "navigation_errors.txt"
    PROCESSING = "error_processing.txt"

    @property
    def file_name(self) -> str:
        return self.value


def classify_failure(outcome: FailureOutcome) -> ErrorCategory:
    """Sort a failure into navigation (DNS, connection, timeout) or processing."""
    code = outcome.error_code.upper()
    message = outcome.message.lower()

    if code in NAVIGATION_ERROR_CODES or code.startswith("ERR_CONNECTION_"):
        return ErrorCategory.NAVIGATION
    if any(marker in message for marker in NAVIGATION_MESSAGE_MARKERS):
        return ErrorCategory.NAVIGATION
    return ErrorCategory.PROCESSING


class ErrorLog:
    """Append-only URL lists, one file per error category."""

    def __init__(self, error_dir: str | Path = "errors"):
        self.error_dir = Path(error_dir)
        self.logger = get_logger(__name__)

    def path_for(self, category: ErrorCategory) -> Path:
        return self.error_dir / category.file_name

    async def append(self, url: str, category: ErrorCategory) -> bool:
        """Append ``url`` to the category file, creating the directory if needed.

        Returns:
            True if the line was written; failures are logged, never raised
        """
        try:
            await self._append_line(self.path_for(category), url)
        except PersistenceError as e:
            self.logger.error("Failed to log URL to error file", url=url, category=category.name, error=str(e))
            return False

        self.logger.debug("Logged URL to error file", url=url, category=category.name)
        return True

    async def _append_line(self, path: Path, line: str) -> None:
        try:
            await aiofiles.os.makedirs(path.parent, exist_ok=True)
            async with aiofiles.open(path, "a", encoding="utf-8") as handle:
                await handle.write(f"{line}\n")
        except OSError as e:
            raise PersistenceError(f"Could not append to {path}: {e}") from e
