# ABOUTME: Visits a single URL through a page inspector and classifies the result
# ABOUTME: Every exception becomes a FailureOutcome with a stable error code

import asyncio
import re
from datetime import date

from prebid_monitor.core.models import (
    ExtractedPageData,
    FailureOutcome,
    NoSignalOutcome,
    SuccessOutcome,
    TaskOutcome,
)
from prebid_monitor.execution.base import PageInspector
from prebid_monitor.utils.logging import get_logger

logger = get_logger(__name__)

UNKNOWN_ERROR_CODE = "UNKNOWN_PAGE_ERROR"
TIMEOUT_ERROR_CODE = "TIMEOUT"
QUEUE_FAILURE_CODE = "QUEUE_ERROR_OR_TASK_FAILED"
MAX_ERROR_CODE_LENGTH = 64

NET_ERROR_PATTERN = re.compile(r"net::([A-Z_]+)")
PROCESSING_PREFIX_PATTERN = re.compile(r"^Error processing \S+:\s*")
NON_CODE_CHARACTERS = re.compile(r"[^A-Z0-9]+")


def derive_error_code(message: str) -> str:
    """Turn an error message into an uppercase ``A-Z0-9_`` code.

    Chromium network errors (``net::ERR_NAME_NOT_RESOLVED``) keep their own
    token; anything else is slugified.
    """
    match = NET_ERROR_PATTERN.search(message)
    if match:
        return match.group(1)

    stripped = PROCESSING_PREFIX_PATTERN.sub("", message.strip())
    code = NON_CODE_CHARACTERS.sub("_", stripped.upper()).strip("_")
    return code[:MAX_ERROR_CODE_LENGTH].rstrip("_") or UNKNOWN_ERROR_CODE


async def visit_url(
    inspector: PageInspector,
    url: str,
    timeout_ms: int,
    deadline_s: float,
    today: date | None = None,
) -> TaskOutcome:
    """Inspect one URL and map the result to an outcome.

    Args:
        inspector: Page inspector from the batch's context
        url: Page to visit
        timeout_ms: Navigation timeout handed to the inspector
        deadline_s: Hard ceiling for the whole visit, including settle time
        today: Scan date stamped on success records, defaults to the local date

    Returns:
        SuccessOutcome, NoSignalOutcome or FailureOutcome; never raises
    """
    try:
        result = await asyncio.wait_for(inspector.inspect(url, timeout_ms), timeout=deadline_s)
    except TimeoutError:
        logger.warning("Page visit exceeded deadline", url=url, deadline_s=deadline_s)
        return FailureOutcome(url=url, error_code=TIMEOUT_ERROR_CODE, message=f"Visit exceeded {deadline_s}s")
    except Exception as e:
        message = str(e) or type(e).__name__
        error_code = derive_error_code(message)
        logger.warning("Page visit failed", url=url, error_code=error_code, error=message, error_type=type(e).__name__)
        return FailureOutcome(url=url, error_code=error_code, message=message)

    if not result.has_signal:
        logger.debug("No ad-tech signal on page", url=url)
        return NoSignalOutcome(url=url)

    data = ExtractedPageData(
        url=url,
        scan_date=today or date.today(),
        detected_libraries=result.detected_libraries,
        integration_instances=result.integration_instances,
    )
    logger.info(
        "Detected ad-tech on page",
        url=url,
        libraries=data.detected_libraries,
        prebid_instances=len(data.integration_instances),
    )
    return SuccessOutcome(url=url, data=data)
