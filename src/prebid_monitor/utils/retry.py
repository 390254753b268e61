# ABOUTME: Retry policy for repository HTTP calls using tenacity
# ABOUTME: Retries transient transport failures with exponential backoff, never HTTP status errors

from collections.abc import Awaitable, Callable
from functools import wraps
from typing import ParamSpec, TypeVar

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from prebid_monitor.utils.logging import get_logger

P = ParamSpec("P")
T = TypeVar("T")

logger = get_logger(__name__)

# Connection resets, DNS hiccups and read timeouts; status errors are final
TRANSIENT_ERRORS: tuple[type[BaseException], ...] = (httpx.TransportError,)


def _log_retry(retry_state: RetryCallState) -> None:
    error = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "Retrying repository request",
        attempt=retry_state.attempt_number,
        error=str(error) if error else None,
        error_type=type(error).__name__ if error else None,
    )


def http_retry(
    max_attempts: int = 3,
    min_wait: float = 0.5,
    max_wait: float = 4.0,
    multiplier: float = 1.0,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """Retry an async HTTP call on transient transport errors.

    The last error is re-raised once attempts are exhausted.
    """

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(max_attempts),
                wait=wait_exponential(multiplier=multiplier, min=min_wait, max=max_wait),
                retry=retry_if_exception_type(TRANSIENT_ERRORS),
                before_sleep=_log_retry,
                reraise=True,
            ):
                with attempt:
                    return await func(*args, **kwargs)
            raise AssertionError("unreachable")  # pragma: no cover

        return wrapper

    return decorator
