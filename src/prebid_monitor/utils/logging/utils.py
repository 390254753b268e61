# ABOUTME: Logger utilities with context binding and step tracking decorators
# ABOUTME: Provides get_logger and context managers for consistent structured logging

import functools
import time
import uuid
from collections.abc import Callable
from typing import Any, TypeVar

import structlog

# Type variable for decorated functions
F = TypeVar("F", bound=Callable[..., Any])


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a logger instance with automatic module detection.

    Args:
        name: Logger name, auto-detected from caller if None

    Returns:
        Configured structlog logger instance
    """
    if name is None:
        import inspect

        frame = inspect.currentframe()
        if frame and frame.f_back:
            name = frame.f_back.f_globals.get("__name__", "unknown")

    return structlog.get_logger(name or "prebid_monitor")


def generate_operation_id() -> str:
    """Generate a short unique ID for correlating log lines of one run."""
    return str(uuid.uuid4())[:8]


def log_step(step_name: str) -> Callable[[F], F]:
    """Decorator to log start, completion and failure of an async pipeline step.

    Args:
        step_name: Name of the step as it appears in the logs

    Returns:
        Decorated async function with step logging
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            logger = get_logger(func.__module__).bind(step=step_name)
            logger.debug(f"Starting step: {step_name}")
            start_time = time.time()

            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                logger.error(
                    f"Failed step: {step_name}",
                    duration_seconds=round(time.time() - start_time, 3),
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise

            result_info = {}
            if hasattr(result, "__len__"):
                result_info["result_count"] = len(result)
            logger.info(
                f"Completed step: {step_name}",
                duration_seconds=round(time.time() - start_time, 3),
                **result_info,
            )
            return result

        return wrapper  # type: ignore[return-value]

    return decorator


class LogContext:
    """Context manager for binding logger context."""

    def __init__(self, logger: structlog.stdlib.BoundLogger, **context):
        self.logger = logger
        self.context = context
        self.bound_logger = None

    def __enter__(self) -> structlog.stdlib.BoundLogger:
        self.bound_logger = self.logger.bind(**self.context)
        return self.bound_logger

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None and self.bound_logger is not None:
            self.bound_logger.error("Context operation failed", error=str(exc_val), error_type=exc_type.__name__)


def with_scan_context(source: str, **context) -> LogContext:
    """Create a logging context for one scan run.

    Args:
        source: File path or repository reference the URLs come from
        **context: Additional context to bind

    Returns:
        LogContext manager with run context
    """
    logger = get_logger()
    return LogContext(logger, source=source, run_id=generate_operation_id(), **context)


def with_chunk_context(logger: structlog.stdlib.BoundLogger, chunk: int, total_chunks: int) -> LogContext:
    """Create a logging context for one chunk of a run."""
    return LogContext(logger, chunk=chunk, total_chunks=total_chunks)
