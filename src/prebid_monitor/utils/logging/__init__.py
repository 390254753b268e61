# ABOUTME: Logging configuration, progress tracking, and output formatting
# ABOUTME: Provides rich console output and structured logging for the scan pipeline

from .config import LoggingMode, configure_logging, get_logging_status
from .progress import ScanProgressTracker, create_scan_progress
from .utils import LogContext, get_logger, log_step, with_chunk_context, with_scan_context

__all__ = [
    # Configuration
    "LoggingMode",
    "configure_logging",
    "get_logging_status",
    # Progress
    "ScanProgressTracker",
    "create_scan_progress",
    # Utilities
    "LogContext",
    "get_logger",
    "log_step",
    "with_chunk_context",
    "with_scan_context",
]
