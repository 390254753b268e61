# ABOUTME: Domain models, partitioning, and run orchestration
# ABOUTME: Ties sourcing, execution, and persistence together chunk by chunk

"""
Core Layer: Domain objects and workflow orchestration

This layer handles:
- Pydantic models for requests, page data, and outcomes
- Range selection and chunking of URL lists
- The exception taxonomy
- Pipeline orchestration across chunks

Data Flow: sourcing/ URLs → partitioning → execution/ → persistence/ → ScanSummary
"""

from .errors import (
    ConfigurationError,
    ExecutionSetupError,
    InspectionError,
    PersistenceError,
    ScanError,
    SourceError,
    VisitError,
)
from .models import (
    ConcurrencyMode,
    ExtractedPageData,
    FailureOutcome,
    InspectionResult,
    IntegrationInstance,
    NoSignalOutcome,
    ScanBatch,
    ScanRequest,
    ScanSummary,
    SourceKind,
    SuccessOutcome,
    TaskOutcome,
    UrlSource,
)
from .partition import apply_range, chunk

# Import the pipeline on-demand to avoid circular imports
# Use: from prebid_monitor.core.pipeline import ScanPipeline

__all__ = [
    "ConcurrencyMode",
    "ConfigurationError",
    "ExecutionSetupError",
    "ExtractedPageData",
    "FailureOutcome",
    "InspectionError",
    "InspectionResult",
    "IntegrationInstance",
    "NoSignalOutcome",
    "PersistenceError",
    "ScanBatch",
    "ScanError",
    "ScanRequest",
    "ScanSummary",
    "SourceError",
    "SourceKind",
    "SuccessOutcome",
    "TaskOutcome",
    "UrlSource",
    "VisitError",
    "apply_range",
    "chunk",
]
