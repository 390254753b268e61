# ABOUTME: Execution layer that visits URLs through an injected page inspector
# ABOUTME: Pipeline Stage 2: URL batch → per-URL outcomes

"""
Execution Layer: Visit every URL of a batch exactly once

This layer handles:
- Page inspector and executor protocols
- Single-URL visits with deadlines and error-code derivation
- Sequential and pooled dispatch of batches
- The default crawl4ai browser inspector

Data Flow: ScanBatch → executor → TaskOutcome list → persistence/
"""

from .base import InspectorProvider, PageInspector, ScanExecutor
from .executors import PooledExecutor, SequentialExecutor, create_executor
from .visit import QUEUE_FAILURE_CODE, derive_error_code, visit_url

__all__ = [
    "QUEUE_FAILURE_CODE",
    "InspectorProvider",
    "PageInspector",
    "PooledExecutor",
    "ScanExecutor",
    "SequentialExecutor",
    "create_executor",
    "derive_error_code",
    "visit_url",
]
