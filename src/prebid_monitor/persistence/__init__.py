# ABOUTME: File-based persistence of scan outcomes
# ABOUTME: Pipeline Stage 3: Task outcomes → dated JSON records, error lists, reconciled input

"""
Persistence Layer: Save outcomes durably and append-safely

This layer handles:
- Dated JSON record files with merge-on-append
- Per-category error URL lists
- Removing successfully scanned URLs from plain-text inputs

Data Flow: execution/ outcomes → Files on disk → core/ run summary
"""

from .error_log import ErrorCategory, ErrorLog, classify_failure
from .input_file import reconcile_input_file
from .manager import ResultsManager
from .store import RecordStore

__all__ = [
    "ErrorCategory",
    "ErrorLog",
    "RecordStore",
    "ResultsManager",
    "classify_failure",
    "reconcile_input_file",
]
