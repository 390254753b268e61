# ABOUTME: URL sourcing from local files and GitHub repositories
# ABOUTME: Pipeline Stage 1: Raw file content → deduplicated candidate URLs

"""
Sourcing Layer: Get candidate URLs from untrusted inputs

This layer handles:
- Extension-aware URL extraction from text, markdown, JSON and CSV content
- Reading local input files
- Listing and downloading files from GitHub repositories

Data Flow: Files / repositories → URL list → core/ partitioning
"""

from .extractor import extract_urls, normalize_url
from .github import GitHubUrlSource
from .local import load_file_contents, load_local_urls

__all__ = [
    "GitHubUrlSource",
    "extract_urls",
    "load_file_contents",
    "load_local_urls",
    "normalize_url",
]
