# ABOUTME: Turns raw file content into a deduplicated list of candidate URLs
# ABOUTME: Strategy depends on the file extension: text/markdown, JSON, or CSV

import csv
import io
import json
import re
from pathlib import PurePosixPath
from typing import Any
from urllib.parse import urlsplit

from prebid_monitor.utils.logging import get_logger

logger = get_logger(__name__)

TEXT_EXTENSIONS = {".txt", ".md"}
JSON_EXTENSIONS = {".json"}
CSV_EXTENSIONS = {".csv"}
SUPPORTED_EXTENSIONS = TEXT_EXTENSIONS | JSON_EXTENSIONS | CSV_EXTENSIONS

URL_PATTERN = re.compile(r"https?://[^\s\"'<>]+", re.IGNORECASE)
# Bare domains bounded by whitespace or quotes, so hosts inside full URLs never match
SCHEMELESS_DOMAIN_PATTERN = re.compile(r"(?<![^\s\"'])(?:[A-Za-z0-9_-]+\.)+[A-Za-z]{2,}(?![^\s\"'])")
TRAILING_PUNCTUATION = ".,;:!?)]}"
QUOTES = "\"'"


def is_http_url(candidate: str) -> bool:
    """Return True if ``candidate`` is an absolute http(s) URL with a host."""
    try:
        parts = urlsplit(candidate)
    except ValueError:
        return False
    return parts.scheme.lower() in ("http", "https") and bool(parts.netloc)


def _clean_match(match: str) -> str:
    return match.strip().rstrip(TRAILING_PUNCTUATION)


def normalize_url(token: str) -> str:
    """Trim a URL-ish token the way extraction does and promote it to https if it has no scheme."""
    cleaned = _clean_match(token.strip().strip(QUOTES))
    if cleaned and "://" not in cleaned:
        return f"https://{cleaned}"
    return cleaned


def _scan_fully_qualified(content: str) -> list[str]:
    return [url for url in (_clean_match(m) for m in URL_PATTERN.findall(content)) if is_http_url(url)]


def _scan_text(content: str, source_name: str) -> list[str]:
    """Full URLs and bare domains, in the order they appear."""
    positioned = [(match.start(), _clean_match(match.group())) for match in URL_PATTERN.finditer(content)]

    promoted = 0
    for match in SCHEMELESS_DOMAIN_PATTERN.finditer(content):
        cleaned = match.group().strip().strip(QUOTES)
        if cleaned and "://" not in cleaned:
            positioned.append((match.start(), normalize_url(cleaned)))
            promoted += 1
    if promoted:
        logger.debug("Promoted schemeless domains", source=source_name, count=promoted)

    return [url for _, url in sorted(positioned) if is_http_url(url)]


def _walk_json_strings(data: Any) -> list[str]:
    if isinstance(data, str):
        return _scan_fully_qualified(data)
    if isinstance(data, list):
        return [url for item in data for url in _walk_json_strings(item)]
    if isinstance(data, dict):
        return [url for value in data.values() for url in _walk_json_strings(value)]
    return []


def _scan_json(content: str, source_name: str) -> list[str]:
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        logger.warning("Failed to parse JSON, falling back to raw URL scan", source=source_name, error=str(e))
        return []
    urls = _walk_json_strings(data)
    logger.debug("Extracted URLs from JSON structure", source=source_name, count=len(urls))
    return urls


def _scan_csv(content: str, source_name: str) -> list[str]:
    """First-column URLs plus full URLs found in any cell, so a separator never joins a URL."""
    try:
        rows = [row for row in csv.reader(io.StringIO(content)) if row]
    except csv.Error as e:
        logger.warning("Failed to parse CSV content, falling back to raw URL scan", source=source_name, error=str(e))
        return _scan_fully_qualified(content)

    urls = []
    for row in rows:
        value = row[0].strip()
        if value.lower().startswith(("http://", "https://")) and is_http_url(value):
            urls.append(value)
        elif value:
            logger.warning("Skipping non-HTTP value in CSV", source=source_name, value=value)
        urls.extend(url for cell in row for url in _scan_fully_qualified(cell))
    return urls


def extract_urls(source_name: str, content: str) -> list[str]:
    """Extract unique http(s) URLs from file content.

    Every file type gets a scan for fully-qualified URLs. ``.txt`` and ``.md``
    files additionally promote bare domains to ``https://``, ``.json`` files
    are walked for URL string values, and ``.csv`` files are scanned cell by
    cell with the first column taken as the URL list. Problems with the
    content are logged, never raised.

    Args:
        source_name: File name or path, used only for its extension
        content: Decoded file content

    Returns:
        URLs in first-seen order without duplicates
    """
    extension = PurePosixPath(source_name).suffix.lower()
    collected: dict[str, None] = {}

    try:
        if extension in TEXT_EXTENSIONS:
            collected.update(dict.fromkeys(_scan_text(content, source_name)))
        elif extension in CSV_EXTENSIONS:
            collected.update(dict.fromkeys(_scan_csv(content, source_name)))
        else:
            collected.update(dict.fromkeys(_scan_fully_qualified(content)))
            if extension in JSON_EXTENSIONS:
                collected.update(dict.fromkeys(_scan_json(content, source_name)))
    except Exception as e:  # pragma: no cover - keep whatever was collected so far
        logger.warning("URL extraction stopped early", source=source_name, error=str(e), error_type=type(e).__name__)

    urls = list(collected)
    logger.info("Extracted URLs", source=source_name, file_type=extension or "unknown", count=len(urls))
    return urls
