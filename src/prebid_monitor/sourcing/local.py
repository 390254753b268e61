# ABOUTME: Reads URL-bearing input files from the local filesystem
# ABOUTME: Unreadable files are logged and reported as missing content

from pathlib import Path

from prebid_monitor.sourcing.extractor import extract_urls
from prebid_monitor.utils.logging import get_logger

logger = get_logger(__name__)


def load_file_contents(path: str | Path) -> str | None:
    """Read a UTF-8 input file, returning None if it cannot be read."""
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.error("Failed to read input file", path=str(path), error=str(e), error_type=type(e).__name__)
        return None

    logger.info("Read input file", path=str(path), size=len(content))
    return content


def load_local_urls(path: str | Path) -> list[str]:
    """Read an input file and extract its URLs; an unreadable file yields none."""
    content = load_file_contents(path)
    if content is None:
        return []
    return extract_urls(str(path), content)
