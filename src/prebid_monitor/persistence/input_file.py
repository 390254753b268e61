# ABOUTME: Rewrites a plain-text input file so successfully scanned URLs are not scanned again
# ABOUTME: URLs outside the current scope and unsuccessful ones keep their original order

from collections.abc import Iterable
from pathlib import Path

import aiofiles
import aiofiles.os

from prebid_monitor.sourcing.extractor import normalize_url
from prebid_monitor.utils.logging import get_logger

logger = get_logger(__name__)


def _remaining_lines(lines: Iterable[str], scope: set[str], succeeded: set[str]) -> list[str]:
    remaining = []
    for line in lines:
        stripped = line.strip()
        if not stripped:
            continue
        key = normalize_url(stripped)
        if key in scope and key in succeeded:
            continue
        remaining.append(stripped)
    return remaining


async def reconcile_input_file(path: str | Path, scope_urls: Iterable[str], succeeded_urls: Iterable[str]) -> bool:
    """Drop in-scope successes from a ``.txt`` input file.

    Lines are compared in normalized form, so a bare ``example.com`` line is
    matched by the ``https://example.com`` URL it was promoted to. When the
    file no longer exists it is recreated from the scope minus the successes.

    Args:
        path: Input file the URLs were read from
        scope_urls: URLs selected for this run, after range filtering
        succeeded_urls: URLs that produced a stored record

    Returns:
        True if the file was rewritten
    """
    path = Path(path)
    if path.suffix.lower() != ".txt":
        logger.info("Skipping input file update for non-.txt source", path=str(path))
        return False

    scope_list = list(scope_urls)
    scope = {normalize_url(url) for url in scope_list}
    succeeded = {normalize_url(url) for url in succeeded_urls} & scope

    try:
        if await aiofiles.os.path.exists(path):
            async with aiofiles.open(path, encoding="utf-8") as handle:
                content = await handle.read()
            remaining = _remaining_lines(content.split("\n"), scope, succeeded)
        else:
            logger.warning("Input file not found, recreating it from unscanned URLs", path=str(path))
            remaining = _remaining_lines(scope_list, scope, succeeded)

        async with aiofiles.open(path, "w", encoding="utf-8") as handle:
            await handle.write("\n".join(remaining) + ("\n" if remaining else ""))
    except (OSError, UnicodeDecodeError) as e:
        logger.error("Failed to update input file", path=str(path), error=str(e), error_type=type(e).__name__)
        return False

    logger.info("Updated input file", path=str(path), removed=len(succeeded), remaining=len(remaining))
    return True
