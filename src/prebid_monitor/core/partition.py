# ABOUTME: Narrows a URL list to a 1-based inclusive range and splits it into ordered chunks
# ABOUTME: Both operations are pure and preserve the original URL order

from collections.abc import Sequence

from prebid_monitor.core.models import ScanBatch
from prebid_monitor.utils.logging import get_logger

logger = get_logger(__name__)


def _parse_bound(raw: str) -> int | None:
    raw = raw.strip()
    if not raw:
        return None
    return int(raw)


def apply_range(urls: Sequence[str], range_spec: str | None) -> list[str]:
    """Return the slice of ``urls`` selected by a ``start-end`` range.

    The range is 1-based and inclusive. ``"5-"`` runs to the end of the list and
    ``"-15"`` starts at the first URL. An unparseable range is ignored with a
    warning. A start past the end of the list selects nothing, and a start at or
    after the end bound selects everything from start onwards.
    """
    urls = list(urls)
    if range_spec is None or not range_spec.strip():
        return urls

    # A negative bound shows up as an extra separator, e.g. "-3-5"
    parts = range_spec.split("-")
    try:
        if len(parts) > 2:
            raise ValueError("too many separators")
        start = _parse_bound(parts[0])
        end = _parse_bound(parts[1]) if len(parts) == 2 else None
    except ValueError:
        logger.warning("Invalid range format, processing all URLs", range=range_spec, total_urls=len(urls))
        return urls

    start_index = start - 1 if start else 0
    end_index = end if end else len(urls)

    if start_index >= len(urls):
        logger.warning("Range start is beyond the URL list", start=start_index + 1, total_urls=len(urls))
        return []

    if start_index >= end_index:
        logger.warning(
            "Range start is not before range end, processing to the end of the list",
            start=start_index + 1,
            end=end_index,
        )
        return urls[start_index:]

    selected = urls[start_index:end_index]
    logger.info(
        "Applied range",
        range=range_spec,
        first=start_index + 1,
        last=min(end_index, len(urls)),
        selected=len(selected),
    )
    return selected


def chunk(urls: Sequence[str], size: int | None = None) -> list[ScanBatch]:
    """Split ``urls`` into consecutive batches of ``size`` URLs.

    A missing or non-positive size yields one batch with every URL. An empty
    input yields no batches.
    """
    urls = tuple(urls)
    if not urls:
        return []

    if not size or size <= 0:
        return [ScanBatch(number=1, total=1, urls=urls)]

    total = -(-len(urls) // size)
    return [
        ScanBatch(number=index + 1, total=total, urls=urls[offset : offset + size])
        for index, offset in enumerate(range(0, len(urls), size))
    ]
