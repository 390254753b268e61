# ABOUTME: Dated JSON record store for successful page extractions
# ABOUTME: Appends to store/<Mon-YYYY>/<YYYY-MM-DD>.json, replacing unreadable files

import json
from collections.abc import Sequence
from datetime import date
from pathlib import Path
from typing import Any

import aiofiles
import aiofiles.os

from prebid_monitor.core.errors import PersistenceError
from prebid_monitor.core.models import ExtractedPageData
from prebid_monitor.utils.logging import get_logger


class RecordStore:
    """JSON array files of extracted page data, one per calendar day.

    Existing entries are kept as-is when new records are appended, so files
    written by older versions survive a merge untouched.
    """

    def __init__(self, output_dir: str | Path = "store"):
        self.output_dir = Path(output_dir)
        self.logger = get_logger(__name__)

    def path_for(self, day: date) -> Path:
        return self.output_dir / f"{day.strftime('%b')}-{day.year}" / f"{day.isoformat()}.json"

    async def append(self, records: Sequence[ExtractedPageData], today: date | None = None) -> Path | None:
        """Merge ``records`` into the file for ``today``.

        Args:
            records: Successful extractions to store
            today: Day whose file receives the records, defaults to the local date

        Returns:
            Path written, or None if there was nothing to write or the write failed
        """
        if not records:
            self.logger.info("No results to save")
            return None

        path = self.path_for(today or date.today())
        new_entries = [record.to_record() for record in records]

        try:
            existing = await self._load_existing(path)
            merged = existing + new_entries
            await self._write(path, merged)
        except PersistenceError as e:
            self.logger.error("Failed to write results", path=str(path), error=str(e))
            return None

        self.logger.info("Saved results", path=str(path), new=len(new_entries), total=len(merged))
        return path

    async def load(self, day: date) -> list[dict[str, Any]]:
        """Read back the entries stored for ``day``; missing or unreadable files give none."""
        return await self._load_existing(self.path_for(day))

    async def _load_existing(self, path: Path) -> list[dict[str, Any]]:
        if not await aiofiles.os.path.exists(path):
            return []

        try:
            async with aiofiles.open(path, encoding="utf-8") as handle:
                data = json.loads(await handle.read())
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            self.logger.warning("Existing results file is unreadable, overwriting", path=str(path), error=str(e))
            return []

        if not isinstance(data, list):
            self.logger.warning(
                "Existing results file is not a JSON array, overwriting", path=str(path), found=type(data).__name__
            )
            return []

        self.logger.debug("Loaded existing results", path=str(path), count=len(data))
        return data

    async def _write(self, path: Path, entries: list[dict[str, Any]]) -> None:
        """Replace the day file atomically through a sibling temp file."""
        try:
            content = json.dumps(entries, indent=2) + "\n"
        except TypeError as e:
            raise PersistenceError(f"Could not serialize results for {path}: {e}") from e

        temp_path = path.with_name(f".{path.name}.tmp")
        try:
            await aiofiles.os.makedirs(path.parent, exist_ok=True)
            async with aiofiles.open(temp_path, "w", encoding="utf-8") as handle:
                await handle.write(content)
            await aiofiles.os.replace(temp_path, path)
        except OSError as e:
            raise PersistenceError(f"Could not write {path}: {e}") from e
