# ABOUTME: Loads candidate URLs from a GitHub repository or a single file link within one
# ABOUTME: Uses the contents API for listings and raw.githubusercontent.com for file bodies

import re
from dataclasses import dataclass

import httpx

from prebid_monitor.core.errors import SourceError
from prebid_monitor.sourcing.extractor import SUPPORTED_EXTENSIONS, extract_urls
from prebid_monitor.utils.logging import get_logger
from prebid_monitor.utils.retry import http_retry

REPO_PATH_PATTERN = re.compile(r"github\.com/([^/\s?#]+/[^/\s?#]+)")


@dataclass(slots=True, frozen=True)
class RepositoryEntry:
    """One item of a repository's top-level listing."""

    name: str
    type: str
    path: str
    download_url: str | None

    @property
    def is_supported_file(self) -> bool:
        return (
            self.type == "file"
            and self.download_url is not None
            and any(self.name.lower().endswith(ext) for ext in SUPPORTED_EXTENSIONS)
        )


def _text(value: object) -> str:
    return value if isinstance(value, str) else ""


def _entry_from_listing(item: dict) -> RepositoryEntry:
    # Listings can carry nulls or other non-string values for any field
    name = _text(item.get("name"))
    download_url = item.get("download_url")
    return RepositoryEntry(
        name=name,
        type=_text(item.get("type")),
        path=_text(item.get("path")) or name,
        download_url=download_url if isinstance(download_url, str) and download_url else None,
    )


class GitHubUrlSource:
    """Fetch URL lists from public GitHub repositories.

    Accepts either a repository root (``https://github.com/owner/repo``) or a
    direct file link (``https://github.com/owner/repo/blob/main/sites.txt``).
    Failures never propagate out of :meth:`fetch_urls`; they are logged and an
    empty or partial list is returned.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        api_base: str = "https://api.github.com",
        timeout: float = 30.0,
    ):
        self.api_base = api_base.rstrip("/")
        self.http_client = client or httpx.AsyncClient(  # Allow for dependency injection
            headers={"User-Agent": "prebid-monitor/0.1 (+https://github.com/prebid)"},
            timeout=timeout,
            follow_redirects=True,
        )
        self.logger = get_logger(__name__)

    async def fetch_urls(self, reference: str, max_count: int | None = None) -> list[str]:
        """Collect unique URLs from the referenced repository or file.

        Args:
            reference: Repository URL or direct ``/blob/`` file link
            max_count: Stop once this many unique URLs are collected

        Returns:
            URLs in first-seen order, at most ``max_count`` of them
        """
        self.logger.info("Fetching URLs from GitHub source", reference=reference, max_count=max_count)
        collected: dict[str, None] = {}

        try:
            if "/blob/" in reference:
                await self._collect_from_file_link(reference, collected)
            else:
                await self._collect_from_repository(reference, collected, max_count)
        except (SourceError, httpx.HTTPError, ValueError) as e:
            self.logger.error(
                "Failed to load URLs from GitHub source",
                reference=reference,
                error=str(e),
                error_type=type(e).__name__,
            )
            return []

        urls = list(collected)
        if max_count is not None and len(urls) > max_count:
            urls = urls[:max_count]

        self.logger.info("Loaded URLs from GitHub source", reference=reference, count=len(urls))
        return urls

    async def _collect_from_file_link(self, reference: str, collected: dict[str, None]) -> None:
        raw_url = reference.replace("github.com", "raw.githubusercontent.com", 1).replace("/blob/", "/", 1)
        file_name = reference.rstrip("/").rsplit("/", 1)[-1]

        self.logger.info("Fetching direct file link", raw_url=raw_url, file_name=file_name)
        content = await self.fetch_raw(raw_url)
        collected.update(dict.fromkeys(extract_urls(file_name, content)))

    async def _collect_from_repository(
        self, reference: str, collected: dict[str, None], max_count: int | None
    ) -> None:
        repo_path = self.parse_repository_path(reference)
        entries = await self.list_top_level(repo_path)
        candidates = [entry for entry in entries if entry.is_supported_file]

        self.logger.info(
            "Listed repository contents",
            repository=repo_path,
            entries=len(entries),
            candidates=len(candidates),
        )

        for entry in candidates:
            if max_count is not None and len(collected) >= max_count:
                self.logger.info("Reached URL limit, skipping remaining files", limit=max_count)
                break

            try:
                content = await self.fetch_raw(entry.download_url)  # type: ignore[arg-type]
            except (SourceError, httpx.HTTPError) as e:
                self.logger.warning(
                    "Skipping repository file", path=entry.path, error=str(e), error_type=type(e).__name__
                )
                continue

            for url in extract_urls(entry.name, content):
                if max_count is not None and len(collected) >= max_count:
                    break
                collected.setdefault(url, None)

            self.logger.info("Processed repository file", path=entry.path, total_urls=len(collected))

    @staticmethod
    def parse_repository_path(reference: str) -> str:
        """Return ``owner/repo`` from a repository URL.

        Raises:
            SourceError: If the reference does not point at a GitHub repository
        """
        match = REPO_PATH_PATTERN.search(reference)
        if not match:
            raise SourceError(f"Invalid GitHub repository URL: {reference}")
        return match.group(1).removesuffix(".git")

    @http_retry()
    async def list_top_level(self, repo_path: str) -> list[RepositoryEntry]:
        """List the root directory of a repository.

        Raises:
            SourceError: On a non-success status or a payload that is not a list
        """
        contents_url = f"{self.api_base}/repos/{repo_path}/contents"
        response = await self.http_client.get(contents_url, headers={"Accept": "application/vnd.github.v3+json"})
        if not response.is_success:
            raise SourceError(
                f"Repository listing failed with {response.status_code} {response.reason_phrase}: {contents_url}"
            )

        payload = response.json()
        if not isinstance(payload, list):
            raise SourceError(f"Expected a list of repository entries, got {type(payload).__name__}")

        return [_entry_from_listing(item) for item in payload if isinstance(item, dict)]

    @http_retry()
    async def fetch_raw(self, url: str) -> str:
        """Download a raw file body.

        Raises:
            SourceError: On a non-success status
        """
        response = await self.http_client.get(url)
        if not response.is_success:
            raise SourceError(f"Download failed with {response.status_code} {response.reason_phrase}: {url}")
        return response.text

    async def close(self) -> None:
        await self.http_client.aclose()
