# ABOUTME: Tests for loading URLs from GitHub repositories and direct file links
# ABOUTME: HTTP is mocked with pytest-httpx; failures must degrade to empty or partial results

import httpx
import pytest

from prebid_monitor.core.errors import SourceError
from prebid_monitor.sourcing.github import GitHubUrlSource, RepositoryEntry

CONTENTS_URL = "https://api.github.com/repos/acme/sites/contents"


def _entry(name: str, entry_type: str = "file") -> dict:
    return {
        "name": name,
        "path": name,
        "type": entry_type,
        "download_url": f"https://raw.githubusercontent.com/acme/sites/main/{name}" if entry_type == "file" else None,
    }


class TestRepositoryPath:
    @pytest.mark.parametrize(
        "reference,expected",
        [
            ("https://github.com/acme/sites", "acme/sites"),
            ("https://github.com/acme/sites/", "acme/sites"),
            ("https://github.com/acme/sites.git", "acme/sites"),
            ("https://github.com/acme/sites/tree/main/lists", "acme/sites"),
        ],
    )
    def test_parse_repository_path(self, reference, expected):
        assert GitHubUrlSource.parse_repository_path(reference) == expected

    def test_invalid_reference_raises(self):
        with pytest.raises(SourceError, match="Invalid GitHub repository URL"):
            GitHubUrlSource.parse_repository_path("https://gitlab.com/acme/sites")


class TestRepositoryEntry:
    @pytest.mark.parametrize(
        "name,entry_type,download_url,expected",
        [
            ("sites.txt", "file", "https://raw/x", True),
            ("SITES.CSV", "file", "https://raw/x", True),
            ("notes.md", "file", "https://raw/x", True),
            ("data.json", "file", "https://raw/x", True),
            ("script.py", "file", "https://raw/x", False),
            ("lists", "dir", None, False),
            ("sites.txt", "file", None, False),
        ],
    )
    def test_is_supported_file(self, name, entry_type, download_url, expected):
        entry = RepositoryEntry(name=name, type=entry_type, path=name, download_url=download_url)
        assert entry.is_supported_file is expected


class TestFetchUrls:
    @pytest.mark.asyncio
    async def test_repository_root_collects_supported_files(self, httpx_mock):
        httpx_mock.add_response(
            url=CONTENTS_URL,
            match_headers={"Accept": "application/vnd.github.v3+json"},
            json=[_entry("sites.txt"), _entry("script.py"), _entry("lists", "dir"), _entry("more.csv")],
        )
        httpx_mock.add_response(
            url="https://raw.githubusercontent.com/acme/sites/main/sites.txt", text="https://a.com\nb.com\n"
        )
        httpx_mock.add_response(
            url="https://raw.githubusercontent.com/acme/sites/main/more.csv", text="https://c.com,x\nhttps://a.com,y\n"
        )

        source = GitHubUrlSource()
        try:
            urls = await source.fetch_urls("https://github.com/acme/sites")
        finally:
            await source.close()

        assert urls == ["https://a.com", "https://b.com", "https://c.com"]

    @pytest.mark.asyncio
    async def test_max_count_stops_fetching_more_files(self, httpx_mock):
        httpx_mock.add_response(url=CONTENTS_URL, json=[_entry("one.txt"), _entry("two.txt")])
        httpx_mock.add_response(
            url="https://raw.githubusercontent.com/acme/sites/main/one.txt",
            text="https://a.com\nhttps://b.com\nhttps://c.com\n",
        )

        source = GitHubUrlSource()
        try:
            urls = await source.fetch_urls("https://github.com/acme/sites", max_count=2)
        finally:
            await source.close()

        assert urls == ["https://a.com", "https://b.com"]

    @pytest.mark.asyncio
    async def test_direct_blob_link_uses_raw_host(self, httpx_mock):
        httpx_mock.add_response(
            url="https://raw.githubusercontent.com/acme/sites/main/lists/sites.txt", text="example.com\n"
        )

        source = GitHubUrlSource()
        try:
            urls = await source.fetch_urls("https://github.com/acme/sites/blob/main/lists/sites.txt")
        finally:
            await source.close()

        assert urls == ["https://example.com"]

    @pytest.mark.asyncio
    async def test_direct_link_respects_max_count(self, httpx_mock):
        httpx_mock.add_response(
            url="https://raw.githubusercontent.com/acme/sites/main/sites.txt",
            text="https://a.com\nhttps://b.com\nhttps://c.com\n",
        )

        source = GitHubUrlSource()
        try:
            urls = await source.fetch_urls("https://github.com/acme/sites/blob/main/sites.txt", max_count=1)
        finally:
            await source.close()

        assert urls == ["https://a.com"]

    @pytest.mark.asyncio
    async def test_listing_error_yields_empty_list(self, httpx_mock):
        httpx_mock.add_response(url=CONTENTS_URL, status_code=404, json={"message": "Not Found"})

        source = GitHubUrlSource()
        try:
            urls = await source.fetch_urls("https://github.com/acme/sites")
        finally:
            await source.close()

        assert urls == []

    @pytest.mark.asyncio
    async def test_non_list_listing_yields_empty_list(self, httpx_mock):
        httpx_mock.add_response(url=CONTENTS_URL, json={"name": "README.md", "type": "file"})

        source = GitHubUrlSource()
        try:
            urls = await source.fetch_urls("https://github.com/acme/sites")
        finally:
            await source.close()

        assert urls == []

    @pytest.mark.asyncio
    async def test_null_and_non_string_fields_are_skipped(self, httpx_mock):
        httpx_mock.add_response(
            url=CONTENTS_URL,
            json=[
                {"name": None, "type": "file", "download_url": "https://raw.example/x"},
                {"name": "sites.txt", "type": "file", "download_url": 42},
                {"name": 7, "type": None, "path": None, "download_url": None},
                _entry("ok.txt"),
            ],
        )
        httpx_mock.add_response(url="https://raw.githubusercontent.com/acme/sites/main/ok.txt", text="https://ok.com\n")

        source = GitHubUrlSource()
        try:
            urls = await source.fetch_urls("https://github.com/acme/sites")
        finally:
            await source.close()

        assert urls == ["https://ok.com"]

    @pytest.mark.asyncio
    async def test_null_name_only_listing_yields_empty_list(self, httpx_mock):
        httpx_mock.add_response(
            url=CONTENTS_URL, json=[{"name": None, "type": "file", "download_url": "https://raw.example/x"}]
        )

        source = GitHubUrlSource()
        try:
            urls = await source.fetch_urls("https://github.com/acme/sites")
        finally:
            await source.close()

        assert urls == []

    @pytest.mark.asyncio
    async def test_failed_file_is_skipped(self, httpx_mock):
        httpx_mock.add_response(url=CONTENTS_URL, json=[_entry("gone.txt"), _entry("ok.txt")])
        httpx_mock.add_response(url="https://raw.githubusercontent.com/acme/sites/main/gone.txt", status_code=500)
        httpx_mock.add_response(url="https://raw.githubusercontent.com/acme/sites/main/ok.txt", text="https://ok.com\n")

        source = GitHubUrlSource()
        try:
            urls = await source.fetch_urls("https://github.com/acme/sites")
        finally:
            await source.close()

        assert urls == ["https://ok.com"]

    @pytest.mark.asyncio
    async def test_invalid_reference_yields_empty_list(self):
        source = GitHubUrlSource()
        try:
            urls = await source.fetch_urls("not a repository")
        finally:
            await source.close()

        assert urls == []

    @pytest.mark.asyncio
    async def test_transient_error_is_retried(self, httpx_mock):
        httpx_mock.add_exception(httpx.ConnectError("connection reset"), url=CONTENTS_URL)
        httpx_mock.add_response(url=CONTENTS_URL, json=[])

        source = GitHubUrlSource()
        try:
            urls = await source.fetch_urls("https://github.com/acme/sites")
        finally:
            await source.close()

        assert urls == []
        assert len(httpx_mock.get_requests(url=CONTENTS_URL)) == 2


class TestClientInjection:
    @pytest.mark.asyncio
    async def test_uses_injected_client_and_api_base(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.host == "ghe.example.com"
            return httpx.Response(200, json=[])

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        source = GitHubUrlSource(client=client, api_base="https://ghe.example.com/api/v3/")
        try:
            urls = await source.fetch_urls("https://github.com/acme/sites")
        finally:
            await source.close()

        assert urls == []
        assert source.api_base == "https://ghe.example.com/api/v3"
