# ABOUTME: Tests for the crawl4ai page inspector and its payload parsing
# ABOUTME: The crawler is mocked; no browser is launched

import html
import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from prebid_monitor.core.errors import InspectionError
from prebid_monitor.execution.crawl4ai import (
    PAYLOAD_ATTRIBUTE,
    Crawl4AIPageInspector,
    build_inspection_script,
    crawl4ai_inspector_provider,
    parse_inspection_payload,
)


def _page_with_payload(payload: dict) -> str:
    encoded = html.escape(json.dumps(payload), quote=True)
    return f'<html lang="en" {PAYLOAD_ATTRIBUTE}="{encoded}"><head></head><body></body></html>'


PAYLOAD = {
    "libraries": ["apstag", "googletag"],
    "prebidInstances": [
        {"globalVarName": "pbjs", "version": "v8.40.0", "modules": ["rubiconBidAdapter", "consentManagement"]}
    ],
}


class TestParseInspectionPayload:
    def test_parses_escaped_attribute(self):
        result = parse_inspection_payload(_page_with_payload(PAYLOAD))

        assert result.detected_libraries == ["apstag", "googletag"]
        assert result.integration_instances[0].instance_name == "pbjs"
        assert result.integration_instances[0].version == "v8.40.0"
        assert result.integration_instances[0].module_names == ["rubiconBidAdapter", "consentManagement"]

    def test_missing_attribute_is_empty_result(self):
        result = parse_inspection_payload("<html><body>No script ran</body></html>")

        assert not result.has_signal

    def test_none_html_is_empty_result(self):
        assert not parse_inspection_payload(None).has_signal

    def test_malformed_payload_raises(self):
        page = f'<html {PAYLOAD_ATTRIBUTE}="{{not json"></html>'

        with pytest.raises(InspectionError, match="Malformed inspection payload"):
            parse_inspection_payload(page)

    def test_instance_without_version_raises(self):
        page = _page_with_payload({"libraries": [], "prebidInstances": [{"globalVarName": "pbjs"}]})

        with pytest.raises(InspectionError):
            parse_inspection_payload(page)


class TestInspectionScript:
    def test_script_embeds_attribute_and_delay(self):
        script = build_inspection_script(6.0)

        assert PAYLOAD_ATTRIBUTE in script
        assert "setTimeout(collect, 6000)" in script
        assert "_pbjsGlobals" in script
        assert "installedModules" in script


class TestCrawl4AIPageInspector:
    @pytest.mark.asyncio
    async def test_inspect_success(self):
        crawler = MagicMock()
        crawler.arun = AsyncMock(return_value=MagicMock(success=True, html=_page_with_payload(PAYLOAD)))
        inspector = Crawl4AIPageInspector(crawler, settle_delay_s=2.0)

        result = await inspector.inspect("https://a.com", 30000)

        assert result.has_signal
        call = crawler.arun.await_args
        assert call.kwargs["url"] == "https://a.com"
        run_config = call.kwargs["config"]
        assert run_config.page_timeout == 30000
        assert run_config.wait_until == "networkidle"
        assert run_config.delay_before_return_html > 2.0

    @pytest.mark.asyncio
    async def test_inspect_failed_crawl_raises(self):
        crawler = MagicMock()
        crawler.arun = AsyncMock(
            return_value=MagicMock(success=False, error_message="net::ERR_NAME_NOT_RESOLVED at https://nope.invalid")
        )
        inspector = Crawl4AIPageInspector(crawler)

        with pytest.raises(InspectionError, match="ERR_NAME_NOT_RESOLVED"):
            await inspector.inspect("https://nope.invalid", 30000)

    @pytest.mark.asyncio
    async def test_inspect_no_result_raises(self):
        crawler = MagicMock()
        crawler.arun = AsyncMock(return_value=None)

        with pytest.raises(InspectionError, match="no crawl result"):
            await Crawl4AIPageInspector(crawler).inspect("https://a.com", 30000)


class TestInspectorProvider:
    @pytest.mark.asyncio
    async def test_provider_opens_one_crawler_per_context(self):
        mock_crawler = MagicMock()
        mock_crawler.__aenter__ = AsyncMock(return_value=mock_crawler)
        mock_crawler.__aexit__ = AsyncMock(return_value=None)

        with patch("prebid_monitor.execution.crawl4ai.AsyncWebCrawler", return_value=mock_crawler) as crawler_cls:
            provider = crawl4ai_inspector_provider(headless=True, settle_delay_s=1.0, user_agent="test-agent")
            async with provider() as inspector:
                assert isinstance(inspector, Crawl4AIPageInspector)
                assert inspector.crawler is mock_crawler

        crawler_cls.assert_called_once()
        browser_config = crawler_cls.call_args.kwargs["config"]
        assert browser_config.headless is True
        assert browser_config.user_agent == "test-agent"
        mock_crawler.__aexit__.assert_awaited_once()
