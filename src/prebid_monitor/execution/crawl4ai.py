# ABOUTME: Crawl4AI-backed page inspector that reads ad-tech globals from a loaded page
# ABOUTME: An injected script serializes its findings into an attribute parsed from the returned HTML

import html
import json
import re
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from crawl4ai import AsyncWebCrawler, BrowserConfig, CacheMode, CrawlerRunConfig
from pydantic import ValidationError

from prebid_monitor.core.errors import InspectionError
from prebid_monitor.core.models import InspectionResult, IntegrationInstance
from prebid_monitor.execution.base import InspectorProvider, PageInspector
from prebid_monitor.utils.logging import get_logger

PAYLOAD_ATTRIBUTE = "data-prebid-monitor"
PAYLOAD_PATTERN = re.compile(rf'{PAYLOAD_ATTRIBUTE}="([^"]*)"')

# Extra time for the delayed write to land before the HTML is captured
CAPTURE_MARGIN_S = 0.5

INSPECTION_SCRIPT_TEMPLATE = """
(() => {
  const collect = () => {
    const data = { libraries: [], prebidInstances: [] };
    if (window.apstag) data.libraries.push('apstag');
    if (window.googletag) data.libraries.push('googletag');
    if (window.ats) data.libraries.push('ats');
    if (Array.isArray(window._pbjsGlobals)) {
      window._pbjsGlobals.forEach((name) => {
        const instance = window[name];
        if (instance && instance.version && instance.installedModules) {
          data.prebidInstances.push({
            globalVarName: name,
            version: String(instance.version),
            modules: Array.from(instance.installedModules, String),
          });
        }
      });
    }
    document.documentElement.setAttribute('%(attribute)s', JSON.stringify(data));
  };
  collect();
  setTimeout(collect, %(settle_ms)d);
})();
"""


def build_inspection_script(settle_delay_s: float) -> str:
    """Render the in-page detection script for the given settle delay."""
    return INSPECTION_SCRIPT_TEMPLATE % {"attribute": PAYLOAD_ATTRIBUTE, "settle_ms": int(settle_delay_s * 1000)}


def parse_inspection_payload(page_html: str | None) -> InspectionResult:
    """Read the detection payload back out of captured page HTML.

    A page where the script never ran yields an empty result.

    Raises:
        InspectionError: If the payload is present but not valid JSON
    """
    match = PAYLOAD_PATTERN.search(page_html or "")
    if not match:
        return InspectionResult()

    try:
        payload: dict[str, Any] = json.loads(html.unescape(match.group(1)))
        return InspectionResult(
            detected_libraries=[str(name) for name in payload.get("libraries", [])],
            integration_instances=[
                IntegrationInstance(
                    instance_name=item["globalVarName"],
                    version=item["version"],
                    module_names=item.get("modules", []),
                )
                for item in payload.get("prebidInstances", [])
            ],
        )
    except (json.JSONDecodeError, AttributeError, KeyError, TypeError, ValidationError) as e:
        raise InspectionError(f"Malformed inspection payload: {e}") from e


class Crawl4AIPageInspector:
    """Inspect pages with a shared crawl4ai browser."""

    def __init__(self, crawler: AsyncWebCrawler, settle_delay_s: float = 6.0):
        self.crawler = crawler
        self.settle_delay_s = settle_delay_s
        self.script = build_inspection_script(settle_delay_s)
        self.logger = get_logger(__name__)

    async def inspect(self, url: str, timeout_ms: int) -> InspectionResult:
        run_config = CrawlerRunConfig(
            cache_mode=CacheMode.BYPASS,
            page_timeout=timeout_ms,
            wait_until="networkidle",
            js_code=self.script,
            delay_before_return_html=self.settle_delay_s + CAPTURE_MARGIN_S,
            verbose=False,
        )

        self.logger.debug("Loading page", url=url, timeout_ms=timeout_ms, settle_delay_s=self.settle_delay_s)
        result = await self.crawler.arun(url=url, config=run_config)  # type: ignore[assignment]

        if not result:
            raise InspectionError(f"Error processing {url}: no crawl result returned")
        if not result.success:  # type: ignore[attr-defined]
            raise InspectionError(result.error_message or f"Error processing {url}: crawl failed")  # type: ignore[attr-defined]

        inspection = parse_inspection_payload(result.html)  # type: ignore[attr-defined]
        self.logger.debug(
            "Parsed inspection payload",
            url=url,
            libraries=inspection.detected_libraries,
            prebid_instances=len(inspection.integration_instances),
        )
        return inspection


def crawl4ai_inspector_provider(
    headless: bool = True,
    settle_delay_s: float = 6.0,
    user_agent: str | None = None,
) -> InspectorProvider:
    """Build a provider that opens one crawl4ai browser per batch."""

    @asynccontextmanager
    async def open_inspector() -> AsyncIterator[PageInspector]:
        browser_options = {"user_agent": user_agent} if user_agent else {}
        browser_config = BrowserConfig(headless=headless, verbose=False, **browser_options)
        logger = get_logger(__name__)
        logger.debug("Starting browser", headless=headless)
        async with AsyncWebCrawler(config=browser_config) as crawler:
            yield Crawl4AIPageInspector(crawler, settle_delay_s=settle_delay_s)
        logger.debug("Browser closed")

    return open_inspector
