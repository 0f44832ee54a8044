"""Fetch strategies: plain HTTP and Playwright browser automation."""

from typing import List, Optional

import httpx
from playwright.async_api import Error as PlaywrightError, TimeoutError as PlaywrightTimeoutError

from shopscraper.core.exceptions import FetchError
from shopscraper.scrapers.base import FetchStrategy, Record, ScrapeConfig
from shopscraper.scrapers.utils.browser_manager import BrowserManager
from shopscraper.scrapers.utils.extractor import RecordExtractor
from shopscraper.scrapers.utils.user_agents import build_headers


NAVIGATION_TIMEOUT_MS = 60000
SELECTOR_WAIT_MS = 10000


class StaticFetchStrategy(FetchStrategy):
    """Fetches raw HTML with httpx and extracts records with BeautifulSoup."""

    name = "static"

    def __init__(
        self,
        config: ScrapeConfig,
        extractor: Optional[RecordExtractor] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the strategy.

        Args:
            config: Scraper configuration (timeout, proxy)
            extractor: Record extractor; a plain one is used if omitted
            transport: Optional httpx transport (used by tests)
        """
        super().__init__()
        self.config = config
        self.extractor = extractor or RecordExtractor()
        self._transport = transport

    async def fetch(self, url: str, selector: str, identity: str) -> List[Record]:
        proxy = self.config.active_proxy
        try:
            async with httpx.AsyncClient(
                timeout=self.config.request_timeout_ms / 1000.0,
                proxy=proxy,
                transport=self._transport,
                follow_redirects=True,
            ) as client:
                response = await client.get(url, headers=build_headers(identity))
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            self.logger.error("static_fetch_http_error", url=url, status_code=e.response.status_code)
            raise FetchError(url, str(e), status_code=e.response.status_code) from e
        except httpx.HTTPError as e:
            self.logger.error("static_fetch_failed", url=url, error=str(e), via_proxy=bool(proxy))
            raise FetchError(url, str(e) or type(e).__name__) from e

        return self.extractor.extract(response.text, selector, str(response.url))


class DynamicFetchStrategy(FetchStrategy):
    """Renders the page in a Playwright context before extracting records.

    Used for JavaScript-rendered listings. Each call owns its browser
    context exclusively; the context is torn down whether the fetch
    succeeds or fails.
    """

    name = "dynamic"

    def __init__(
        self,
        config: ScrapeConfig,
        extractor: Optional[RecordExtractor] = None,
        browser_manager: Optional[BrowserManager] = None,
    ):
        super().__init__()
        self.config = config
        self.extractor = extractor or RecordExtractor()
        self._owns_browser = browser_manager is None
        self.browser_manager = browser_manager or BrowserManager(headless=config.headless)

    async def fetch(self, url: str, selector: str, identity: str) -> List[Record]:
        try:
            async with self.browser_manager.new_context(
                user_agent=identity,
                proxy_url=self.config.active_proxy,
                stealth=self.config.stealth_mode,
            ) as context:
                page = await context.new_page()
                await page.goto(url, wait_until="networkidle", timeout=NAVIGATION_TIMEOUT_MS)

                try:
                    await page.wait_for_selector(selector, timeout=SELECTOR_WAIT_MS)
                except PlaywrightTimeoutError:
                    self.logger.warning("selector_not_found", url=url, selector=selector)

                html = await page.content()
                page_url = page.url
        except PlaywrightError as e:
            self.logger.error("dynamic_fetch_failed", url=url, error=str(e))
            raise FetchError(url, str(e)) from e

        return self.extractor.extract(html, selector, page_url or url)

    async def close(self) -> None:
        """Stop the browser if this strategy launched it."""
        if self._owns_browser and self.browser_manager.is_running:
            await self.browser_manager.stop()
