"""Playwright browser lifecycle manager with anti-detection.

One Chromium process is shared; every dynamic fetch gets its own
short-lived context that is closed when the fetch finishes.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional
from urllib.parse import unquote, urlparse

import structlog
from playwright.async_api import async_playwright, Browser, BrowserContext, Playwright

from shopscraper.config import settings

logger = structlog.get_logger()


# Minimal stealth JS to mask automation signals
STEALTH_JS = """
Object.defineProperty(navigator, 'webdriver', { get: () => false });
Object.defineProperty(navigator, 'plugins', { get: () => [1, 2, 3] });
Object.defineProperty(navigator, 'languages', { get: () => ['en-US', 'en'] });
"""

EXTRA_HEADERS = {
    "Accept-Language": "en-US,en;q=0.9",
    "Upgrade-Insecure-Requests": "1",
}


def proxy_settings(proxy_url: Optional[str]) -> Optional[dict]:
    """Convert a proxy URL into Playwright's proxy dict.

    Credentials embedded in the URL are passed separately, since
    Playwright does not read them from the server string.
    """
    if not proxy_url:
        return None
    parsed = urlparse(proxy_url)
    server = f"{parsed.scheme or 'http'}://{parsed.hostname}"
    if parsed.port:
        server += f":{parsed.port}"
    proxy = {"server": server}
    if parsed.username:
        proxy["username"] = unquote(parsed.username)
        proxy["password"] = unquote(parsed.password or "")
    return proxy


class BrowserManager:
    """Manages the Playwright browser and per-fetch contexts."""

    def __init__(self, headless: bool = True):
        self._headless = headless
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._browser is not None

    async def start(self) -> None:
        """Launch the browser if it is not running yet."""
        async with self._lock:
            if self._browser:
                return
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self._headless,
                args=[
                    "--disable-blink-features=AutomationControlled",
                    "--no-sandbox",
                    "--disable-setuid-sandbox",
                    "--window-size=1366,768",
                ],
            )
            logger.info("browser_started", headless=self._headless)

    async def stop(self) -> None:
        """Close the browser and the Playwright driver."""
        async with self._lock:
            if self._browser:
                await self._browser.close()
                self._browser = None
            if self._playwright:
                await self._playwright.stop()
                self._playwright = None
            logger.info("browser_stopped")

    @asynccontextmanager
    async def new_context(
        self,
        user_agent: str,
        proxy_url: Optional[str] = None,
        stealth: bool = True,
    ) -> AsyncIterator[BrowserContext]:
        """Open an isolated browser context, closing it on every exit path.

        Args:
            user_agent: Identity presented by the context
            proxy_url: Optional upstream proxy URL
            stealth: Inject the automation-masking init script
        """
        if not self._browser:
            await self.start()

        context = await self._browser.new_context(
            user_agent=user_agent,
            viewport={"width": 1366, "height": 768},
            locale="en-US",
            proxy=proxy_settings(proxy_url),
            java_script_enabled=True,
        )
        try:
            if stealth:
                await context.set_extra_http_headers(EXTRA_HEADERS)
                await context.add_init_script(STEALTH_JS)
            logger.debug("browser_context_created", has_proxy=bool(proxy_url))
            yield context
        finally:
            await context.close()
            logger.debug("browser_context_closed")


# Singleton instance
_browser_manager: Optional[BrowserManager] = None


def get_browser_manager() -> BrowserManager:
    """Get the global BrowserManager singleton."""
    global _browser_manager
    if _browser_manager is None:
        _browser_manager = BrowserManager(headless=settings.HEADLESS)
    return _browser_manager
