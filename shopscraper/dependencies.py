"""FastAPI dependency injection providers."""

from typing import AsyncGenerator, Optional

from fastapi import Depends, Query, Request

from shopscraper.clients import EbayBrowseClient, NaverShoppingClient, TokenCache
from shopscraper.config import settings
from shopscraper.scrapers import ScrapeConfig, WebScraper
from shopscraper.scrapers.utils.browser_manager import get_browser_manager


def get_scrape_config(
    paginate: Optional[bool] = Query(None, description="Follow numbered result pages"),
) -> ScrapeConfig:
    """Build the per-request scraper configuration from settings."""
    overrides = {}
    if paginate is not None:
        overrides["paginate"] = paginate
    return ScrapeConfig.from_settings(settings, **overrides)


async def get_scraper(
    config: ScrapeConfig = Depends(get_scrape_config),
) -> AsyncGenerator[WebScraper, None]:
    """Yield a scraper for one request.

    Each request gets its own run state. The Playwright browser is the
    process-wide one, so closing the scraper leaves it running.

    Usage:
        @router.get("/scrape")
        async def scrape(scraper: WebScraper = Depends(get_scraper)):
            records = await scraper.run(url, selector)
    """
    scraper = WebScraper(config, browser_manager=get_browser_manager())
    try:
        yield scraper
    finally:
        await scraper.close()


def get_ebay_token_cache(request: Request) -> TokenCache:
    """Return the app-wide eBay token cache, creating it on first use.

    The lifespan installs a fresh cache on startup, so the lock inside it
    belongs to the event loop serving the app.
    """
    cache = getattr(request.app.state, "ebay_token_cache", None)
    if cache is None:
        cache = request.app.state.ebay_token_cache = TokenCache()
    return cache


def get_ebay_client(token_cache: TokenCache = Depends(get_ebay_token_cache)) -> EbayBrowseClient:
    """Raises ConfigError when eBay credentials are missing."""
    return EbayBrowseClient(
        client_id=settings.EBAY_CLIENT_ID,
        client_secret=settings.EBAY_CLIENT_SECRET,
        token_cache=token_cache,
        marketplace_id=settings.EBAY_MARKETPLACE_ID,
    )


def get_naver_client() -> NaverShoppingClient:
    """Raises ConfigError when Naver credentials are missing."""
    return NaverShoppingClient(
        client_id=settings.NAVER_CLIENT_ID,
        client_secret=settings.NAVER_CLIENT_SECRET,
    )
