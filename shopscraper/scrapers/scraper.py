"""Retry/backoff-driven scraping pipeline.

WebScraper runs one scrape end to end:

    robots.txt gate -> initial page (with retry) -> pagination -> export

Page fetches and retries run strictly one after another. Every wait
(backoff, inter-page delay) goes through the injected ``sleep`` callable,
and every suspension point is an ``await`` so the caller can cancel the
task or bound it with a deadline.
"""

import asyncio
import random
from typing import Awaitable, Callable, Dict, List, Optional, Tuple
from urllib.parse import urlparse

import httpx
import structlog
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception_type, stop_after_attempt

from shopscraper.core.exceptions import (
    ConfigError,
    FetchError,
    PolicyDisallowedError,
    RetriesExhaustedError,
)
from shopscraper.scrapers.base import FetchStrategy, Record, RunState, ScrapeConfig
from shopscraper.scrapers.sites import SiteProfile, SiteRegistry, default_registry
from shopscraper.scrapers.strategies import DynamicFetchStrategy, StaticFetchStrategy
from shopscraper.scrapers.utils.browser_manager import BrowserManager
from shopscraper.scrapers.utils.exporter import save_records
from shopscraper.scrapers.utils.extractor import RecordExtractor
from shopscraper.scrapers.utils.retry import backoff_wait
from shopscraper.scrapers.utils.robots import RobotsPolicy
from shopscraper.scrapers.utils.user_agents import IdentityRotator


logger = structlog.get_logger(__name__)

# Pagination stops once the page index reaches this value
MAX_PAGES = 10

SleepFunc = Callable[[float], Awaitable[None]]


class WebScraper:
    """Scrapes listing records from a target site.

    One instance serves one run at a time; ``state`` is reset at the start
    of every ``run()``.
    """

    def __init__(
        self,
        config: Optional[ScrapeConfig] = None,
        *,
        registry: Optional[SiteRegistry] = None,
        identity_rotator: Optional[IdentityRotator] = None,
        robots_policy: Optional[RobotsPolicy] = None,
        strategies: Optional[Dict[str, FetchStrategy]] = None,
        browser_manager: Optional[BrowserManager] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: SleepFunc = asyncio.sleep,
    ):
        """Initialize the scraper.

        Args:
            config: Immutable scraper configuration
            registry: Site profiles; defaults to the built-in registry
            identity_rotator: User-agent source
            robots_policy: robots.txt gate
            strategies: Strategy instances keyed by name ('static'/'dynamic')
                that replace the ones normally built per site profile
            browser_manager: Shared Playwright manager for dynamic fetches
            transport: httpx transport for static fetches and robots.txt
            sleep: Awaitable delay used for backoff and inter-page waits
        """
        self.config = config or ScrapeConfig()
        self.registry = registry or default_registry()
        self.identity_rotator = identity_rotator or IdentityRotator()
        self.robots_policy = robots_policy or RobotsPolicy(
            timeout_seconds=self.config.robots_timeout_ms / 1000.0,
            transport=transport,
        )
        self._strategy_overrides = dict(strategies or {})
        self._strategies: Dict[Tuple[str, Optional[str]], FetchStrategy] = {}
        self._browser_manager = browser_manager
        self._owns_browser = browser_manager is None
        self._transport = transport
        self._sleep = sleep

        self.state = RunState()
        self.current_identity = self.identity_rotator.next()
        self.logger = logger.bind(scraper="web")

    @property
    def request_count(self) -> int:
        return self.state.request_count

    async def __aenter__(self) -> "WebScraper":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Release strategies and any browser this scraper launched."""
        for strategy in self._strategies.values():
            await strategy.close()
        self._strategies.clear()
        if self._owns_browser and self._browser_manager and self._browser_manager.is_running:
            await self._browser_manager.stop()

    # ------------------------------------------------------------------
    # Strategy selection
    # ------------------------------------------------------------------

    def strategy_for(self, profile: SiteProfile) -> FetchStrategy:
        """Return the fetch strategy serving ``profile``."""
        if profile.strategy in self._strategy_overrides:
            return self._strategy_overrides[profile.strategy]

        key = (profile.strategy, profile.image_container)
        if key not in self._strategies:
            extractor = RecordExtractor(image_container=profile.image_container)
            if profile.strategy == "dynamic":
                if self._browser_manager is None:
                    self._browser_manager = BrowserManager(headless=self.config.headless)
                self._strategies[key] = DynamicFetchStrategy(
                    self.config, extractor, browser_manager=self._browser_manager
                )
            else:
                self._strategies[key] = StaticFetchStrategy(
                    self.config, extractor, transport=self._transport
                )
        return self._strategies[key]

    # ------------------------------------------------------------------
    # Retry controller
    # ------------------------------------------------------------------

    async def fetch_with_retry(self, url: str, selector: str, strategy: FetchStrategy) -> List[Record]:
        """Fetch one page, retrying with exponential backoff and jitter.

        A fresh identity is presented on every attempt and each attempt
        counts as one request.

        Raises:
            RetriesExhaustedError: After ``max_retries`` failed attempts
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.config.max_retries),
            wait=backoff_wait(
                self.config.backoff_base_ms,
                self.config.backoff_cap_ms,
                self.config.jitter_max_ms,
            ),
            retry=retry_if_exception_type(FetchError),
            before_sleep=self._log_retry,
            sleep=self._sleep,
            reraise=True,
        )

        attempt_number = 0
        try:
            async for attempt in retrying:
                with attempt:
                    attempt_number = attempt.retry_state.attempt_number
                    self.current_identity = self.identity_rotator.next()
                    self.state.request_count += 1
                    self.logger.info(
                        "scrape_attempt",
                        request=self.state.request_count,
                        attempt=attempt_number,
                        url=url,
                        strategy=strategy.name,
                    )
                    return await strategy.fetch(url, selector, self.current_identity)
        except FetchError as e:
            self.logger.error("final_attempt_failed", url=url, attempts=attempt_number, error=str(e))
            raise RetriesExhaustedError(url, attempt_number, e) from e

    def _log_retry(self, retry_state: RetryCallState) -> None:
        delay = retry_state.next_action.sleep if retry_state.next_action else 0
        error = retry_state.outcome.exception() if retry_state.outcome else None
        self.logger.warning(
            "retry_scheduled",
            attempt=retry_state.attempt_number,
            delay_ms=round(delay * 1000),
            error=str(error),
        )

    # ------------------------------------------------------------------
    # Paginator
    # ------------------------------------------------------------------

    async def scrape_all(
        self,
        base_url: str,
        selector: str,
        profile: Optional[SiteProfile] = None,
    ) -> List[Record]:
        """Walk numbered pages until an empty page, an error or the page cap.

        Records are appended to ``state.records`` as each page arrives, so a
        cancelled run still keeps what was gathered.

        Returns:
            Records from the paginated pages, in page order
        """
        profile = profile or self.registry.resolve(base_url)
        strategy = self.strategy_for(profile)
        collected: List[Record] = []

        page = 1
        while page < MAX_PAGES:
            url = profile.page_builder.build(base_url, page)
            self.logger.info("scraping_page", page=page, url=url)

            try:
                records = await self.fetch_with_retry(url, selector, strategy)
            except FetchError as e:
                self.logger.error("pagination_error", page=page, error=str(e))
                break

            collected.extend(records)
            self.state.records.extend(records)

            if not records:
                self.logger.info("pagination_exhausted", page=page)
                break

            page += 1
            if page < MAX_PAGES:
                await self._page_delay()

        return collected

    async def _page_delay(self) -> None:
        """Human-like pause between pages."""
        delay_ms = self.config.rate_limit_ms + random.uniform(0, self.config.page_jitter_max_ms)
        self.logger.debug("page_delay", delay_ms=round(delay_ms))
        await self._sleep(delay_ms / 1000.0)

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    async def run(self, url: str, selector: str, deadline: Optional[float] = None) -> List[Record]:
        """Scrape ``url`` and return every record found.

        Never raises for scraping failures: a robots.txt refusal or a failed
        initial page yields an empty list, a failure on a later page keeps
        the records gathered so far.

        Args:
            url: Absolute http(s) URL of the first results page
            selector: CSS selector for listing elements
            deadline: Optional wall-clock budget in seconds; when it expires
                the records gathered so far are returned

        Raises:
            ConfigError: If the url or selector is unusable
        """
        self._validate_input(url, selector)
        self.state = RunState()
        profile = self.registry.resolve(url)

        self.logger.info("scrape_started", url=url, profile=profile.name, user_agent=self.current_identity)

        try:
            if deadline is not None:
                await asyncio.wait_for(self._run_pipeline(url, selector, profile), timeout=deadline)
            else:
                await self._run_pipeline(url, selector, profile)
        except PolicyDisallowedError as e:
            self.logger.error("scrape_aborted", reason="robots", error=e.message)
            return []
        except FetchError as e:
            self.logger.error("scrape_failed", url=url, error=str(e))
            return []
        except asyncio.TimeoutError:
            self.logger.warning(
                "scrape_deadline_exceeded",
                deadline_seconds=deadline,
                partial_count=len(self.state.records),
            )

        records = list(self.state.records)
        if self.config.output_file and records:
            self._export(records)

        self.logger.info("scrape_complete", count=len(records), requests=self.state.request_count)
        return records

    async def _run_pipeline(self, url: str, selector: str, profile: SiteProfile) -> None:
        if not await self.robots_policy.is_allowed(url, self.current_identity):
            raise PolicyDisallowedError(url)

        strategy = self.strategy_for(profile)
        initial = await self.fetch_with_retry(url, selector, strategy)
        self.state.records.extend(initial)
        self.logger.info("initial_scrape_complete", count=len(initial))

        if not self.config.paginate:
            return
        if not initial:
            self.logger.info("pagination_skipped", reason="empty_initial_page")
            return

        await self._page_delay()
        await self.scrape_all(url, selector, profile)

    def _export(self, records: List[Record]) -> None:
        try:
            save_records(records, self.config.output_file)
        except (OSError, ValueError) as e:
            self.logger.error("data_save_failed", path=self.config.output_file, error=str(e))

    @staticmethod
    def _validate_input(url: str, selector: str) -> None:
        if not selector or not selector.strip():
            raise ConfigError("selector is required")
        parsed = urlparse(url or "")
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigError(f"url must be an absolute http(s) URL: {url!r}")
