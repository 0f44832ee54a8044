"""Pytest configuration and shared fixtures."""

import itertools
from typing import List, Optional
from unittest.mock import AsyncMock

import pytest

from shopscraper.scrapers import FetchStrategy, Record, ScrapeConfig, WebScraper
from shopscraper.scrapers.utils import IdentityRotator


BASE_URL = "https://books.toscrape.com/"


def listing_page(titles: List[str], with_images: bool = True) -> str:
    """Build a product grid in the books.toscrape.com layout."""
    cards = []
    for i, title in enumerate(titles, 1):
        image = (
            f'<div class="image_container"><a href="item-{i}/index.html">'
            f'<img src="../media/cache/{i}.jpg" alt="{title}"></a></div>'
            if with_images else ""
        )
        cards.append(
            f'<li><article class="product_pod">{image}'
            f'<h3><a href="item-{i}/index.html" title="{title}">{title[:10]}...</a></h3>'
            f'<p class="price_color">£{10 + i}.00</p></article></li>'
        )
    return f"<html><body><ol class=\"row\">{''.join(cards)}</ol></body></html>"


class ScriptedStrategy(FetchStrategy):
    """Fetch strategy replaying a fixed list of outcomes.

    Each outcome is either a list of records or an exception to raise.
    Once the script runs out, ``default`` is returned.
    """

    name = "static"

    def __init__(self, outcomes=None, default: Optional[List[Record]] = None):
        super().__init__()
        self.outcomes = list(outcomes or [])
        self.default = default if default is not None else []
        self.calls = []

    async def fetch(self, url, selector, identity):
        self.calls.append((url, identity))
        outcome = self.outcomes.pop(0) if self.outcomes else self.default
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    @property
    def urls(self) -> List[str]:
        return [url for url, _ in self.calls]


def records(*titles: str) -> List[Record]:
    return [Record(title=t, url=f"{t.lower()}.html") for t in titles]


@pytest.fixture
def anyio_backend():
    """Use asyncio as the async backend for tests."""
    return "asyncio"


@pytest.fixture
def fast_config():
    """Config with zero page delay and small, jitter-free backoff."""
    return ScrapeConfig(
        rate_limit_ms=0,
        page_jitter_max_ms=0,
        jitter_max_ms=0,
        backoff_base_ms=100,
        backoff_cap_ms=1000,
    )


@pytest.fixture
def sleep():
    """Records every requested delay instead of waiting."""
    return AsyncMock()


@pytest.fixture
def rotator():
    counter = itertools.count(1)
    return IdentityRotator(generator=lambda: f"TestAgent/{next(counter)}")


@pytest.fixture
def make_scraper(fast_config, rotator, sleep):
    """Factory for scrapers wired to a scripted strategy and a fake robots gate."""

    def _make(strategy=None, config=None, allowed=True, **kwargs):
        robots = AsyncMock()
        robots.is_allowed.return_value = allowed
        return WebScraper(
            config or fast_config,
            identity_rotator=rotator,
            robots_policy=robots,
            strategies={"static": strategy} if strategy is not None else None,
            sleep=sleep,
            **kwargs,
        )

    return _make
