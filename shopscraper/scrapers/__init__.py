"""Scraping pipeline for e-commerce listing pages.

This package provides:
- Record/config data structures and the FetchStrategy interface
- Static (httpx) and dynamic (Playwright) fetch strategies
- Per-site profiles with pluggable page-URL builders
- WebScraper, the retry/pagination pipeline route handlers call
"""

from .base import FetchStrategy, Record, RunState, ScrapeConfig
from .scraper import MAX_PAGES, WebScraper
from .sites import (
    PageUrlBuilder,
    PathSegmentPageBuilder,
    QueryParamPageBuilder,
    SiteProfile,
    SiteRegistry,
    default_registry,
)
from .strategies import DynamicFetchStrategy, StaticFetchStrategy

__all__ = [
    # Data structures
    "Record",
    "RunState",
    "ScrapeConfig",
    # Strategies
    "FetchStrategy",
    "StaticFetchStrategy",
    "DynamicFetchStrategy",
    # Site profiles
    "PageUrlBuilder",
    "PathSegmentPageBuilder",
    "QueryParamPageBuilder",
    "SiteProfile",
    "SiteRegistry",
    "default_registry",
    # Pipeline
    "MAX_PAGES",
    "WebScraper",
]
