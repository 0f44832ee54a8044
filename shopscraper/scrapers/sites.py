"""Per-site scraping profiles.

A SiteProfile tells the scraper how to treat one family of targets:
which fetch strategy to use, how page N's URL is built and which
listing card holds each item's image. Profiles are looked up by host.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional, Tuple
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

import structlog

logger = structlog.get_logger(__name__)


class PageUrlBuilder(ABC):
    """Builds the URL of a numbered results page from the base URL."""

    @abstractmethod
    def build(self, base_url: str, page: int) -> str:
        pass


@dataclass(frozen=True)
class QueryParamPageBuilder(PageUrlBuilder):
    """Pagination through a query-string parameter (``?page=N``).

    An existing value for the parameter is replaced.
    """

    param: str = "page"

    def build(self, base_url: str, page: int) -> str:
        parsed = urlparse(base_url)
        query = [(k, v) for k, v in parse_qsl(parsed.query, keep_blank_values=True) if k != self.param]
        query.append((self.param, str(page)))
        return urlunparse(parsed._replace(query=urlencode(query)))


@dataclass(frozen=True)
class PathSegmentPageBuilder(PageUrlBuilder):
    """Pagination through a path template appended to the base URL."""

    template: str = "catalogue/page-{page}.html"

    def build(self, base_url: str, page: int) -> str:
        parsed = urlparse(base_url)
        path = parsed.path if parsed.path.endswith("/") else parsed.path + "/"
        return urlunparse(parsed._replace(path=path + self.template.format(page=page)))


@dataclass(frozen=True)
class SiteProfile:
    """How a family of target sites is scraped."""

    name: str
    strategy: str = "static"  # 'static' or 'dynamic'
    page_builder: PageUrlBuilder = field(default_factory=PathSegmentPageBuilder)
    image_container: Optional[str] = ".product_pod"

    def __post_init__(self):
        """Validate data after initialization."""
        if self.strategy not in ("static", "dynamic"):
            raise ValueError(f"Invalid strategy: {self.strategy}")


DEFAULT_PROFILE = SiteProfile(name="default")


class SiteRegistry:
    """Registry resolving a target URL to its SiteProfile.

    Hosts are matched by substring so "amazon" covers every Amazon
    storefront; the first registered match wins.
    """

    def __init__(self, default: SiteProfile = DEFAULT_PROFILE):
        self.default = default
        self._profiles: List[Tuple[str, SiteProfile]] = []

    def register(self, host_pattern: str, profile: SiteProfile) -> None:
        """Register a profile for hosts containing ``host_pattern``."""
        self._profiles.append((host_pattern.lower(), profile))
        logger.debug("site_profile_registered", host_pattern=host_pattern, profile=profile.name)

    def resolve(self, url: str) -> SiteProfile:
        """Return the profile for ``url``'s host, or the default profile."""
        host = (urlparse(url).hostname or "").lower()
        for pattern, profile in self._profiles:
            if pattern in host:
                return profile
        return self.default

    def registered_patterns(self) -> List[str]:
        return [pattern for pattern, _ in self._profiles]


def default_registry() -> SiteRegistry:
    """Registry pre-loaded with the known storefront layouts."""
    registry = SiteRegistry()
    registry.register(
        "amazon",
        SiteProfile(
            name="amazon",
            strategy="dynamic",
            page_builder=QueryParamPageBuilder("page"),
            image_container="[data-component-type='s-search-result']",
        ),
    )
    registry.register(
        "ebay",
        SiteProfile(
            name="ebay",
            page_builder=QueryParamPageBuilder("_pgn"),
            image_container=".s-item",
        ),
    )
    return registry
