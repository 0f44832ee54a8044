"""Core scraper data structures and the fetch strategy interface.

Every fetch strategy (plain HTTP or browser automation) inherits from
FetchStrategy and returns Record objects extracted with a CSS selector.
"""

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from typing import List, Optional

import structlog


@dataclass(frozen=True)
class Record:
    """One listing entry extracted from a page."""

    title: str
    url: Optional[str] = None
    image: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class ScrapeConfig:
    """Immutable configuration snapshot for one scraper instance."""

    rate_limit_ms: int = 3000
    max_retries: int = 3
    request_timeout_ms: int = 15000
    use_proxy: bool = False
    proxy_url: Optional[str] = None
    backoff_base_ms: int = 2000
    backoff_cap_ms: int = 30000
    jitter_max_ms: int = 1000
    page_jitter_max_ms: int = 2000
    robots_timeout_ms: int = 5000
    headless: bool = True
    stealth_mode: bool = True
    paginate: bool = True
    output_file: Optional[str] = None

    def __post_init__(self):
        """Validate data after initialization."""
        if self.max_retries < 1:
            raise ValueError("max_retries must be >= 1")
        if self.request_timeout_ms <= 0:
            raise ValueError("request_timeout_ms must be positive")
        for name in ("rate_limit_ms", "backoff_base_ms", "backoff_cap_ms",
                     "jitter_max_ms", "page_jitter_max_ms"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative")

    @property
    def active_proxy(self) -> Optional[str]:
        """Proxy URL to route through, or None when proxying is off."""
        if self.use_proxy and self.proxy_url:
            return self.proxy_url
        return None

    @classmethod
    def from_settings(cls, settings, **overrides) -> "ScrapeConfig":
        """Build a config from application settings.

        Args:
            settings: Settings instance (see shopscraper.config)
            **overrides: Field values that take precedence over settings
        """
        values = dict(
            rate_limit_ms=settings.RATE_LIMIT_MS,
            max_retries=settings.MAX_RETRIES,
            request_timeout_ms=settings.REQUEST_TIMEOUT_MS,
            use_proxy=settings.USE_PROXY,
            proxy_url=settings.PROXY_URL or None,
            robots_timeout_ms=settings.ROBOTS_TIMEOUT_MS,
            headless=settings.HEADLESS,
            stealth_mode=settings.STEALTH_MODE,
            paginate=settings.PAGINATE,
            output_file=settings.OUTPUT_FILE,
        )
        values.update(overrides)
        return cls(**values)


@dataclass
class RunState:
    """Mutable state owned by a single scraper run."""

    records: List[Record] = field(default_factory=list)
    request_count: int = 0  # one per attempt, not per page


class FetchStrategy(ABC):
    """Abstract fetch strategy: one attempt at turning a URL into records.

    Implementations raise FetchError on any failure so the retry
    controller can decide whether to try again.
    """

    name: str = ""  # Must be overridden in subclass (e.g., "static")

    def __init__(self):
        self.logger = structlog.get_logger(strategy=self.name)

    @abstractmethod
    async def fetch(self, url: str, selector: str, identity: str) -> List[Record]:
        """Fetch one page and extract its records.

        Args:
            url: Absolute page URL
            selector: CSS selector identifying listing elements
            identity: User-agent string to present for this attempt

        Returns:
            Records in document order

        Raises:
            FetchError: On network failure, non-2xx status or parse failure
        """
        pass

    async def close(self) -> None:
        """Release any resources held by the strategy."""
        pass
