"""Custom exception classes for the scraper service."""

from typing import Optional


class ShopScraperError(Exception):
    """Base exception for all shopscraper errors."""

    def __init__(self, message: str = "An unexpected error occurred"):
        self.message = message
        super().__init__(self.message)


class ConfigError(ShopScraperError):
    """Raised when required input or credentials are missing.

    Never retried; surfaced to the caller immediately.
    """


class PolicyDisallowedError(ShopScraperError):
    """Raised when a site's robots.txt prohibits scraping."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(f"robots.txt disallows scraping {url}")


class FetchError(ShopScraperError):
    """Raised when a single fetch attempt fails (network, status or parse)."""

    def __init__(self, url: str, message: str, status_code: Optional[int] = None):
        self.url = url
        self.status_code = status_code
        super().__init__(f"Fetch failed for {url}: {message}")


class RetriesExhaustedError(FetchError):
    """Raised when every retry attempt for one page has failed.

    The last underlying FetchError is chained as ``__cause__``.
    """

    def __init__(self, url: str, attempts: int, last_error: Exception):
        self.attempts = attempts
        self.last_error = last_error
        status_code = getattr(last_error, "status_code", None)
        super().__init__(
            url,
            f"gave up after {attempts} attempts ({last_error})",
            status_code=status_code,
        )
