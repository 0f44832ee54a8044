"""robots.txt policy gate.

The check is a deliberate approximation, not a robots directive parser:
a body counts as prohibiting scraping when it contains the text
``Disallow: /`` or ``Disallow: *`` anywhere. That also matches
path-scoped rules such as ``Disallow: /checkout`` and commented-out
lines. User-agent groups and Allow lines are not interpreted.
"""

from typing import Optional
from urllib.parse import urlparse

import httpx
import structlog

logger = structlog.get_logger(__name__)

_BLOCKING_RULES = ("Disallow: /", "Disallow: *")


def robots_url_for(url: str) -> str:
    """Return ``{scheme}://{host}/robots.txt`` for a target URL."""
    parsed = urlparse(url)
    scheme = parsed.scheme or "https"
    return f"{scheme}://{parsed.netloc}/robots.txt"


def body_disallows(body: str) -> bool:
    """Substring check for a full-site or wildcard disallow rule."""
    return any(rule in body for rule in _BLOCKING_RULES)


class RobotsPolicy:
    """Fail-open robots.txt check performed once before a run."""

    def __init__(
        self,
        timeout_seconds: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the policy gate.

        Args:
            timeout_seconds: Timeout for the robots.txt request
            transport: Optional httpx transport (used by tests)
        """
        self._timeout = timeout_seconds
        self._transport = transport

    async def is_allowed(self, base_url: str, user_agent: str) -> bool:
        """Return whether scraping ``base_url`` may proceed.

        Args:
            base_url: Target page URL
            user_agent: Identity presented on the robots.txt request

        Returns:
            False only when robots.txt was fetched and contains a blocking rule
        """
        robots_url = robots_url_for(base_url)
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
                follow_redirects=True,
            ) as client:
                response = await client.get(robots_url, headers={"User-Agent": user_agent})
                response.raise_for_status()
                body = response.text
        except httpx.HTTPError as e:
            logger.warning("robots_fetch_failed", robots_url=robots_url, error=str(e), fallback="allow")
            return True

        if body_disallows(body):
            logger.warning("robots_disallowed", robots_url=robots_url)
            return False

        logger.info("robots_allowed", robots_url=robots_url)
        return True
