"""User-Agent rotation for anti-detection.

Each fetch attempt presents a freshly generated desktop browser identity.
"""

from typing import Callable, Optional

import structlog
from fake_useragent import UserAgent

logger = structlog.get_logger(__name__)


# Used whenever the generator cannot produce a value
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36"
)

# Browser-like request headers sent alongside the user agent
BROWSER_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Accept-Encoding": "gzip, deflate, br",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
    "Sec-Fetch-User": "?1",
}


def _desktop_generator() -> Optional[Callable[[], str]]:
    """Build the fake-useragent desktop generator, or None if unavailable."""
    try:
        ua = UserAgent(platforms="desktop", fallback=DEFAULT_USER_AGENT)
    except Exception as e:
        logger.warning("user_agent_generator_unavailable", error=str(e))
        return None
    return lambda: ua.random


class IdentityRotator:
    """Produces a new plausible desktop user-agent on every call.

    Generation never fails: any generator error falls back to
    DEFAULT_USER_AGENT.
    """

    def __init__(self, generator: Optional[Callable[[], str]] = None):
        """Initialize the rotator.

        Args:
            generator: Zero-argument callable returning a user-agent string.
                Defaults to fake-useragent restricted to desktop platforms.
        """
        self._generator = generator if generator is not None else _desktop_generator()

    def next(self) -> str:
        """Return a fresh user-agent string."""
        if self._generator is None:
            return DEFAULT_USER_AGENT
        try:
            identity = self._generator()
        except Exception as e:
            logger.warning("user_agent_generation_failed", error=str(e))
            return DEFAULT_USER_AGENT
        return identity or DEFAULT_USER_AGENT


def build_headers(identity: str) -> dict:
    """Request headers impersonating a real browser with the given identity."""
    return {"User-Agent": identity, **BROWSER_HEADERS}
