"""OAuth access-token cache with single-flight refresh."""

import asyncio
import time
from typing import Awaitable, Callable, Optional, Tuple

import structlog

logger = structlog.get_logger(__name__)

# Fetcher returns (access_token, expires_in_seconds)
TokenFetcher = Callable[[], Awaitable[Tuple[str, int]]]


class TokenCache:
    """Holds one access token and its expiry.

    Concurrent callers that find the token missing or expired share a
    single refresh: the first one fetches while the rest wait on the lock
    and then reuse its result.
    """

    # Refresh this many seconds before the provider's expiry
    EXPIRY_BUFFER_SECONDS = 300

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.token: Optional[str] = None
        self.expires_at: Optional[float] = None
        self._clock = clock
        self._lock = asyncio.Lock()

    def is_valid(self) -> bool:
        return bool(self.token) and self.expires_at is not None and self._clock() < self.expires_at

    def invalidate(self) -> None:
        self.token = None
        self.expires_at = None

    async def get(self, fetch: TokenFetcher) -> str:
        """Return a valid token, calling ``fetch`` only when a refresh is due."""
        if self.is_valid():
            return self.token

        async with self._lock:
            # Another caller may have refreshed while we waited
            if self.is_valid():
                return self.token

            token, expires_in = await fetch()
            self.token = token
            self.expires_at = self._clock() + max(0, expires_in - self.EXPIRY_BUFFER_SECONDS)
            logger.info("access_token_refreshed", expires_in=expires_in)
            return token
