"""Naver Shopping search API client.

Documentation: https://developers.naver.com/docs/serviceapi/search/shopping/shopping.md
"""

from typing import Any, Dict, Optional

import httpx
import structlog

from shopscraper.core.exceptions import ConfigError
from shopscraper.scrapers.utils.retry import http_retry


logger = structlog.get_logger()


class NaverShoppingClient:
    """Keyword product search against the Naver Search API."""

    API_BASE_URL = "https://openapi.naver.com/v1/search/shop.json"
    ALLOWED_PARAMS = ("query", "display", "start", "sort", "filter", "exclude")

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
    ):
        if not client_id or not client_secret:
            raise ConfigError(
                "Naver API credentials not configured. "
                "Set NAVER_CLIENT_ID and NAVER_CLIENT_SECRET."
            )
        self.client_id = client_id
        self.client_secret = client_secret
        self._transport = transport
        self._timeout = timeout

    @http_retry
    async def search(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Search products; unknown parameters are dropped.

        Raises:
            httpx.HTTPStatusError: If the API returns an error status
        """
        query = {k: v for k, v in params.items() if k in self.ALLOWED_PARAMS}
        headers = {
            "X-Naver-Client-Id": self.client_id,
            "X-Naver-Client-Secret": self.client_secret,
        }

        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            response = await client.get(self.API_BASE_URL, params=query, headers=headers)

        if response.status_code == 429:
            logger.warning("naver_rate_limit_hit", query=query.get("query"))
        response.raise_for_status()

        data = response.json()
        logger.debug("naver_search_api_success", total=data.get("total"), returned_items=len(data.get("items", [])))
        return data
