"""eBay Browse API client.

Proxies item searches to the eBay Browse API.
Documentation: https://developer.ebay.com/api-docs/buy/browse/overview.html
"""

from typing import Any, Dict, Optional, Tuple

import httpx
import structlog

from shopscraper.clients.token_cache import TokenCache
from shopscraper.core.exceptions import ConfigError
from shopscraper.scrapers.utils.retry import http_retry


logger = structlog.get_logger()


class EbayBrowseClient:
    """eBay Browse API client using the OAuth 2.0 client-credentials flow.

    Requires EBAY_CLIENT_ID and EBAY_CLIENT_SECRET. The access token lives
    in an injectable TokenCache so one token can be shared between clients.
    """

    API_BASE_URL = "https://api.ebay.com/buy/browse/v1"
    OAUTH_URL = "https://api.ebay.com/identity/v1/oauth2/token"
    OAUTH_SCOPE = "https://api.ebay.com/oauth/api_scope"

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        token_cache: Optional[TokenCache] = None,
        marketplace_id: str = "EBAY_US",
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
    ):
        if not client_id or not client_secret:
            raise ConfigError(
                "eBay API credentials not configured. "
                "Set EBAY_CLIENT_ID and EBAY_CLIENT_SECRET."
            )
        self.client_id = client_id
        self.client_secret = client_secret
        self.token_cache = token_cache or TokenCache()
        self.marketplace_id = marketplace_id
        self._transport = transport
        self._timeout = timeout

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    async def _request_token(self) -> Tuple[str, int]:
        """Request a new application token from the OAuth endpoint."""
        logger.info("ebay_requesting_new_token")
        async with self._client() as client:
            response = await client.post(
                self.OAUTH_URL,
                auth=(self.client_id, self.client_secret),
                data={"grant_type": "client_credentials", "scope": self.OAUTH_SCOPE},
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
            response.raise_for_status()
            token_data = response.json()

        return token_data["access_token"], int(token_data.get("expires_in", 7200))

    @http_retry
    async def search(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Call ``item_summary/search`` with pass-through query parameters.

        Args:
            params: Browse API query parameters (q, limit, filter, sort, ...)

        Returns:
            Raw API response

        Raises:
            httpx.HTTPStatusError: If the API returns an error status
        """
        token = await self.token_cache.get(self._request_token)
        headers = {
            "Authorization": f"Bearer {token}",
            "X-EBAY-C-MARKETPLACE-ID": self.marketplace_id,
        }

        async with self._client() as client:
            response = await client.get(
                f"{self.API_BASE_URL}/item_summary/search",
                params=params,
                headers=headers,
            )

        if response.status_code == 401:
            # Token revoked or expired early; next call fetches a new one
            self.token_cache.invalidate()
        if response.is_error:
            logger.error("ebay_search_api_http_error", status_code=response.status_code, params=params)
        response.raise_for_status()

        data = response.json()
        logger.debug("ebay_search_api_success", returned_items=len(data.get("itemSummaries", [])))
        return data
