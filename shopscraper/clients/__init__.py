"""Clients for third-party product search APIs."""

from .token_cache import TokenCache
from .ebay import EbayBrowseClient
from .naver import NaverShoppingClient

__all__ = [
    "TokenCache",
    "EbayBrowseClient",
    "NaverShoppingClient",
]
