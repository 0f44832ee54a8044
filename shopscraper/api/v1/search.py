"""Product search endpoints backed by official marketplace APIs."""

from fastapi import APIRouter, Depends, Query, Request

from shopscraper.clients import EbayBrowseClient, NaverShoppingClient
from shopscraper.dependencies import get_ebay_client, get_naver_client
from shopscraper.schemas import ApiResponse

router = APIRouter()


@router.get("/ebay/search", response_model=ApiResponse)
async def ebay_search(
    request: Request,
    q: str = Query(..., min_length=1, description="Search keywords"),
    client: EbayBrowseClient = Depends(get_ebay_client),
):
    """Search eBay listings through the Browse API.

    Every query parameter (``q``, ``limit``, ``filter``, ``sort``, ...) is
    forwarded unchanged to ``item_summary/search``.
    """
    data = await client.search(dict(request.query_params))
    return ApiResponse(count=len(data.get("itemSummaries", [])), data=data)


@router.get("/naver/search", response_model=ApiResponse)
async def naver_search(
    query: str = Query(..., min_length=1, description="Search keywords"),
    display: int = Query(10, ge=1, le=100, description="Items per page"),
    start: int = Query(1, ge=1, le=1000, description="Start position (1-indexed)"),
    sort: str = Query("sim", pattern="^(sim|date|asc|dsc)$", description="Sort method"),
    client: NaverShoppingClient = Depends(get_naver_client),
):
    """Keyword product search through the Naver Shopping API.

    Sort options:
    - sim: accuracy
    - date: newest first
    - asc / dsc: price ascending / descending
    """
    data = await client.search({"query": query, "display": display, "start": start, "sort": sort})
    return ApiResponse(count=len(data.get("items", [])), data=data)
