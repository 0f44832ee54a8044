"""Scrape API endpoint."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from shopscraper.config import settings
from shopscraper.core.exceptions import ConfigError
from shopscraper.dependencies import get_scraper
from shopscraper.schemas import RecordResponse, ScrapeResponse
from shopscraper.scrapers import WebScraper

router = APIRouter()


@router.get("/scrape", response_model=ScrapeResponse)
async def scrape(
    url: Optional[str] = Query(None, description="Absolute URL of the first results page"),
    selector: Optional[str] = Query(None, description="CSS selector for listing elements"),
    scraper: WebScraper = Depends(get_scraper),
):
    """Scrape listings from ``url``.

    Scraping failures (robots.txt refusal, unreachable site) produce an
    empty ``data`` list rather than an error status.
    """
    if not url or not selector:
        raise HTTPException(status_code=400, detail="Missing url or selector")

    try:
        records = await scraper.run(url, selector, deadline=settings.SCRAPE_DEADLINE_SECONDS)
    except ConfigError as e:
        raise HTTPException(status_code=400, detail=e.message)

    return ScrapeResponse(
        count=len(records),
        data=[RecordResponse.model_validate(r) for r in records],
    )
