"""Health check endpoint."""

from fastapi import APIRouter

from shopscraper.schemas import HealthCheckResponse
from shopscraper.scrapers.utils.browser_manager import get_browser_manager

router = APIRouter()


@router.get("/health", response_model=HealthCheckResponse)
async def health_check():
    """Return service health status.

    The browser is launched lazily on the first dynamic scrape, so
    ``idle`` is a healthy state.
    """
    browser = "running" if get_browser_manager().is_running else "idle"
    return HealthCheckResponse(status="ok", browser=browser)
