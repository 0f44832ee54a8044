"""ShopScraper -- FastAPI Application Entry Point."""

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from shopscraper import __version__
from shopscraper.api.v1.router import api_v1_router
from shopscraper.clients import TokenCache
from shopscraper.config import settings
from shopscraper.core.exceptions import ConfigError
from shopscraper.schemas import ErrorResponse
from shopscraper.scrapers.utils.browser_manager import get_browser_manager

# Configure logging
logging.basicConfig(
    level=logging.INFO if settings.DEBUG else logging.WARNING,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown events."""
    # Startup
    logger.info("Starting ShopScraper API server...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Debug mode: {settings.DEBUG}")
    if settings.USE_PROXY and not settings.PROXY_URL:
        logger.warning("USE_PROXY is set but PROXY_URL is empty; requests go direct")

    # Token cache lives with the app so its lock belongs to the serving loop
    app.state.ebay_token_cache = TokenCache()

    yield

    # Shutdown
    logger.info("Shutting down ShopScraper API server...")

    # Stop browser manager (closes Playwright)
    try:
        await get_browser_manager().stop()
        logger.info("Browser manager stopped")
    except Exception as e:
        logger.warning(f"Error stopping browser manager: {e}")


app = FastAPI(
    title="ShopScraper API",
    description="Listing scraper with retry, pagination and marketplace search",
    version=__version__,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(message=message).model_dump())


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return _error(exc.status_code, str(exc.detail))


@app.exception_handler(ConfigError)
async def config_error_handler(request: Request, exc: ConfigError):
    logger.warning(f"Configuration error on {request.url.path}: {exc.message}")
    return _error(503, exc.message)


@app.exception_handler(httpx.HTTPStatusError)
async def upstream_error_handler(request: Request, exc: httpx.HTTPStatusError):
    logger.error(f"Upstream API error on {request.url.path}: {exc.response.status_code}")
    return _error(502, f"Upstream API returned {exc.response.status_code}")


# Register API v1 router
app.include_router(api_v1_router, prefix="/api/v1")


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "ShopScraper API",
        "version": __version__,
        "description": "Listing scraper with retry, pagination and marketplace search",
        "docs": "/docs" if settings.DEBUG else None,
        "health": "/api/v1/health",
        "scrape": "/api/v1/scrape?url=&selector=",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("shopscraper.main:app", host="0.0.0.0", port=settings.PORT, reload=settings.DEBUG)
