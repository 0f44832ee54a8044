"""API v1 router -- aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from shopscraper.api.v1 import health, scrape, search

api_v1_router = APIRouter()

api_v1_router.include_router(health.router, tags=["health"])
api_v1_router.include_router(scrape.router, tags=["scrape"])
api_v1_router.include_router(search.router, tags=["search"])
