"""Listing record schemas."""

from typing import List

from pydantic import BaseModel, ConfigDict

from .common import ApiResponse


class RecordResponse(BaseModel):
    """One scraped listing."""

    model_config = ConfigDict(from_attributes=True)

    title: str
    url: str | None = None
    image: str | None = None


class ScrapeResponse(ApiResponse[List[RecordResponse]]):
    """Envelope returned by the scrape endpoint; ``count`` is always set."""

    count: int = 0


class HealthCheckResponse(BaseModel):
    """Health check response."""

    status: str
    browser: str
