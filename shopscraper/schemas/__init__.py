"""Pydantic request/response schemas."""

from .common import ApiResponse, ErrorResponse
from .listing import HealthCheckResponse, RecordResponse, ScrapeResponse

__all__ = [
    "ApiResponse",
    "ErrorResponse",
    "HealthCheckResponse",
    "RecordResponse",
    "ScrapeResponse",
]
