"""Common Pydantic schemas used across the API."""

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Standard API response envelope."""

    success: bool = True
    count: int | None = None
    data: T


class ErrorResponse(BaseModel):
    """Standard API error response."""

    success: bool = False
    message: str
