"""
Base response schemas for standardized API responses.

These schemas keep list and message payloads in one shape across
every booking endpoint.
"""

from typing import Generic, List, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    """
    Standard paginated response for all list endpoints.
    """

    items: List[T] = Field(description="List of items")
    total: int = Field(description="Total number of items", ge=0)
    page: int = Field(default=1, description="Current page number", ge=1)
    per_page: int = Field(default=20, description="Items per page", ge=1)
    total_pages: int = Field(description="Number of pages for the current page size", ge=0)
    has_next: bool = Field(description="Whether there's a next page")
    has_prev: bool = Field(description="Whether there's a previous page")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "items": ["..."],
                "total": 45,
                "page": 1,
                "per_page": 20,
                "total_pages": 3,
                "has_next": True,
                "has_prev": False,
            }
        }
    )


class HealthResponse(BaseModel):
    """Liveness probe payload."""

    status: str = Field(default="healthy")
    service: str
    version: str
