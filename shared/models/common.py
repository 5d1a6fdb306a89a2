"""
Common Models
=============

Response envelopes and pagination helpers used by every router.

Version: 0.1.0
"""

from datetime import UTC, datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field


T = TypeVar("T")


class ORMModel(BaseModel):
    """Base for response models read straight from SQLAlchemy rows."""

    model_config = ConfigDict(from_attributes=True)


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    success: bool = True
    message: str


class PaginatedResponse(BaseModel, Generic[T]):
    """Paginated API response."""

    items: list[T]
    total: int
    page: int = 1
    page_size: int = 20
    pages: int = 1

    @classmethod
    def build(cls, items: list[Any], total: int, page: int, page_size: int) -> "PaginatedResponse[T]":
        """Assemble a page, computing the page count from the total."""
        pages = (total + page_size - 1) // page_size if total > 0 else 1
        return cls(items=items, total=total, page=page, page_size=page_size, pages=pages)


class HealthResponse(BaseModel):
    """Service health check response."""

    status: str = "healthy"
    service: str
    version: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    # Component health
    components: dict[str, dict[str, Any]] = Field(default_factory=dict)
