"""
Pydantic models for book records and listing filters.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class Book(BaseModel):
    """
    A single book record.

    ``id`` and ``created_at`` are minted by the book service when the record
    is created and never change afterwards.
    """
    id: str = Field(..., frozen=True, description="Unique book identifier")
    title: str = Field(..., min_length=1, description="Book title")
    author: str = Field(..., min_length=1, description="Book author")
    year: Optional[int] = Field(None, description="Publication year")
    created_at: datetime = Field(..., frozen=True, description="Creation timestamp (UTC)")


class BookFilter(BaseModel):
    """
    Listing filter.

    An empty ``author`` matches every book. Pagination applies only when both
    ``page`` (1-based) and ``limit`` are positive.
    """
    author: str = Field("", description="Exact, case-sensitive author match")
    page: int = Field(0, description="Page number, starting from 1")
    limit: int = Field(0, description="Books per page")

    def is_paginated(self) -> bool:
        return self.page > 0 and self.limit > 0
