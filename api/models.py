"""
API request and response schemas for the FastAPI application.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class BookRequest(BaseModel):
    """Body of POST /books and PUT /books/{id}.

    Empty title/author are accepted here and rejected by the book service.
    """
    title: str = Field("", description="Book title")
    author: str = Field("", description="Book author")
    year: Optional[int] = Field(None, description="Publication year")


class BookResponse(BaseModel):
    """Book response model for API."""
    id: str = Field(..., description="Unique book identifier")
    title: str = Field(..., description="Book title")
    author: str = Field(..., description="Book author")
    year: Optional[int] = Field(None, description="Publication year")
    created_at: datetime = Field(..., description="Creation timestamp")


class TokenRequest(BaseModel):
    """Body of POST /auth/token."""
    username: str = Field("", description="Username")
    password: str = Field("", description="Password")


class TokenResponse(BaseModel):
    """Issued bearer token."""
    token: str = Field(..., description="Signed bearer token")
    token_type: str = Field("Bearer", description="Authorization scheme")
    expires_in: int = Field(..., description="Seconds until the token expires")


class ErrorResponse(BaseModel):
    """Error response model."""
    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Additional error details")
    status_code: int = Field(..., description="HTTP status code")


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(..., description="Current timestamp")
    version: str = Field(..., description="API version")
    total_books: int = Field(..., description="Number of stored books")
