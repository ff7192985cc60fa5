"""
FastAPI application for the Bookshelf API.
"""

import time
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.auth import AccessGate, TokenService, require_subject
from api.config import APIConfig, config as default_config
from api.models import (
    BookRequest, BookResponse, ErrorResponse, HealthResponse,
    TokenRequest, TokenResponse
)
from catalog.errors import CatalogError, ErrorKind, UnauthorizedError
from catalog.models import Book, BookFilter
from catalog.repository import InMemoryBookRepository
from catalog.service import BookService
from utilities.logger import bind_request_context, clear_request_context, setup_logging

logger = structlog.get_logger(__name__)

STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
}


def _error_response(status_code: int, error: str, detail: Optional[str] = None, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, detail=detail, status_code=status_code).model_dump(),
        headers=headers
    )


def get_book_service(request: Request) -> BookService:
    return request.app.state.book_service


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


# Public endpoints
public_router = APIRouter()


@public_router.get("/ping", tags=["Health"])
async def ping():
    """Liveness probe."""
    return {"message": "pong"}


@public_router.get("/health", response_model=HealthResponse, tags=["Health"])
def health_check(request: Request):
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        version=request.app.state.config.api_version,
        total_books=request.app.state.repository.count()
    )


@public_router.post("/echo", tags=["Health"])
async def echo(request: Request):
    """
    Echo the raw request body back unchanged.

    The body is never decoded, so key order and whitespace survive byte for byte.
    """
    body = await request.body()
    if not body:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="empty body")
    return Response(content=body, media_type="application/json")


@public_router.post("/auth/token", response_model=TokenResponse, tags=["Auth"])
def issue_token(
    credentials: TokenRequest,
    token_service: TokenService = Depends(get_token_service)
):
    """
    Exchange a username/password pair for a bearer token.

    - **username**: Configured API username
    - **password**: Configured API password
    """
    if not credentials.username or not credentials.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="username and password are required"
        )

    token = token_service.issue(credentials.username, credentials.password)
    return TokenResponse(token=token, expires_in=token_service.expires_in)


# Book endpoints (bearer token required)
books_router = APIRouter(prefix="/books", tags=["Books"], dependencies=[Depends(require_subject)])


@books_router.post(
    "",
    response_model=BookResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED
)
def create_book(payload: BookRequest, service: BookService = Depends(get_book_service)) -> Book:
    """Create a book. Title and author are required."""
    return service.create(payload.title, payload.author, payload.year)


@books_router.get("", response_model=List[BookResponse], response_model_exclude_none=True)
def list_books(
    response: Response,
    author: str = "",
    page: int = 0,
    limit: int = 0,
    service: BookService = Depends(get_book_service)
) -> List[Book]:
    """
    List books in insertion order.

    - **author**: Exact author match (optional)
    - **page**: Page number, starting from 1 (pagination needs page and limit)
    - **limit**: Books per page

    The total number of matching books before pagination is returned in the
    ``X-Total-Count`` header.
    """
    books, total = service.list(BookFilter(author=author, page=page, limit=limit))
    response.headers["X-Total-Count"] = str(total)
    return books


@books_router.get("/{book_id}", response_model=BookResponse, response_model_exclude_none=True)
def get_book(book_id: str, service: BookService = Depends(get_book_service)) -> Book:
    """Get a single book by ID."""
    return service.get(book_id)


@books_router.put("/{book_id}", response_model=BookResponse, response_model_exclude_none=True)
def update_book(
    book_id: str,
    payload: BookRequest,
    service: BookService = Depends(get_book_service)
) -> Book:
    """Replace the title, author and year of a book."""
    return service.update(book_id, payload.title, payload.author, payload.year)


@books_router.delete("/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_book(book_id: str, service: BookService = Depends(get_book_service)):
    """Delete a book permanently."""
    service.delete(book_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Exception handlers
async def catalog_error_handler(request: Request, exc: CatalogError):
    """Map domain failures to HTTP status codes."""
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthorizedError) else None
    return _error_response(STATUS_BY_KIND[exc.kind], exc.message, headers=headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions."""
    return _error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies and query parameters are client errors."""
    return _error_response(status.HTTP_400_BAD_REQUEST, "invalid request", detail=str(exc.errors()))


async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions."""
    logger.error("Unhandled exception", error=str(exc), path=request.url.path)
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal server error",
        detail=str(exc) if request.app.state.config.debug else None
    )


async def log_requests(request: Request, call_next):
    """Bind a request id to the log context and log every request."""
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    clear_request_context()
    bind_request_context(request_id=request_id)

    start_time = time.perf_counter()
    try:
        response = await call_next(request)
        logger.info(
            "Request handled",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - start_time) * 1000, 2)
        )
        response.headers["X-Request-ID"] = request_id
        return response
    finally:
        clear_request_context()


def create_app(config: Optional[APIConfig] = None) -> FastAPI:
    """
    Build the application and wire the book store, services and auth gate.

    Args:
        config: Settings to use; defaults to the environment-driven settings

    Returns:
        Configured FastAPI application
    """
    config = config or default_config

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        setup_logging(config.log_level, config.log_format, config.log_file, config.debug)
        logger.info("Starting Bookshelf API", version=config.api_version)
        yield
        logger.info("Shutting down Bookshelf API")

    app = FastAPI(
        title=config.api_title,
        description=config.api_description,
        version=config.api_version,
        lifespan=lifespan
    )

    repository = InMemoryBookRepository()
    token_service = TokenService.from_config(config)

    app.state.config = config
    app.state.repository = repository
    app.state.book_service = BookService(repository)
    app.state.token_service = token_service
    app.state.access_gate = AccessGate(token_service)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(log_requests)

    app.add_exception_handler(CatalogError, catalog_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.include_router(public_router)
    app.include_router(books_router)

    return app


app = create_app()
