"""
Pytest configuration and shared fixtures.
"""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from api.auth import AccessGate, TokenService
from api.config import APIConfig
from api.main import create_app
from catalog.models import Book
from catalog.repository import InMemoryBookRepository
from catalog.service import BookService

TEST_SECRET = "test-secret-key-with-enough-bytes-for-hs256"


@pytest.fixture
def api_config():
    """Create API configuration for testing."""
    return APIConfig(
        auth_username="admin",
        auth_password="secret",
        secret_key=TEST_SECRET,
        algorithm="HS256",
        access_token_expire_hours=24,
        log_format="console",
    )


@pytest.fixture
def repository():
    """Create an empty book store."""
    return InMemoryBookRepository()


@pytest.fixture
def book_service(repository):
    """Create a book service over the test store."""
    return BookService(repository)


@pytest.fixture
def token_service(api_config):
    """Create a token service from the test configuration."""
    return TokenService.from_config(api_config)


@pytest.fixture
def access_gate(token_service):
    """Create an access gate over the test token service."""
    return AccessGate(token_service)


@pytest.fixture
def make_book():
    """Factory for books with predictable fields."""
    def _make_book(i: int, author: str = None) -> Book:
        return Book(
            id=f"book-{i}",
            title=f"Title {i}",
            author=author or f"Author {i}",
            year=2000 + i,
            created_at=datetime.now(timezone.utc),
        )
    return _make_book


@pytest.fixture
def app(api_config):
    """Create a fresh application with its own empty store."""
    return create_app(api_config)


@pytest.fixture
def client(app):
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def auth_headers(app):
    """Authorization headers carrying a valid token for the test app."""
    token = app.state.token_service.issue("admin", "secret")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def expired_token():
    """A correctly signed token whose expiry has already passed."""
    import jwt

    now = datetime.now(timezone.utc)
    payload = {
        "sub": "admin",
        "iat": int((now - timedelta(hours=25)).timestamp()),
        "exp": int((now - timedelta(hours=1)).timestamp()),
    }
    return jwt.encode(payload, TEST_SECRET, algorithm="HS256")
