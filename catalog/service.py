"""
Book service: input validation and identity assignment around the store.
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional, Tuple

import structlog

from catalog.errors import InvalidInputError
from catalog.models import Book, BookFilter
from catalog.repository import InMemoryBookRepository

logger = structlog.get_logger(__name__)


def _require_fields(title: str, author: str) -> None:
    if not title or not author:
        raise InvalidInputError("title and author are required")


class BookService:
    """
    Application layer for books.

    This is the only component that mints book ids and creation timestamps.
    Every store failure propagates to the caller unchanged.
    """

    def __init__(self, repository: InMemoryBookRepository):
        self.repository = repository

    def create(self, title: str, author: str, year: Optional[int] = None) -> Book:
        """
        Create a new book.

        Args:
            title: Book title (required)
            author: Book author (required)
            year: Optional publication year

        Returns:
            The stored book with its new id and creation timestamp

        Raises:
            InvalidInputError: If title or author is empty
        """
        _require_fields(title, author)

        book = Book(
            id=str(uuid.uuid4()),
            title=title,
            author=author,
            year=year,
            created_at=datetime.now(timezone.utc),
        )
        self.repository.create(book)

        logger.info("Book created", book_id=book.id, author=author)
        return book

    def get(self, book_id: str) -> Book:
        """Get a book by id. Raises NotFoundError if absent."""
        return self.repository.get(book_id)

    def list(self, book_filter: BookFilter) -> Tuple[List[Book], int]:
        """List books with the store's filtering and pagination rules."""
        return self.repository.list(book_filter)

    def update(
        self,
        book_id: str,
        title: str,
        author: str,
        year: Optional[int] = None
    ) -> Book:
        """
        Replace the mutable fields of an existing book.

        The existing record is read and written back as two separate store
        calls. Concurrent updates of the same id are last-writer-wins.

        Args:
            book_id: Book identifier
            title: New title (required)
            author: New author (required)
            year: New publication year; None clears it

        Returns:
            The updated book

        Raises:
            InvalidInputError: If title or author is empty
            NotFoundError: If no book has this id
        """
        _require_fields(title, author)

        existing = self.repository.get(book_id)
        updated = existing.model_copy(update={"title": title, "author": author, "year": year})
        self.repository.update(updated)

        logger.info("Book updated", book_id=book_id)
        return updated

    def delete(self, book_id: str) -> None:
        """Delete a book by id. Raises NotFoundError if absent."""
        self.repository.delete(book_id)
        logger.info("Book deleted", book_id=book_id)
