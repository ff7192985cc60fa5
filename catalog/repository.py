"""
Thread-safe in-memory storage for book records.
"""

import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List, Tuple

import structlog

from catalog.errors import NotFoundError
from catalog.models import Book, BookFilter

logger = structlog.get_logger(__name__)


class ReadWriteLock:
    """
    Shared-read / exclusive-write lock.

    Any number of readers may hold the lock at once. A writer waits until all
    readers have left and holds it alone. Once a writer is waiting, new readers
    queue behind it so a steady stream of reads cannot starve writes.

    The lock is not reentrant: a thread must not take it again, in either mode,
    while already holding it. A nested read deadlocks once a writer is waiting.
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        """Hold the lock in shared mode for the duration of the block."""
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        """Hold the lock exclusively for the duration of the block."""
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class InMemoryBookRepository:
    """
    In-memory book store keyed by id, listed in insertion order.

    The id -> book mapping is an insertion-ordered dict, so it is also the
    listing order: an insert or delete touches both in a single step. Every
    book handed in or out is copied, so callers never share state with the
    store.
    """

    def __init__(self):
        self._lock = ReadWriteLock()
        self._books: Dict[str, Book] = {}

    def create(self, book: Book) -> None:
        """
        Store a new book.

        The caller guarantees ``book.id`` is fresh (the book service mints a
        UUID for every record).

        Args:
            book: Book to store
        """
        with self._lock.write_locked():
            self._books[book.id] = book.model_copy()
        logger.debug("Book stored", book_id=book.id)

    def get(self, book_id: str) -> Book:
        """
        Get a single book by id.

        Args:
            book_id: Book identifier

        Returns:
            A copy of the stored book

        Raises:
            NotFoundError: If no book has this id
        """
        with self._lock.read_locked():
            book = self._books.get(book_id)
            if book is None:
                raise NotFoundError(f"Book with ID '{book_id}' not found")
            return book.model_copy()

    def list(self, book_filter: BookFilter) -> Tuple[List[Book], int]:
        """
        List books in insertion order with optional author filter and pagination.

        Args:
            book_filter: Author filter and pagination parameters

        Returns:
            Tuple of (page of books, total matching books before pagination)
        """
        with self._lock.read_locked():
            matching = [
                book for book in self._books.values()
                if not book_filter.author or book.author == book_filter.author
            ]
            total = len(matching)

            if book_filter.is_paginated():
                start = (book_filter.page - 1) * book_filter.limit
                if start >= total:
                    return [], total
                matching = matching[start:min(start + book_filter.limit, total)]

            return [book.model_copy() for book in matching], total

    def update(self, book: Book) -> None:
        """
        Replace the stored book that has the same id.

        Args:
            book: Full new state of the book

        Raises:
            NotFoundError: If no book has this id
        """
        with self._lock.write_locked():
            if book.id not in self._books:
                raise NotFoundError(f"Book with ID '{book.id}' not found")
            self._books[book.id] = book.model_copy()
        logger.debug("Book replaced", book_id=book.id)

    def delete(self, book_id: str) -> None:
        """
        Remove a book permanently.

        Args:
            book_id: Book identifier

        Raises:
            NotFoundError: If no book has this id
        """
        with self._lock.write_locked():
            if self._books.pop(book_id, None) is None:
                raise NotFoundError(f"Book with ID '{book_id}' not found")
        logger.debug("Book removed", book_id=book_id)

    def count(self) -> int:
        """Number of live books."""
        with self._lock.read_locked():
            return len(self._books)
