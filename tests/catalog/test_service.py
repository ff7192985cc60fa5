"""
Unit tests for the book service.
Tests validation, identity assignment and error propagation.
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock, call

import pytest

from catalog.errors import ErrorKind, InvalidInputError, NotFoundError
from catalog.models import BookFilter
from catalog.repository import InMemoryBookRepository
from catalog.service import BookService


class TestCreate:
    """Test cases for BookService.create."""

    def test_create_then_get(self, book_service):
        """Test a created book reads back with a fresh id and timestamp."""
        before = datetime.now(timezone.utc)
        book = book_service.create("Dune", "Frank Herbert", 1965)

        fetched = book_service.get(book.id)
        assert fetched == book
        assert fetched.id
        assert fetched.title == "Dune"
        assert fetched.author == "Frank Herbert"
        assert fetched.year == 1965
        assert fetched.created_at >= before

    def test_year_is_optional(self, book_service):
        """Test a book can be created without a year."""
        book = book_service.create("Beowulf", "Unknown")
        assert book_service.get(book.id).year is None

    def test_ids_are_unique(self, book_service):
        """Test every created book gets its own id."""
        ids = {book_service.create("Title", "Author").id for _ in range(50)}
        assert len(ids) == 50

    @pytest.mark.parametrize("title,author", [("", "x"), ("x", ""), ("", "")])
    def test_empty_fields_rejected(self, book_service, repository, title, author):
        """Test empty title or author fails and stores nothing."""
        with pytest.raises(InvalidInputError) as exc_info:
            book_service.create(title, author, 2000)

        assert exc_info.value.kind == ErrorKind.INVALID_INPUT
        assert repository.count() == 0


class TestReadAndDelete:
    """Test cases for get, list and delete."""

    def test_get_missing(self, book_service):
        """Test getting an unknown id propagates NotFound."""
        with pytest.raises(NotFoundError):
            book_service.get("never-inserted")

    def test_delete_missing(self, book_service):
        """Test deleting an unknown id propagates NotFound."""
        with pytest.raises(NotFoundError):
            book_service.delete("never-inserted")

    def test_delete(self, book_service):
        """Test a deleted book is gone for good."""
        book = book_service.create("Title", "Author")
        book_service.delete(book.id)

        with pytest.raises(NotFoundError):
            book_service.get(book.id)
        with pytest.raises(NotFoundError):
            book_service.delete(book.id)

    def test_list_filters_by_author(self, book_service):
        """Test listing delegates filtering to the store."""
        created = [book_service.create(f"Title {i}", f"A{i}") for i in range(1, 6)]

        books, total = book_service.list(BookFilter(author="A3"))
        assert total == 1
        assert books == [created[2]]


class TestUpdate:
    """Test cases for BookService.update."""

    def test_update_preserves_identity(self, book_service):
        """Test update replaces title, author and year but keeps id and created_at."""
        original = book_service.create("Old Title", "Old Author", 2001)

        updated = book_service.update(original.id, "New Title", "New Author", 1999)

        assert updated.id == original.id
        assert updated.created_at == original.created_at
        assert updated.title == "New Title"
        assert updated.author == "New Author"
        assert updated.year == 1999
        assert book_service.get(original.id) == updated

    def test_update_clears_year(self, book_service):
        """Test update is a full replacement of the mutable fields."""
        original = book_service.create("Title", "Author", 2001)
        updated = book_service.update(original.id, "Title", "Author")
        assert updated.year is None

    def test_update_missing(self, book_service, repository):
        """Test updating an unknown id fails and leaves the store unchanged."""
        existing = book_service.create("Title", "Author", 2001)

        with pytest.raises(NotFoundError):
            book_service.update("missing", "New Title", "New Author", 1999)

        books, total = repository.list(BookFilter())
        assert total == 1
        assert books == [existing]

    @pytest.mark.parametrize("title,author", [("", "x"), ("x", "")])
    def test_update_empty_fields_rejected(self, book_service, title, author):
        """Test invalid updates fail before touching the stored book."""
        existing = book_service.create("Title", "Author", 2001)

        with pytest.raises(InvalidInputError):
            book_service.update(existing.id, title, author, 1999)

        assert book_service.get(existing.id) == existing

    def test_update_validates_before_lookup(self):
        """Test empty fields are reported even for unknown ids."""
        repository = MagicMock(spec=InMemoryBookRepository)
        service = BookService(repository)

        with pytest.raises(InvalidInputError):
            service.update("missing", "", "Author")

        repository.get.assert_not_called()

    def test_update_reads_then_writes(self, make_book):
        """Test update is a separate read followed by a write to the store."""
        repository = MagicMock(spec=InMemoryBookRepository)
        repository.get.return_value = make_book(1)
        service = BookService(repository)

        updated = service.update("book-1", "New Title", "New Author", 1999)

        assert repository.mock_calls == [call.get("book-1"), call.update(updated)]

    def test_sequential_updates_last_writer_wins(self, book_service):
        """Test the later of two updates is the one that sticks."""
        book = book_service.create("Title", "Author")

        book_service.update(book.id, "First", "Writer One", 1)
        book_service.update(book.id, "Second", "Writer Two", 2)

        stored = book_service.get(book.id)
        assert (stored.title, stored.author, stored.year) == ("Second", "Writer Two", 2)
