# ABOUTME: Book catalog operations for the Bookclub database.
# ABOUTME: Add, look up, and list books; storage failures surface as PersistenceError.

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager

from bookclub.db.mapping import BookRecord, book_to_row, row_to_book

logger = logging.getLogger(__name__)


class PersistenceError(Exception):
    """Raised when the database cannot be read or written."""


class DuplicateBookError(PersistenceError):
    """Raised when adding a book whose external_id is already cataloged."""


@contextmanager
def storage_errors(operation: str) -> Iterator[None]:
    """Translate sqlite3 errors raised inside the block into PersistenceError."""
    try:
        yield
    except sqlite3.Error as exc:
        raise PersistenceError(f"{operation} failed: {exc}") from exc


class BookCatalog:
    """Wraps a sqlite3 connection and provides typed access to the books table."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def add_book(
        self,
        title: str,
        author: str | None = None,
        *,
        isbn: str | None = None,
        cover_url: str | None = None,
        external_id: str | None = None,
        description: str | None = None,
        genres: list[str] | None = None,
        publication_year: int | None = None,
        page_count: int | None = None,
    ) -> BookRecord:
        """Add a book to the catalog and return the stored record.

        Raises:
            DuplicateBookError: If a book with this external_id already exists.
            PersistenceError: On any other database failure.
        """
        row = book_to_row(
            title,
            author,
            isbn=isbn,
            cover_url=cover_url,
            external_id=external_id,
            description=description,
            genres=genres,
            publication_year=publication_year,
            page_count=page_count,
        )
        columns = ", ".join(row.keys())
        placeholders = ", ".join("?" for _ in row)

        try:
            with storage_errors("add_book"):
                cursor = self._conn.execute(
                    f"INSERT INTO books ({columns}) VALUES ({placeholders})",
                    list(row.values()),
                )
                self._conn.commit()
        except PersistenceError as exc:
            if "UNIQUE constraint failed: books.external_id" in str(exc):
                raise DuplicateBookError(
                    f"Book with external id {external_id} already exists"
                ) from exc.__cause__
            raise

        book_id = cursor.lastrowid
        logger.info("Created book %d: %s", book_id, title)
        record = self.get_by_id(book_id)  # type: ignore[arg-type]
        assert record is not None
        return record

    def get_by_id(self, book_id: int) -> BookRecord | None:
        with storage_errors("get_by_id"):
            row = self._conn.execute("SELECT * FROM books WHERE id = ?", (book_id,)).fetchone()
        return row_to_book(row) if row else None

    def get_by_external_id(self, external_id: str) -> BookRecord | None:
        with storage_errors("get_by_external_id"):
            row = self._conn.execute(
                "SELECT * FROM books WHERE external_id = ?", (external_id,)
            ).fetchone()
        return row_to_book(row) if row else None

    def list_all(self) -> list[BookRecord]:
        """Return every book in the catalog, ordered by title."""
        with storage_errors("list_all"):
            rows = self._conn.execute("SELECT * FROM books ORDER BY title").fetchall()
        return [row_to_book(row) for row in rows]

    def list_with_review_counts(self) -> list[tuple[BookRecord, int]]:
        """Return every book with its number of reviews, most reviewed first."""
        with storage_errors("list_with_review_counts"):
            rows = self._conn.execute(
                "SELECT b.*, COUNT(r.id) AS review_count "
                "FROM books b LEFT JOIN reviews r ON r.book_id = b.id "
                "GROUP BY b.id "
                "ORDER BY review_count DESC, b.title"
            ).fetchall()
        return [(row_to_book(row), row["review_count"]) for row in rows]
