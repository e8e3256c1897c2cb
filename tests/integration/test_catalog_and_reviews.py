# ABOUTME: Integration tests for BookCatalog and ReviewLedger against real SQLite.
# ABOUTME: Covers uniqueness, JSON fields, counts, sentiment breakdowns, and error wrapping.

import sqlite3
from datetime import UTC, datetime

import pytest

from bookclub.db.catalog import BookCatalog, DuplicateBookError, PersistenceError
from bookclub.db.reviews import ReviewLedger

REVIEWED_AT = datetime(2024, 3, 1, 12, 0, tzinfo=UTC)


def _review(reviews: ReviewLedger, book_id: int, message_id: int, sentiment: str | None) -> int:
    return reviews.create_review(
        book_id=book_id,
        telegram_user_id=42,
        review_text="#рецензия",
        reviewed_at=REVIEWED_AT,
        message_id=message_id,
        sentiment=sentiment,
    )


class TestBookCatalog:
    """Tests for BookCatalog."""

    def test_add_and_get(self, catalog: BookCatalog) -> None:
        record = catalog.add_book(
            "Dune",
            "Frank Herbert",
            isbn="9780441172719",
            external_id="gb1",
            genres=["Fiction", "Science Fiction"],
            publication_year=1965,
            page_count=604,
        )

        assert record.id > 0
        assert record.date_added is not None
        fetched = catalog.get_by_id(record.id)
        assert fetched == record
        assert fetched.genres == ["Fiction", "Science Fiction"]
        assert catalog.get_by_external_id("gb1") == record

    def test_missing_lookups_return_none(self, catalog: BookCatalog) -> None:
        assert catalog.get_by_id(999) is None
        assert catalog.get_by_external_id("nope") is None

    def test_duplicate_external_id(self, catalog: BookCatalog) -> None:
        catalog.add_book("Dune", external_id="gb1")
        with pytest.raises(DuplicateBookError):
            catalog.add_book("Dune (paperback)", external_id="gb1")

    def test_books_without_external_id_are_not_unique(self, catalog: BookCatalog) -> None:
        catalog.add_book("Дюна")
        catalog.add_book("Дюна")
        assert len(catalog.list_all()) == 2

    def test_list_with_review_counts(self, catalog: BookCatalog, reviews: ReviewLedger) -> None:
        dune = catalog.add_book("Дюна", "Фрэнк Герберт")
        solaris = catalog.add_book("Солярис", "Станислав Лем")
        _review(reviews, solaris.id, 1, "positive")
        _review(reviews, solaris.id, 2, None)

        rows = catalog.list_with_review_counts()
        assert [(book.id, count) for book, count in rows] == [(solaris.id, 2), (dune.id, 0)]

    def test_errors_are_wrapped(self, conn: sqlite3.Connection) -> None:
        catalog = BookCatalog(conn)
        conn.close()
        with pytest.raises(PersistenceError):
            catalog.list_all()


class TestReviewLedger:
    """Tests for ReviewLedger."""

    def test_create_and_read_back(self, catalog: BookCatalog, reviews: ReviewLedger) -> None:
        book = catalog.add_book("Дюна")
        review_id = reviews.create_review(
            book_id=book.id,
            telegram_user_id=42,
            review_text="Шедевр #рецензия",
            reviewed_at=REVIEWED_AT,
            username="reader42",
            display_name="Анна Книжная",
            message_id=7001,
            chat_id=-100,
            sentiment="positive",
        )

        record = reviews.get_by_id(review_id)
        assert record is not None
        assert record.book_id == book.id
        assert record.reviewed_at == REVIEWED_AT
        assert record.display_name == "Анна Книжная"
        assert reviews.exists_for_message(42, 7001)
        assert not reviews.exists_for_message(42, 7002)

    def test_same_message_cannot_be_saved_twice(
        self, catalog: BookCatalog, reviews: ReviewLedger
    ) -> None:
        book = catalog.add_book("Дюна")
        _review(reviews, book.id, 1, None)
        with pytest.raises(PersistenceError):
            _review(reviews, book.id, 1, None)

    def test_rejects_unknown_sentiment(self, catalog: BookCatalog, reviews: ReviewLedger) -> None:
        book = catalog.add_book("Дюна")
        with pytest.raises(PersistenceError):
            _review(reviews, book.id, 1, "ecstatic")

    def test_sentiment_breakdown_counts_unknown_as_neutral(
        self, catalog: BookCatalog, reviews: ReviewLedger
    ) -> None:
        book = catalog.add_book("Дюна")
        for message_id, sentiment in enumerate(["positive", "positive", "negative", None], 1):
            _review(reviews, book.id, message_id, sentiment)

        assert reviews.count_reviews_for_book(book.id) == 4
        assert reviews.sentiment_breakdown(book.id) == {
            "positive": 2,
            "neutral": 1,
            "negative": 1,
        }

    def test_breakdown_for_unreviewed_book(self, catalog: BookCatalog, reviews: ReviewLedger) -> None:
        book = catalog.add_book("Дюна")
        assert reviews.sentiment_breakdown(book.id) == {"positive": 0, "neutral": 0, "negative": 0}

    def test_deleting_book_removes_its_reviews(
        self, conn: sqlite3.Connection, catalog: BookCatalog, reviews: ReviewLedger
    ) -> None:
        book = catalog.add_book("Дюна")
        review_id = _review(reviews, book.id, 1, None)
        conn.execute("DELETE FROM books WHERE id = ?", (book.id,))
        conn.commit()
        assert reviews.get_by_id(review_id) is None
