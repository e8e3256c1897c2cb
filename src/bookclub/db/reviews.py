# ABOUTME: Review persistence for the Bookclub database.
# ABOUTME: Creates review rows and computes per-book counts and sentiment breakdowns.

import logging
import sqlite3
from datetime import datetime

from bookclub.db.catalog import storage_errors
from bookclub.db.mapping import ReviewRecord, row_to_review

logger = logging.getLogger(__name__)

SENTIMENTS = ("positive", "neutral", "negative")


class ReviewLedger:
    """Wraps a sqlite3 connection and provides typed access to the reviews table."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def create_review(
        self,
        *,
        book_id: int | None,
        telegram_user_id: int,
        review_text: str,
        reviewed_at: datetime,
        username: str | None = None,
        display_name: str | None = None,
        message_id: int | None = None,
        chat_id: int | None = None,
        sentiment: str | None = None,
    ) -> int:
        """Store a review and return its row id.

        Raises:
            PersistenceError: On any database failure.
        """
        with storage_errors("create_review"):
            cursor = self._conn.execute(
                "INSERT INTO reviews (book_id, telegram_user_id, username, display_name, "
                "review_text, sentiment, message_id, chat_id, reviewed_at) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    book_id,
                    telegram_user_id,
                    username,
                    display_name,
                    review_text,
                    sentiment,
                    message_id,
                    chat_id,
                    reviewed_at.isoformat(),
                ),
            )
            self._conn.commit()
        logger.info("Created review %d for book %s", cursor.lastrowid, book_id)
        return cursor.lastrowid  # type: ignore[return-value]

    def get_by_id(self, review_id: int) -> ReviewRecord | None:
        with storage_errors("get_review"):
            row = self._conn.execute(
                "SELECT * FROM reviews WHERE id = ?", (review_id,)
            ).fetchone()
        return row_to_review(row) if row else None

    def exists_for_message(self, telegram_user_id: int, message_id: int) -> bool:
        """Whether this chat message has already been saved as a review."""
        with storage_errors("exists_for_message"):
            row = self._conn.execute(
                "SELECT 1 FROM reviews WHERE telegram_user_id = ? AND message_id = ?",
                (telegram_user_id, message_id),
            ).fetchone()
        return row is not None

    def count_reviews_for_book(self, book_id: int) -> int:
        with storage_errors("count_reviews_for_book"):
            row = self._conn.execute(
                "SELECT COUNT(*) FROM reviews WHERE book_id = ?", (book_id,)
            ).fetchone()
        return row[0]

    def sentiment_breakdown(self, book_id: int) -> dict[str, int]:
        """Count a book's reviews per sentiment.

        Reviews whose sentiment could not be determined count as neutral.
        Every sentiment key is present, zero if unused.
        """
        with storage_errors("sentiment_breakdown"):
            rows = self._conn.execute(
                "SELECT COALESCE(sentiment, 'neutral') AS sentiment, COUNT(*) AS n "
                "FROM reviews WHERE book_id = ? GROUP BY 1",
                (book_id,),
            ).fetchall()
        breakdown = dict.fromkeys(SENTIMENTS, 0)
        for row in rows:
            breakdown[row["sentiment"]] = row["n"]
        return breakdown
