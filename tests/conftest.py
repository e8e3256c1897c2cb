# ABOUTME: Shared pytest fixtures for Bookclub tests.
# ABOUTME: Provides a temporary database with catalog and review ledger, and sample records.

import sqlite3
from collections.abc import Iterator
from datetime import UTC, datetime
from pathlib import Path

import pytest

from bookclub.confirmation.state import PendingReview
from bookclub.db.catalog import BookCatalog
from bookclub.db.connection import open_database
from bookclub.db.reviews import ReviewLedger


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "bookclub.db"


@pytest.fixture
def conn(db_path: Path) -> Iterator[sqlite3.Connection]:
    """A freshly created database connection, closed after the test."""
    connection = open_database(db_path)
    yield connection
    connection.close()


@pytest.fixture
def catalog(conn: sqlite3.Connection) -> BookCatalog:
    return BookCatalog(conn)


@pytest.fixture
def reviews(conn: sqlite3.Connection) -> ReviewLedger:
    return ReviewLedger(conn)


@pytest.fixture
def pending_review() -> PendingReview:
    """A review message from user 42 in chat -100."""
    return PendingReview(
        telegram_user_id=42,
        review_text="Перечитал Дюну, шедевр! #рецензия",
        message_id=7001,
        reviewed_at=datetime(2024, 3, 1, 11, 58, tzinfo=UTC),
        chat_id=-100,
        username="reader42",
        display_name="Анна Книжная",
    )
