# ABOUTME: Converts between SQLite rows and Bookclub record dataclasses.
# ABOUTME: Handles JSON serialization of the genres list.

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class BookRecord:
    """A cataloged book."""

    id: int
    title: str
    author: str | None = None
    isbn: str | None = None
    cover_url: str | None = None
    external_id: str | None = None
    description: str | None = None
    genres: list[str] = field(default_factory=list)
    publication_year: int | None = None
    page_count: int | None = None
    date_added: str | None = None


@dataclass
class ReviewRecord:
    """A stored review linked (usually) to a book."""

    id: int
    book_id: int | None
    telegram_user_id: int
    review_text: str
    reviewed_at: datetime
    username: str | None = None
    display_name: str | None = None
    sentiment: str | None = None
    message_id: int | None = None
    chat_id: int | None = None


def book_to_row(
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
) -> dict[str, Any]:
    """Build an INSERT-ready dict for the books table."""
    return {
        "title": title,
        "author": author,
        "isbn": isbn,
        "cover_url": cover_url,
        "external_id": external_id,
        "description": description,
        "genres": json.dumps(genres) if genres else None,
        "publication_year": publication_year,
        "page_count": page_count,
    }


def row_to_book(row: Any) -> BookRecord:
    return BookRecord(
        id=row["id"],
        title=row["title"],
        author=row["author"],
        isbn=row["isbn"],
        cover_url=row["cover_url"],
        external_id=row["external_id"],
        description=row["description"],
        genres=json.loads(row["genres"]) if row["genres"] else [],
        publication_year=row["publication_year"],
        page_count=row["page_count"],
        date_added=row["date_added"],
    )


def row_to_review(row: Any) -> ReviewRecord:
    return ReviewRecord(
        id=row["id"],
        book_id=row["book_id"],
        telegram_user_id=row["telegram_user_id"],
        review_text=row["review_text"],
        reviewed_at=datetime.fromisoformat(row["reviewed_at"]),
        username=row["username"],
        display_name=row["display_name"],
        sentiment=row["sentiment"],
        message_id=row["message_id"],
        chat_id=row["chat_id"],
    )
