# ABOUTME: Runtime settings for Bookclub and their defaults.
# ABOUTME: Values come from CLI options, which also read the matching environment variables.

from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

from bookclub.confirmation.intake import DEFAULT_REVIEW_HASHTAG
from bookclub.confirmation.store import DEFAULT_SESSION_TTL
from bookclub.db.connection import DEFAULT_DB_PATH
from bookclub.metadata.matching import DEFAULT_THRESHOLD

DEFAULT_BOT_USERNAME = "bookclub_bot"


@dataclass(frozen=True)
class Settings:
    """Everything the composition root needs to wire the pipeline.

    Environment variables: BOOKCLUB_DB, GOOGLE_BOOKS_API_KEY, BOT_USERNAME,
    REVIEW_HASHTAG.
    """

    db_path: Path = DEFAULT_DB_PATH
    google_books_api_key: str | None = None
    bot_username: str = DEFAULT_BOT_USERNAME
    review_hashtag: str = DEFAULT_REVIEW_HASHTAG
    threshold: float = DEFAULT_THRESHOLD
    session_ttl: timedelta = DEFAULT_SESSION_TTL
