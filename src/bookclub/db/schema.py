# ABOUTME: SQL DDL statements for the Bookclub database schema.
# ABOUTME: Defines the books and reviews tables, indexes, and schema versioning.

SCHEMA_V1 = """
-- Book catalog: one row per distinct book
CREATE TABLE books (
    id               INTEGER PRIMARY KEY AUTOINCREMENT,
    title            TEXT NOT NULL,
    author           TEXT,
    isbn             TEXT,
    cover_url        TEXT,
    external_id      TEXT,
    description      TEXT,
    genres           TEXT,
    publication_year INTEGER,
    page_count       INTEGER,
    date_added       TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now'))
);

CREATE UNIQUE INDEX idx_books_external_id ON books(external_id) WHERE external_id IS NOT NULL;
CREATE INDEX idx_books_isbn ON books(isbn) WHERE isbn IS NOT NULL;

-- Reviews posted in the community chat, linked to a confirmed book
CREATE TABLE reviews (
    id                INTEGER PRIMARY KEY AUTOINCREMENT,
    book_id           INTEGER REFERENCES books(id) ON DELETE CASCADE,
    telegram_user_id  INTEGER NOT NULL,
    username          TEXT,
    display_name      TEXT,
    review_text       TEXT NOT NULL,
    sentiment         TEXT CHECK (sentiment IN ('positive', 'negative', 'neutral')),
    message_id        INTEGER,
    chat_id           INTEGER,
    reviewed_at       TEXT NOT NULL,
    date_added        TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now'))
);

CREATE INDEX idx_reviews_book_id ON reviews(book_id);
CREATE UNIQUE INDEX idx_reviews_user_message
    ON reviews(telegram_user_id, message_id) WHERE message_id IS NOT NULL;

-- Schema versioning for future migrations
CREATE TABLE schema_version (
    version    INTEGER NOT NULL,
    applied_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now'))
);

INSERT INTO schema_version (version) VALUES (1);
"""

# Ordered (version, sql) pairs applied on top of SCHEMA_V1.
MIGRATIONS: list[tuple[int, str]] = []
