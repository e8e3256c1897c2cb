# ABOUTME: Public API for the Bookclub database layer.
# ABOUTME: Exports connection management, the book catalog, and the review ledger.

from bookclub.db.catalog import BookCatalog, DuplicateBookError, PersistenceError
from bookclub.db.connection import DEFAULT_DB_PATH, open_database
from bookclub.db.mapping import BookRecord, ReviewRecord
from bookclub.db.reviews import ReviewLedger

__all__ = [
    "DEFAULT_DB_PATH",
    "BookCatalog",
    "BookRecord",
    "DuplicateBookError",
    "PersistenceError",
    "ReviewLedger",
    "ReviewRecord",
    "open_database",
]
