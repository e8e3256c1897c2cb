# ABOUTME: SQLite database connection management for the Bookclub catalog.
# ABOUTME: Opens or creates the database, applies schema and migrations, and configures the connection.

import sqlite3
from pathlib import Path

from bookclub.db.schema import MIGRATIONS, SCHEMA_V1

DEFAULT_DB_PATH = Path.home() / ".bookclub" / "bookclub.db"


def _schema_version(conn: sqlite3.Connection) -> int | None:
    """Highest applied schema version, or None for an empty database."""
    has_table = conn.execute(
        "SELECT 1 FROM sqlite_master WHERE type='table' AND name='schema_version'"
    ).fetchone()
    if has_table is None:
        return None
    row = conn.execute("SELECT MAX(version) FROM schema_version").fetchone()
    return row[0] or 0


def open_database(path: Path | None = None) -> sqlite3.Connection:
    """Open or create the Bookclub database.

    Creates parent directories as needed, applies the schema on first use,
    runs pending migrations in order, and enables WAL mode, foreign keys,
    and sqlite3.Row access.

    Args:
        path: Path to the database file. Defaults to ~/.bookclub/bookclub.db.

    Returns:
        A configured sqlite3.Connection.
    """
    db_path = path or DEFAULT_DB_PATH
    db_path.parent.mkdir(parents=True, exist_ok=True)

    # Handlers may run on a transport's worker thread.
    conn = sqlite3.connect(str(db_path), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")

    version = _schema_version(conn)
    if version is None:
        conn.executescript(SCHEMA_V1)
        version = 1

    for target, sql in MIGRATIONS:
        if target > version:
            conn.executescript(sql)

    return conn
