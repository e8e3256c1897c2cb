# ABOUTME: The `bookclub init-db` command.
# ABOUTME: Creates the database file and applies the schema and any pending migrations.

from pathlib import Path

import click
from rich.console import Console

from bookclub.cli.options import db_option
from bookclub.db.connection import DEFAULT_DB_PATH, open_database


@click.command("init-db")
@db_option
def init_db(db_path: Path | None) -> None:
    """Create the Bookclub database if it does not exist yet."""
    console = Console()
    path = db_path or DEFAULT_DB_PATH
    conn = open_database(path)
    conn.close()
    console.print(f"[green]Database ready:[/green] {path}")
