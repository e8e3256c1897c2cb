# ABOUTME: The `bookclub books` command for listing cataloged books.
# ABOUTME: Displays a Rich table of every book with its review count.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from bookclub.cli.options import db_option
from bookclub.db.catalog import BookCatalog
from bookclub.db.connection import DEFAULT_DB_PATH, open_database


@click.command("books")
@db_option
def books(db_path: Path | None) -> None:
    """List all books in the catalog with their review counts."""
    console = Console()
    conn = open_database(db_path or DEFAULT_DB_PATH)
    try:
        rows = BookCatalog(conn).list_with_review_counts()
    finally:
        conn.close()

    if not rows:
        console.print("[yellow]No books in the catalog.[/yellow]")
        return

    table = Table()
    table.add_column("ID", style="dim", width=4)
    table.add_column("Title", style="bold")
    table.add_column("Author")
    table.add_column("ISBN")
    table.add_column("Reviews", justify="right")

    for record, review_count in rows:
        table.add_row(
            str(record.id),
            record.title,
            record.author or "[dim]unknown[/dim]",
            record.isbn or "—",
            str(review_count),
        )

    console.print(table)
    console.print(f"\n[dim]{len(rows)} book(s)[/dim]")
