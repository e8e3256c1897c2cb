# ABOUTME: The `bookclub enrich` command for previewing candidate matches.
# ABOUTME: Runs enrichment against the local catalog and Google Books and prints a table.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from bookclub.cli.options import api_key_option, db_option, threshold_option
from bookclub.db.catalog import BookCatalog
from bookclub.db.connection import DEFAULT_DB_PATH, open_database
from bookclub.metadata.enrichment import enrich_book_info
from bookclub.metadata.googlebooks import GoogleBooksProvider
from bookclub.metadata.http import BookclubHttpClient
from bookclub.metadata.matching import ExternalMatcher, LocalMatcher
from bookclub.metadata.provider import BookDataProvider
from bookclub.metadata.types import BookQuery, ExtractedBookInfo

ALT_SEPARATOR = "::"


def _create_provider(api_key: str | None) -> BookDataProvider:
    """Create the default metadata provider (Google Books)."""
    return GoogleBooksProvider(BookclubHttpClient(), api_key=api_key)


def _parse_alternate(value: str) -> BookQuery:
    """Parse 'Title::Author' (author optional) into a BookQuery."""
    title, _, author = value.partition(ALT_SEPARATOR)
    return BookQuery(title=title.strip(), author=author.strip() or None)


@click.command("enrich")
@click.argument("title")
@click.option("-a", "--author", default=None, help="Author of the book.")
@click.option(
    "--alt",
    "alternates",
    multiple=True,
    help="Alternative book as TITLE::AUTHOR (up to two are used).",
)
@db_option
@api_key_option
@threshold_option
def enrich(
    title: str,
    author: str | None,
    alternates: tuple[str, ...],
    db_path: Path | None,
    api_key: str | None,
    threshold: float,
) -> None:
    """Find catalog and Google Books candidates for a title and author."""
    console = Console()
    extracted = ExtractedBookInfo(
        title=title,
        author=author,
        alternative_books=tuple(_parse_alternate(alt) for alt in alternates),
    )

    conn = open_database(db_path or DEFAULT_DB_PATH)
    try:
        result = enrich_book_info(
            extracted,
            local=LocalMatcher(BookCatalog(conn)),
            external=ExternalMatcher(_create_provider(api_key)),
            threshold=threshold,
        )
    finally:
        conn.close()

    if not result.has_matches:
        console.print("[yellow]No candidates found.[/yellow]")
        return

    table = Table(title=f"Candidates ({result.source})")
    table.add_column("#", style="bold", width=3)
    table.add_column("Title")
    table.add_column("Author")
    table.add_column("ISBN")
    table.add_column("Title %", justify="right")
    table.add_column("Author %", justify="right")
    table.add_column("Source")

    for i, match in enumerate(result.matches, start=1):
        table.add_row(
            str(i),
            match.title,
            match.author or "—",
            match.isbn or "—",
            f"{match.similarity.title:.0%}",
            f"{match.similarity.author:.0%}",
            str(match.source),
        )

    console.print(table)
