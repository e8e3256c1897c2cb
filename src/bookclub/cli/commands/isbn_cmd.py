# ABOUTME: The `bookclub isbn` command for looking a book up by ISBN.
# ABOUTME: Validates the ISBN and prints what Google Books knows about it.

import click
from rich.console import Console

from bookclub.cli.options import api_key_option
from bookclub.metadata.googlebooks import GoogleBooksProvider
from bookclub.metadata.http import BookclubHttpClient, MetadataFetchError
from bookclub.metadata.isbn import clean_isbn, is_valid_isbn
from bookclub.metadata.provider import BookDataProvider


def _create_provider(api_key: str | None) -> BookDataProvider:
    """Create the default metadata provider (Google Books)."""
    return GoogleBooksProvider(BookclubHttpClient(), api_key=api_key)


@click.command("isbn")
@click.argument("value")
@api_key_option
def isbn(value: str, api_key: str | None) -> None:
    """Look up a book by ISBN-10 or ISBN-13."""
    console = Console()
    if not is_valid_isbn(value):
        console.print(f"[red]Not a valid ISBN:[/red] {value}")
        raise SystemExit(1)

    provider = _create_provider(api_key)
    try:
        result = provider.search_by_isbn(clean_isbn(value))
    except MetadataFetchError as exc:
        console.print(f"[red]Lookup failed:[/red] {exc}")
        raise SystemExit(1) from exc

    if result is None:
        console.print(f"[yellow]No book found for ISBN {clean_isbn(value)}.[/yellow]")
        return

    console.print(f"[bold]{result.title}[/bold]")
    fields = [
        ("Author", result.author),
        ("ISBN", result.isbn),
        ("Year", str(result.publication_year) if result.publication_year else None),
        ("Pages", str(result.page_count) if result.page_count else None),
        ("Genres", ", ".join(result.genres) if result.genres else None),
        ("Google ID", result.external_id),
        ("Cover", result.cover_url),
    ]
    for label, field_value in fields:
        if field_value:
            console.print(f"  [dim]{label}:[/dim] {field_value}")
