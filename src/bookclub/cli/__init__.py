# ABOUTME: CLI package for Bookclub, built on Click.
# ABOUTME: Defines the root command group, its logging flag, and registers subcommands.

import click

from bookclub.cli.commands import books_cmd, enrich_cmd, init_db_cmd, isbn_cmd, review_cmd
from bookclub.cli.logging_setup import setup_logging


@click.group()
@click.version_option(package_name="bookclub")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Show debug logging.")
def cli(verbose: bool) -> None:
    """Bookclub - resolve which book a club review is about and record it."""
    setup_logging("DEBUG" if verbose else "WARNING")


cli.add_command(init_db_cmd.init_db)
cli.add_command(enrich_cmd.enrich)
cli.add_command(isbn_cmd.isbn)
cli.add_command(review_cmd.review)
cli.add_command(books_cmd.books)
