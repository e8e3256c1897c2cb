# ABOUTME: Shared Click options for Bookclub CLI commands.
# ABOUTME: Each option also reads its environment variable (BOOKCLUB_DB, GOOGLE_BOOKS_API_KEY, ...).

from pathlib import Path

import click

from bookclub.config import DEFAULT_BOT_USERNAME
from bookclub.confirmation.intake import DEFAULT_REVIEW_HASHTAG
from bookclub.db.connection import DEFAULT_DB_PATH
from bookclub.metadata.matching import DEFAULT_THRESHOLD

db_option = click.option(
    "--db",
    "db_path",
    type=click.Path(path_type=Path),
    default=None,
    envvar="BOOKCLUB_DB",
    help=f"Path to the database (default: {DEFAULT_DB_PATH})",
)

api_key_option = click.option(
    "--api-key",
    default=None,
    envvar="GOOGLE_BOOKS_API_KEY",
    help="Google Books API key (optional; raises the request quota).",
)

threshold_option = click.option(
    "-t",
    "--threshold",
    type=click.FloatRange(0.0, 1.0),
    default=DEFAULT_THRESHOLD,
    show_default=True,
    help="Minimum title and author similarity for a candidate.",
)

bot_username_option = click.option(
    "--bot-username",
    default=DEFAULT_BOT_USERNAME,
    envvar="BOT_USERNAME",
    show_default=True,
    help="Bot username used in mini app deep links.",
)

hashtag_option = click.option(
    "--hashtag",
    default=DEFAULT_REVIEW_HASHTAG,
    envvar="REVIEW_HASHTAG",
    show_default=True,
    help="Hashtag that marks a message as a review.",
)
