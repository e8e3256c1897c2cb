# ABOUTME: The `bookclub review` command: records a review through the confirmation dialogue.
# ABOUTME: Plays the chat in the terminal; buttons become numbered choices read with click.prompt.

import itertools
from datetime import UTC, datetime
from pathlib import Path

import click
from rich.console import Console

from bookclub.app import build_pipeline, create_provider
from bookclub.cli.console_transport import (
    ConsoleTransport,
    FixedSentiment,
    StaticExtractor,
    action_buttons,
)
from bookclub.cli.options import (
    api_key_option,
    bot_username_option,
    db_option,
    hashtag_option,
    threshold_option,
)
from bookclub.config import Settings
from bookclub.confirmation.flow import ConfirmationFlow
from bookclub.confirmation.intake import IntakeOutcome, display_name, is_review_message
from bookclub.confirmation.state import TEXT_STATES, PendingReview
from bookclub.confirmation.store import SessionStore
from bookclub.db.connection import DEFAULT_DB_PATH
from bookclub.metadata.http import BookclubHttpClient
from bookclub.metadata.provider import BookDataProvider


def _create_provider(
    api_key: str | None,
) -> tuple[BookDataProvider, BookclubHttpClient | None]:
    """Create the default metadata provider (Google Books) and the client it owns."""
    return create_provider(api_key)


def _run_dialogue(
    flow: ConfirmationFlow,
    store: SessionStore,
    transport: ConsoleTransport,
    user_id: str,
) -> None:
    """Feed terminal input to the flow until the session resolves or is cancelled."""
    callback_ids = itertools.count(1)
    while True:
        session = store.get(user_id)
        if session is None:
            return

        if session.state in TEXT_STATES:
            answer = click.prompt("Reply (empty line cancels)", default="", show_default=False)
            if not answer.strip():
                flow.handle_cancel(user_id)
            else:
                flow.handle_text(user_id, answer, message_id=transport.new_message_id())
            continue

        buttons = action_buttons(transport.keyboard_for(session.prompt_message_id))
        choice = click.prompt("Choose", type=click.IntRange(1, len(buttons)))
        flow.handle_action(
            user_id, buttons[choice - 1].action or "", callback_id=f"cli-{next(callback_ids)}"
        )


@click.command("review")
@click.argument("text")
@click.option("--title", default=None, help="Title of the reviewed book, as extracted.")
@click.option("--author", default=None, help="Author of the reviewed book, as extracted.")
@click.option("--hint", default=None, help="Extra 'Title - Author' hint for extraction.")
@click.option(
    "--sentiment",
    type=click.Choice(["positive", "neutral", "negative"]),
    default=None,
    help="Sentiment to record for the review.",
)
@click.option("--user-id", type=int, default=1, show_default=True, help="Reviewer's user id.")
@click.option("--username", default=None, help="Reviewer's username.")
@click.option("--first-name", default=None, help="Reviewer's first name.")
@click.option("--last-name", default=None, help="Reviewer's last name.")
@click.option(
    "--message-id",
    type=int,
    default=None,
    help="Id of the review message (default: current timestamp).",
)
@db_option
@api_key_option
@bot_username_option
@hashtag_option
@threshold_option
def review(
    text: str,
    title: str | None,
    author: str | None,
    hint: str | None,
    sentiment: str | None,
    user_id: int,
    username: str | None,
    first_name: str | None,
    last_name: str | None,
    message_id: int | None,
    db_path: Path | None,
    api_key: str | None,
    bot_username: str,
    hashtag: str,
    threshold: float,
) -> None:
    """Record a review, confirming its book interactively."""
    console = Console()
    if not is_review_message(text, hashtag):
        console.print(f"[yellow]Not a review: the text must contain {hashtag}.[/yellow]")
        raise SystemExit(1)

    settings = Settings(
        db_path=db_path or DEFAULT_DB_PATH,
        google_books_api_key=api_key,
        bot_username=bot_username,
        review_hashtag=hashtag,
        threshold=threshold,
    )
    transport = ConsoleTransport(console)
    provider, http_client = _create_provider(api_key)
    pipeline = build_pipeline(
        settings,
        transport=transport,
        extractor=StaticExtractor(title, author),
        sentiment=FixedSentiment(sentiment),  # type: ignore[arg-type]
        provider=provider,
        http_client=http_client,
    )

    now = datetime.now(UTC)
    pending = PendingReview(
        telegram_user_id=user_id,
        review_text=text,
        message_id=message_id if message_id is not None else int(now.timestamp()),
        reviewed_at=now,
        chat_id=user_id,
        username=username,
        display_name=display_name(first_name, last_name, username),
    )

    try:
        outcome = pipeline.intake.process_review(pending, hint)
        if outcome is not IntakeOutcome.STARTED:
            raise SystemExit(1)
        _run_dialogue(pipeline.flow, pipeline.store, transport, str(user_id))
    finally:
        pipeline.close()
