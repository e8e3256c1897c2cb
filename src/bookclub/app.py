# ABOUTME: Composition root that wires storage, lookups, and the confirmation dialogue together.
# ABOUTME: Owns the long-lived resources: database connection, HTTP client, and session sweeper.

import logging
import sqlite3
from dataclasses import dataclass

from bookclub.config import Settings
from bookclub.confirmation.collaborators import BookExtractor, ChatTransport, SentimentAnalyzer
from bookclub.confirmation.flow import ConfirmationFlow
from bookclub.confirmation.intake import ReviewIntake
from bookclub.confirmation.store import (
    Clock,
    InMemorySessionStore,
    SessionStore,
    SessionSweeper,
    utc_clock,
)
from bookclub.db.catalog import BookCatalog
from bookclub.db.connection import open_database
from bookclub.db.reviews import ReviewLedger
from bookclub.metadata.googlebooks import GoogleBooksProvider
from bookclub.metadata.http import BookclubHttpClient
from bookclub.metadata.matching import ExternalMatcher
from bookclub.metadata.provider import BookDataProvider

logger = logging.getLogger(__name__)


@dataclass
class Pipeline:
    """The wired-up review pipeline. Call close() when done.

    close() stops the sweeper thread, then releases the HTTP client and the
    database connection.
    """

    conn: sqlite3.Connection
    store: SessionStore
    catalog: BookCatalog
    reviews: ReviewLedger
    flow: ConfirmationFlow
    intake: ReviewIntake
    sweeper: SessionSweeper
    http_client: BookclubHttpClient | None = None

    def close(self) -> None:
        self.sweeper.stop()
        if self.http_client is not None:
            self.http_client.close()
        self.conn.close()


def create_provider(api_key: str | None = None) -> tuple[BookDataProvider, BookclubHttpClient]:
    """Create the default metadata provider (Google Books) and the client it owns."""
    http_client = BookclubHttpClient()
    return GoogleBooksProvider(http_client, api_key=api_key), http_client


def build_pipeline(
    settings: Settings,
    *,
    transport: ChatTransport,
    extractor: BookExtractor,
    sentiment: SentimentAnalyzer,
    provider: BookDataProvider,
    http_client: BookclubHttpClient | None = None,
    store: SessionStore | None = None,
    clock: Clock = utc_clock,
) -> Pipeline:
    """Open the database, wire the flow and intake, and start the session sweeper.

    The pipeline takes ownership of http_client, if given, and closes it on
    close(). Every enrichment run gets a fresh ExternalMatcher over the
    shared provider, so all runs observe one rate-limit timeline.
    """

    def external_matcher_factory() -> ExternalMatcher:
        return ExternalMatcher(provider)

    conn = open_database(settings.db_path)
    catalog = BookCatalog(conn)
    reviews = ReviewLedger(conn)
    store = store if store is not None else InMemorySessionStore()

    flow = ConfirmationFlow(
        store=store,
        catalog=catalog,
        reviews=reviews,
        transport=transport,
        sentiment=sentiment,
        external_matcher_factory=external_matcher_factory,
        bot_username=settings.bot_username,
        threshold=settings.threshold,
        clock=clock,
    )
    intake = ReviewIntake(
        flow=flow,
        store=store,
        catalog=catalog,
        reviews=reviews,
        transport=transport,
        extractor=extractor,
        external_matcher_factory=external_matcher_factory,
        threshold=settings.threshold,
    )
    sweeper = SessionSweeper(store, ttl=settings.session_ttl, clock=clock)
    sweeper.start()
    logger.debug("Pipeline ready (db=%s)", settings.db_path)
    return Pipeline(
        conn=conn,
        store=store,
        catalog=catalog,
        reviews=reviews,
        flow=flow,
        intake=intake,
        sweeper=sweeper,
        http_client=http_client,
    )
