# ABOUTME: Turns an incoming review message into a confirmation session.
# ABOUTME: Guards duplicates, extracts the book, enriches it, and opens the dialogue.

import logging
from collections.abc import Callable
from enum import StrEnum

from bookclub.confirmation.collaborators import (
    BookExtractor,
    ChatTransport,
    ExtractionError,
    TransportError,
)
from bookclub.confirmation.flow import ConfirmationFlow
from bookclub.confirmation.messages import (
    DUPLICATE_REVIEW,
    EXTRACTING,
    EXTRACTION_RATE_LIMITED,
    PENDING_REVIEW,
    PROCESSING_FAILED,
)
from bookclub.confirmation.state import PendingReview
from bookclub.confirmation.store import SessionStore
from bookclub.db.catalog import BookCatalog, PersistenceError
from bookclub.db.reviews import ReviewLedger
from bookclub.metadata.enrichment import enrich_book_info
from bookclub.metadata.matching import DEFAULT_THRESHOLD, ExternalMatcher, LocalMatcher
from bookclub.metadata.similarity import normalize
from bookclub.metadata.types import EnrichmentResult

logger = logging.getLogger(__name__)

DEFAULT_REVIEW_HASHTAG = "#рецензия"


class IntakeOutcome(StrEnum):
    """What process_review did with a message."""

    STARTED = "started"
    DUPLICATE = "duplicate"
    PENDING = "pending"
    FAILED = "failed"


def is_review_message(text: str, hashtag: str = DEFAULT_REVIEW_HASHTAG) -> bool:
    """A review is any non-command message carrying the review hashtag."""
    return not text.startswith("/") and hashtag in text


def display_name(
    first_name: str | None, last_name: str | None, username: str | None
) -> str | None:
    """Full name when both parts are known, else first name, else username."""
    if first_name and last_name:
        return f"{first_name} {last_name}"
    return first_name or username or None


class ReviewIntake:
    """Entry point for review messages: everything up to the first prompt."""

    def __init__(
        self,
        *,
        flow: ConfirmationFlow,
        store: SessionStore,
        catalog: BookCatalog,
        reviews: ReviewLedger,
        transport: ChatTransport,
        extractor: BookExtractor,
        external_matcher_factory: Callable[[], ExternalMatcher],
        threshold: float = DEFAULT_THRESHOLD,
    ) -> None:
        self._flow = flow
        self._store = store
        self._reviews = reviews
        self._transport = transport
        self._extractor = extractor
        self._external_matcher_factory = external_matcher_factory
        self._threshold = threshold
        self._local = LocalMatcher(catalog)

    def process_review(self, review: PendingReview, hints: str | None = None) -> IntakeOutcome:
        """Start confirming the book of a review message.

        Replies to the review with a status message that becomes the
        session's prompt. Extraction returning None still opens the
        dialogue, with only the manual entry options.

        Args:
            review: The review message and its author.
            hints: Optional "Title - Author" text supplied alongside the review.

        Returns:
            IntakeOutcome describing whether a session was started.

        Raises:
            PersistenceError: If the duplicate check cannot read the database.
        """
        user_id = str(review.telegram_user_id)
        if self._reviews.exists_for_message(review.telegram_user_id, review.message_id):
            logger.info("Review message %d already saved", review.message_id)
            self._transport.send_message(
                review.chat_id, DUPLICATE_REVIEW, reply_to=review.message_id
            )
            return IntakeOutcome.DUPLICATE

        if self._store.get(user_id) is not None:
            logger.info("User %s already has a confirmation in progress", user_id)
            self._transport.send_message(
                review.chat_id, PENDING_REVIEW, reply_to=review.message_id
            )
            return IntakeOutcome.PENDING

        prompt_id = self._transport.send_message(
            review.chat_id, EXTRACTING, reply_to=review.message_id
        )
        try:
            extracted = self._extractor.extract_book_info(review.review_text, hints)
            if extracted is None or not normalize(extracted.title):
                logger.info("No book extracted from review %d", review.message_id)
                extracted = None
                enrichment = EnrichmentResult.empty()
            else:
                logger.info(
                    "Extracted %r by %r (confidence %s)",
                    extracted.title,
                    extracted.author,
                    extracted.confidence,
                )
                enrichment = enrich_book_info(
                    extracted,
                    local=self._local,
                    external=self._external_matcher_factory(),
                    threshold=self._threshold,
                )
        except (ExtractionError, PersistenceError) as exc:
            logger.exception("Failed to process review %d", review.message_id)
            self._discard_prompt(review, prompt_id)
            rate_limited = isinstance(exc, ExtractionError) and exc.rate_limited
            self._transport.send_message(
                review.chat_id,
                EXTRACTION_RATE_LIMITED if rate_limited else PROCESSING_FAILED,
                reply_to=review.message_id,
            )
            return IntakeOutcome.FAILED

        self._flow.start_confirmation(user_id, extracted, review, prompt_id, enrichment)
        return IntakeOutcome.STARTED

    def _discard_prompt(self, review: PendingReview, prompt_id: int) -> None:
        try:
            self._transport.delete_message(review.chat_id, prompt_id)
        except TransportError as exc:
            logger.debug("Could not delete status message %d: %s", prompt_id, exc)
