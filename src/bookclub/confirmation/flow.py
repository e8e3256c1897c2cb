# ABOUTME: State machine that walks a user from enrichment candidates to a saved review.
# ABOUTME: Button and text events dispatch through a (state, event) table; each edits one prompt.

import logging
from collections.abc import Callable
from dataclasses import dataclass

from bookclub.confirmation.collaborators import (
    ChatTransport,
    SentimentAnalyzer,
    TransportError,
)
from bookclub.confirmation.messages import (
    ACTION_ACCEPT,
    ACTION_CANCEL,
    ACTION_ISBN,
    ACTION_MANUAL,
    ACTION_SELECT_PREFIX,
    BOOK_NOT_FOUND,
    CANCELLED_TOAST,
    SESSION_EXPIRED,
    Prompt,
    author_prompt,
    book_deep_link,
    cancelled_prompt,
    error_prompt,
    first_review_toast,
    invalid_isbn_prompt,
    isbn_lookup_failed_prompt,
    isbn_not_found_prompt,
    isbn_prompt,
    options_prompt,
    review_tally_message,
    saved_prompt,
    title_prompt,
)
from bookclub.confirmation.state import (
    TEXT_STATES,
    ConfirmationSession,
    FlowEvent,
    FlowState,
    PendingReview,
    TempEntry,
)
from bookclub.confirmation.store import Clock, SessionStore, utc_clock
from bookclub.db.catalog import BookCatalog, PersistenceError
from bookclub.db.mapping import BookRecord
from bookclub.db.reviews import ReviewLedger
from bookclub.metadata.enrichment import enrich_book_info
from bookclub.metadata.http import MetadataFetchError
from bookclub.metadata.isbn import clean_isbn, is_valid_isbn
from bookclub.metadata.matching import (
    DEFAULT_THRESHOLD,
    STRICT_THRESHOLD,
    ExternalMatcher,
    LocalMatcher,
)
from bookclub.metadata.similarity import normalize
from bookclub.metadata.types import (
    Confidence,
    EnrichedBook,
    EnrichmentResult,
    ExtractedBookInfo,
)

logger = logging.getLogger(__name__)


class IllegalTransitionError(Exception):
    """Raised when a button event is not legal in the session's current state."""

    def __init__(self, state: FlowState, event: FlowEvent) -> None:
        super().__init__(f"{event} is not allowed in state {state}")
        self.state = state
        self.event = event


@dataclass(frozen=True)
class FlowInput:
    """One user event delivered to a transition handler."""

    event: FlowEvent
    callback_id: str | None = None
    index: int | None = None
    text: str | None = None
    message_id: int | None = None


Transition = Callable[[ConfirmationSession, FlowInput], None]


class ConfirmationFlow:
    """Drives the confirmation dialogue for every user.

    Sessions live in the injected store. Every handler reads the current
    session, looks up the transition for (state, event) and runs it; state
    changes are written with compare_and_set so a completion that started
    from an older version of the session never overwrites a newer one.

    external_matcher_factory is called once per ISBN lookup so each run gets
    one ExternalMatcher (and one rate-limit timeline) for all of its calls.
    """

    def __init__(
        self,
        *,
        store: SessionStore,
        catalog: BookCatalog,
        reviews: ReviewLedger,
        transport: ChatTransport,
        sentiment: SentimentAnalyzer,
        external_matcher_factory: Callable[[], ExternalMatcher],
        bot_username: str,
        threshold: float = DEFAULT_THRESHOLD,
        clock: Clock = utc_clock,
    ) -> None:
        self._store = store
        self._catalog = catalog
        self._reviews = reviews
        self._transport = transport
        self._sentiment = sentiment
        self._external_matcher_factory = external_matcher_factory
        self._bot_username = bot_username
        self._threshold = threshold
        self._clock = clock
        self._local = LocalMatcher(catalog)

        self._transitions: dict[tuple[FlowState, FlowEvent], Transition] = {
            (FlowState.SHOWING_OPTIONS, FlowEvent.SELECT_CANDIDATE): self._select_candidate,
            (FlowState.SHOWING_OPTIONS, FlowEvent.ACCEPT_EXTRACTED): self._accept_extracted,
            (FlowState.SHOWING_OPTIONS, FlowEvent.CHOOSE_ISBN): self._request_isbn,
            (FlowState.SHOWING_OPTIONS, FlowEvent.CHOOSE_MANUAL): self._request_manual,
            (FlowState.AWAITING_ISBN, FlowEvent.CHOOSE_ISBN): self._request_isbn,
            (FlowState.AWAITING_ISBN, FlowEvent.CHOOSE_MANUAL): self._request_manual,
            (FlowState.AWAITING_ISBN, FlowEvent.TEXT): self._receive_isbn,
            (FlowState.AWAITING_TITLE, FlowEvent.TEXT): self._receive_title,
            (FlowState.AWAITING_AUTHOR, FlowEvent.TEXT): self._receive_author,
        }
        for state in FlowState:
            self._transitions[(state, FlowEvent.CANCEL)] = self._cancel

    # -- entry points ---------------------------------------------------------

    def start_confirmation(
        self,
        user_id: str,
        extracted: ExtractedBookInfo | None,
        pending_review: PendingReview,
        prompt_message_id: int,
        enrichment: EnrichmentResult | None,
    ) -> ConfirmationSession:
        """Open a session for user_id and show the candidate options.

        An existing session for the same user is replaced.
        """
        existing = self._store.get(user_id)
        if existing is not None:
            logger.warning(
                "Replacing confirmation session %s for user %s (state %s)",
                existing.session_id,
                user_id,
                existing.state,
            )
        session = ConfirmationSession(
            user_id=user_id,
            pending_review=pending_review,
            prompt_message_id=prompt_message_id,
            extracted_info=extracted,
            enrichment_result=enrichment or EnrichmentResult.empty(),
            created_at=self._clock(),
        )
        self._store.set(user_id, session)
        logger.info(
            "Started confirmation %s for user %s with %d candidate(s)",
            session.session_id,
            user_id,
            len(session.enrichment_result.matches),
        )
        self._show(session, options_prompt(session))
        return session

    def handle_selection(self, user_id: str, index: int, callback_id: str | None = None) -> bool:
        return self._handle_button(
            user_id, FlowInput(FlowEvent.SELECT_CANDIDATE, callback_id=callback_id, index=index)
        )

    def handle_accept_extracted(self, user_id: str, callback_id: str | None = None) -> bool:
        return self._handle_button(
            user_id, FlowInput(FlowEvent.ACCEPT_EXTRACTED, callback_id=callback_id)
        )

    def handle_isbn_requested(self, user_id: str, callback_id: str | None = None) -> bool:
        return self._handle_button(
            user_id, FlowInput(FlowEvent.CHOOSE_ISBN, callback_id=callback_id)
        )

    def handle_manual_requested(self, user_id: str, callback_id: str | None = None) -> bool:
        return self._handle_button(
            user_id, FlowInput(FlowEvent.CHOOSE_MANUAL, callback_id=callback_id)
        )

    def handle_cancel(self, user_id: str, callback_id: str | None = None) -> bool:
        return self._handle_button(user_id, FlowInput(FlowEvent.CANCEL, callback_id=callback_id))

    def handle_action(self, user_id: str, action: str, callback_id: str | None = None) -> bool:
        """Route a keyboard button's action string to its handler.

        Raises:
            ValueError: If the action string is not one this flow produces.
        """
        if action.startswith(ACTION_SELECT_PREFIX):
            raw_index = action.removeprefix(ACTION_SELECT_PREFIX)
            if not raw_index.isdigit():
                raise ValueError(f"Malformed selection action: {action!r}")
            return self.handle_selection(user_id, int(raw_index), callback_id)
        handlers = {
            ACTION_ACCEPT: self.handle_accept_extracted,
            ACTION_ISBN: self.handle_isbn_requested,
            ACTION_MANUAL: self.handle_manual_requested,
            ACTION_CANCEL: self.handle_cancel,
        }
        if action not in handlers:
            raise ValueError(f"Unknown confirmation action: {action!r}")
        return handlers[action](user_id, callback_id)

    def handle_text(self, user_id: str, text: str, message_id: int | None = None) -> bool:
        """Feed a plain text message to the user's session.

        Returns False when the user has no session or the session is not
        waiting for typed input, so the caller can treat the text as a new
        message rather than part of this dialogue.
        """
        session = self._store.get(user_id)
        if session is None or session.state not in TEXT_STATES:
            return False
        transition = self._transition_for(session.state, FlowEvent.TEXT)
        transition(session, FlowInput(FlowEvent.TEXT, text=text, message_id=message_id))
        return True

    # -- dispatch -------------------------------------------------------------

    def _transition_for(self, state: FlowState, event: FlowEvent) -> Transition:
        try:
            return self._transitions[(state, event)]
        except KeyError:
            raise IllegalTransitionError(state, event) from None

    def _handle_button(self, user_id: str, event: FlowInput) -> bool:
        session = self._store.get(user_id)
        if session is None:
            logger.info("No confirmation session for user %s (%s)", user_id, event.event)
            self._answer(event.callback_id, SESSION_EXPIRED)
            return False
        transition = self._transition_for(session.state, event.event)
        transition(session, event)
        return True

    def _commit(self, session: ConfirmationSession, new: ConfirmationSession | None) -> bool:
        """Write the next version of session, unless it changed meanwhile."""
        if self._store.compare_and_set(session.user_id, session, new):
            return True
        logger.info(
            "Dropping stale update for user %s: session %s generation %d is no longer current",
            session.user_id,
            session.session_id,
            session.generation,
        )
        return False

    # -- transitions ----------------------------------------------------------

    def _select_candidate(self, session: ConfirmationSession, event: FlowInput) -> None:
        matches = session.enrichment_result.matches if session.enrichment_result else ()
        if event.index is None or not 0 <= event.index < len(matches):
            self._answer(event.callback_id, BOOK_NOT_FOUND)
            return
        candidate = matches[event.index]
        logger.info("User %s selected candidate %s", session.user_id, candidate.display_name)
        self._resolve(session, event, lambda: self._book_for_candidate(candidate))

    def _accept_extracted(self, session: ConfirmationSession, event: FlowInput) -> None:
        extracted = session.extracted_info
        result = session.enrichment_result
        if extracted is None or (result is not None and result.has_matches):
            raise IllegalTransitionError(session.state, event.event)
        self._resolve(
            session, event, lambda: self._find_or_create(extracted.title, extracted.author)
        )

    def _request_isbn(self, session: ConfirmationSession, event: FlowInput) -> None:
        if self._commit(session, session.advance(state=FlowState.AWAITING_ISBN)):
            self._show(session, isbn_prompt())
        self._answer(event.callback_id)

    def _request_manual(self, session: ConfirmationSession, event: FlowInput) -> None:
        advanced = session.advance(state=FlowState.AWAITING_TITLE, temp_entry=TempEntry())
        if self._commit(session, advanced):
            self._show(session, title_prompt())
        self._answer(event.callback_id)

    def _cancel(self, session: ConfirmationSession, event: FlowInput) -> None:
        self._store.delete(session.user_id)
        logger.info("User %s cancelled confirmation %s", session.user_id, session.session_id)
        self._show(session, cancelled_prompt())
        self._answer(event.callback_id, CANCELLED_TOAST)

    def _receive_isbn(self, session: ConfirmationSession, event: FlowInput) -> None:
        self._consume(session, event)
        text = (event.text or "").strip()
        if not is_valid_isbn(text):
            self._show(session, invalid_isbn_prompt())
            return

        isbn = clean_isbn(text)
        external = self._external_matcher_factory()
        try:
            found = external.lookup_isbn(isbn)
        except MetadataFetchError as exc:
            logger.warning("ISBN lookup failed for %s: %s", isbn, exc)
            self._show_if_current(session, isbn_lookup_failed_prompt())
            return
        if found is None:
            logger.info("No book found for ISBN %s", isbn)
            self._show_if_current(session, isbn_not_found_prompt())
            return

        discovered = ExtractedBookInfo(
            title=found.title, author=found.author, confidence=Confidence.HIGH
        )
        try:
            enrichment = enrich_book_info(
                discovered, local=self._local, external=external, threshold=self._threshold
            )
        except PersistenceError:
            logger.exception("Enrichment after ISBN %s failed for user %s", isbn, session.user_id)
            self._fail(session)
            return

        advanced = session.advance(
            state=FlowState.SHOWING_OPTIONS,
            extracted_info=discovered,
            enrichment_result=enrichment,
        )
        if self._commit(session, advanced):
            self._show(advanced, options_prompt(advanced))

    def _receive_title(self, session: ConfirmationSession, event: FlowInput) -> None:
        self._consume(session, event)
        title = (event.text or "").strip()
        # Punctuation-only input would vacuously match every catalog book.
        if not normalize(title):
            self._show(session, title_prompt())
            return
        advanced = session.advance(
            state=FlowState.AWAITING_AUTHOR, temp_entry=TempEntry(title=title)
        )
        if self._commit(session, advanced):
            self._show(session, author_prompt(title))

    def _receive_author(self, session: ConfirmationSession, event: FlowInput) -> None:
        self._consume(session, event)
        title = session.temp_entry.title
        author = (event.text or "").strip()
        if title is None:
            # Title was lost; start manual entry over.
            self._request_manual(session, event)
            return
        if not normalize(author):
            self._show(session, author_prompt(title))
            return
        self._resolve(session, event, lambda: self._find_or_create(title, author))

    # -- resolution -----------------------------------------------------------

    def _book_for_candidate(self, candidate: EnrichedBook) -> BookRecord:
        if candidate.local_id is not None:
            record = self._catalog.get_by_id(candidate.local_id)
            if record is not None:
                return record
        if candidate.external_id:
            record = self._catalog.get_by_external_id(candidate.external_id)
            if record is not None:
                return record
        return self._catalog.add_book(
            candidate.title,
            candidate.author,
            isbn=candidate.isbn,
            cover_url=candidate.cover_url,
            external_id=candidate.external_id,
        )

    def _find_or_create(self, title: str, author: str | None) -> BookRecord:
        """Reuse a catalog book only on an exact normalized match, else add one."""
        for match in self._local.search(title, author, STRICT_THRESHOLD):
            record = self._catalog.get_by_id(match.local_id) if match.local_id else None
            if record is not None:
                return record
        return self._catalog.add_book(title, author)

    def _resolve(
        self,
        session: ConfirmationSession,
        event: FlowInput,
        find_book: Callable[[], BookRecord],
    ) -> None:
        # Claim the session first so a duplicate delivery cannot save twice.
        if not self._commit(session, None):
            self._answer(event.callback_id)
            return

        review = session.pending_review
        try:
            book = find_book()
            sentiment = self._analyze(review.review_text)
            self._reviews.create_review(
                book_id=book.id,
                telegram_user_id=review.telegram_user_id,
                review_text=review.review_text,
                reviewed_at=review.reviewed_at,
                username=review.username,
                display_name=review.display_name,
                message_id=review.message_id,
                chat_id=review.chat_id,
                sentiment=sentiment,
            )
            review_count = self._reviews.count_reviews_for_book(book.id)
            breakdown = self._reviews.sentiment_breakdown(book.id)
        except PersistenceError:
            logger.exception("Failed to save review for user %s", session.user_id)
            self._show(session, error_prompt())
            self._answer(event.callback_id)
            return

        logger.info(
            "Saved review for user %s on book %d (%d review(s) total)",
            session.user_id,
            book.id,
            review_count,
        )
        saved = saved_prompt(book.title, book.author)
        if review_count == 1:
            toast = first_review_toast(book.title)
            if event.callback_id is None:
                # Typed input has no callback to toast on.
                saved = Prompt(f"{saved.text}\n\n{toast}", saved.keyboard)
            self._show(session, saved)
            self._answer(event.callback_id, toast)
            return

        self._show(session, saved)

        self._answer(event.callback_id)
        tally = review_tally_message(
            book.title,
            review_count,
            breakdown,
            book_deep_link(self._bot_username, book.id),
        )
        try:
            self._transport.send_message(
                session.chat_id, tally.text, tally.keyboard, reply_to=review.message_id
            )
        except TransportError as exc:
            logger.warning("Could not send review tally to user %s: %s", session.user_id, exc)

    def _analyze(self, text: str) -> str | None:
        try:
            return self._sentiment.analyze(text)
        except Exception:
            logger.exception("Sentiment analysis failed; saving review without sentiment")
            return None

    def _fail(self, session: ConfirmationSession) -> None:
        self._store.compare_and_set(session.user_id, session, None)
        self._show(session, error_prompt())

    # -- transport ------------------------------------------------------------

    def _show(self, session: ConfirmationSession, prompt: Prompt) -> None:
        self._transport.edit_message(
            session.chat_id, session.prompt_message_id, prompt.text, prompt.keyboard
        )

    def _show_if_current(self, session: ConfirmationSession, prompt: Prompt) -> None:
        if session.is_same_version(self._store.get(session.user_id)):
            self._show(session, prompt)
        else:
            logger.info("Session for user %s moved on; not showing stale prompt", session.user_id)

    def _consume(self, session: ConfirmationSession, event: FlowInput) -> None:
        """Delete the user's typed message; the prompt already echoes it."""
        if event.message_id is None:
            return
        try:
            self._transport.delete_message(session.chat_id, event.message_id)
        except TransportError as exc:
            logger.debug("Could not delete message %d: %s", event.message_id, exc)

    def _answer(self, callback_id: str | None, text: str | None = None) -> None:
        if callback_id is None:
            return
        try:
            self._transport.answer_callback(callback_id, text)
        except TransportError as exc:
            logger.debug("Could not answer callback %s: %s", callback_id, exc)
