# ABOUTME: Session and state types for the book confirmation dialogue.
# ABOUTME: Sessions are immutable values; each transition stores a new one.

import secrets
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from bookclub.metadata.types import EnrichmentResult, ExtractedBookInfo


class FlowState(StrEnum):
    """Non-terminal dialogue states. Resolved/cancelled sessions are removed."""

    SHOWING_OPTIONS = "showing_options"
    AWAITING_ISBN = "awaiting_isbn"
    AWAITING_TITLE = "awaiting_title"
    AWAITING_AUTHOR = "awaiting_author"


class FlowEvent(StrEnum):
    """User events the dialogue reacts to."""

    SELECT_CANDIDATE = "select_candidate"
    ACCEPT_EXTRACTED = "accept_extracted"
    CHOOSE_ISBN = "choose_isbn"
    CHOOSE_MANUAL = "choose_manual"
    CANCEL = "cancel"
    TEXT = "text"


TEXT_STATES = frozenset(
    {FlowState.AWAITING_ISBN, FlowState.AWAITING_TITLE, FlowState.AWAITING_AUTHOR}
)


@dataclass(frozen=True)
class PendingReview:
    """The review message waiting for its book to be confirmed."""

    telegram_user_id: int
    review_text: str
    message_id: int
    reviewed_at: datetime
    chat_id: int | None = None
    username: str | None = None
    display_name: str | None = None


@dataclass(frozen=True)
class TempEntry:
    """Partial manual entry: the title typed while the author is still pending."""

    title: str | None = None


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _new_session_id() -> str:
    return secrets.token_hex(8)


@dataclass(frozen=True)
class ConfirmationSession:
    """Conversation state for one user resolving one review's book.

    session_id identifies one review attempt; generation increases with
    every transition. Together they let slow operations detect that the
    session they started from has since moved on or disappeared.
    """

    user_id: str
    pending_review: PendingReview
    prompt_message_id: int
    extracted_info: ExtractedBookInfo | None = None
    enrichment_result: EnrichmentResult | None = None
    state: FlowState = FlowState.SHOWING_OPTIONS
    temp_entry: TempEntry = field(default_factory=TempEntry)
    created_at: datetime = field(default_factory=_utcnow)
    session_id: str = field(default_factory=_new_session_id)
    generation: int = 0

    @property
    def chat_id(self) -> int | None:
        return self.pending_review.chat_id

    def advance(self, **changes: Any) -> "ConfirmationSession":
        """Return the next version of this session with changes applied."""
        return replace(self, generation=self.generation + 1, **changes)

    def is_same_version(self, other: "ConfirmationSession | None") -> bool:
        return (
            other is not None
            and other.session_id == self.session_id
            and other.generation == self.generation
        )
