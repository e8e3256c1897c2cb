# ABOUTME: Confirmation package: the per-user dialogue that settles which book a review is about.
# ABOUTME: Exports the flow, intake, session store, and the collaborator contracts they need.

from bookclub.confirmation.collaborators import (
    BookExtractor,
    Button,
    ChatTransport,
    ExtractionError,
    SentimentAnalyzer,
    TransportError,
)
from bookclub.confirmation.flow import ConfirmationFlow, IllegalTransitionError
from bookclub.confirmation.intake import IntakeOutcome, ReviewIntake, display_name
from bookclub.confirmation.state import (
    ConfirmationSession,
    FlowEvent,
    FlowState,
    PendingReview,
)
from bookclub.confirmation.store import InMemorySessionStore, SessionStore, SessionSweeper

__all__ = [
    "BookExtractor",
    "Button",
    "ChatTransport",
    "ConfirmationFlow",
    "ConfirmationSession",
    "ExtractionError",
    "FlowEvent",
    "FlowState",
    "IllegalTransitionError",
    "InMemorySessionStore",
    "IntakeOutcome",
    "PendingReview",
    "ReviewIntake",
    "SentimentAnalyzer",
    "SessionStore",
    "SessionSweeper",
    "TransportError",
    "display_name",
]
