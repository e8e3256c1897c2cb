# ABOUTME: Contracts for the services the confirmation dialogue consumes but does not own.
# ABOUTME: Chat transport, sentiment analysis, and book extraction.

from dataclasses import dataclass
from typing import Literal, Protocol

from bookclub.metadata.types import ExtractedBookInfo

Sentiment = Literal["positive", "negative", "neutral"]


@dataclass(frozen=True)
class Button:
    """An inline keyboard button: either a callback action or a URL."""

    label: str
    action: str | None = None
    url: str | None = None


Keyboard = list[list[Button]]


class TransportError(Exception):
    """Raised by a ChatTransport when the chat service rejects an operation."""


class ChatTransport(Protocol):
    """Chat operations used by the dialogue.

    All calls are best-effort except editing the session's prompt message,
    which is how the current state is presented to the user.
    """

    def edit_message(
        self, chat_id: int | None, message_id: int, text: str, keyboard: Keyboard | None = None
    ) -> None: ...

    def delete_message(self, chat_id: int | None, message_id: int) -> None: ...

    def send_message(
        self,
        chat_id: int | None,
        text: str,
        keyboard: Keyboard | None = None,
        reply_to: int | None = None,
    ) -> int: ...

    def answer_callback(self, callback_id: str, text: str | None = None) -> None: ...


class SentimentAnalyzer(Protocol):
    """Classifies a review's sentiment; None when it cannot tell."""

    def analyze(self, text: str) -> Sentiment | None: ...


class ExtractionError(Exception):
    """Raised by a BookExtractor when the extraction service fails."""

    def __init__(self, message: str, *, rate_limited: bool = False) -> None:
        super().__init__(message)
        self.rate_limited = rate_limited


class BookExtractor(Protocol):
    """Extracts the reviewed book from free text; None when nothing is found.

    Raises ExtractionError on upstream rate-limit or API errors.
    """

    def extract_book_info(
        self, text: str, hints: str | None = None
    ) -> ExtractedBookInfo | None: ...
