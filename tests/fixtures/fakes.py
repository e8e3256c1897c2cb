# ABOUTME: Hand-written fakes for the collaborators the pipeline talks to.
# ABOUTME: Metadata provider, chat transport, sentiment, extractor, and a settable clock.

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

from bookclub.confirmation.collaborators import ExtractionError, Keyboard, TransportError
from bookclub.db.mapping import BookRecord
from bookclub.metadata.types import BookSearchResult, ExtractedBookInfo


def make_result(
    title: str,
    author: str | None = None,
    external_id: str | None = None,
    isbn: str | None = None,
) -> BookSearchResult:
    return BookSearchResult(
        external_id=external_id or f"gb-{title.lower().replace(' ', '-')}",
        title=title,
        author=author,
        isbn=isbn,
    )


class FakeProvider:
    """BookDataProvider returning canned results and recording every call."""

    name = "fake"

    def __init__(
        self,
        results: list[BookSearchResult] | None = None,
        *,
        by_query: dict[str, list[BookSearchResult]] | None = None,
        by_isbn: dict[str, BookSearchResult] | None = None,
        error: Exception | None = None,
        on_isbn_lookup: Callable[[str], None] | None = None,
    ) -> None:
        self._results = list(results or [])
        self._by_query = by_query or {}
        self._by_isbn = by_isbn or {}
        self.error = error
        self._on_isbn_lookup = on_isbn_lookup
        self.queries: list[str] = []
        self.isbn_lookups: list[str] = []

    def search_books(self, query: str, max_results: int = 10) -> list[BookSearchResult]:
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        for pattern, results in self._by_query.items():
            if pattern in query:
                return list(results)
        return list(self._results)

    def search_by_isbn(self, isbn: str) -> BookSearchResult | None:
        self.isbn_lookups.append(isbn)
        if self._on_isbn_lookup is not None:
            self._on_isbn_lookup(isbn)
        if self.error is not None:
            raise self.error
        return self._by_isbn.get(isbn)


class FakeCatalog:
    """Just enough of BookCatalog for LocalMatcher."""

    def __init__(self, records: list[BookRecord] | None = None) -> None:
        self.records = list(records or [])
        self.list_calls = 0

    def list_all(self) -> list[BookRecord]:
        self.list_calls += 1
        return list(self.records)


@dataclass
class Edit:
    chat_id: int | None
    message_id: int
    text: str
    keyboard: Keyboard | None


@dataclass
class Sent:
    chat_id: int | None
    text: str
    keyboard: Keyboard | None
    reply_to: int | None
    message_id: int


class RecordingTransport:
    """ChatTransport that records every call; optionally fails best-effort ones."""

    def __init__(self, *, fail_best_effort: bool = False, first_message_id: int = 500) -> None:
        self.fail_best_effort = fail_best_effort
        self.edits: list[Edit] = []
        self.sent: list[Sent] = []
        self.deleted: list[int] = []
        self.answers: list[tuple[str, str | None]] = []
        self._next_id = first_message_id

    @property
    def last_edit(self) -> Edit:
        return self.edits[-1]

    def edit_message(
        self, chat_id: int | None, message_id: int, text: str, keyboard: Keyboard | None = None
    ) -> None:
        self.edits.append(Edit(chat_id, message_id, text, keyboard))

    def delete_message(self, chat_id: int | None, message_id: int) -> None:
        if self.fail_best_effort:
            raise TransportError("message can't be deleted")
        self.deleted.append(message_id)

    def send_message(
        self,
        chat_id: int | None,
        text: str,
        keyboard: Keyboard | None = None,
        reply_to: int | None = None,
    ) -> int:
        self._next_id += 1
        self.sent.append(Sent(chat_id, text, keyboard, reply_to, self._next_id))
        return self._next_id

    def answer_callback(self, callback_id: str, text: str | None = None) -> None:
        if self.fail_best_effort:
            raise TransportError("query is too old")
        self.answers.append((callback_id, text))


class FakeSentiment:
    def __init__(self, sentiment: str | None = "positive", error: Exception | None = None) -> None:
        self._sentiment = sentiment
        self._error = error
        self.calls: list[str] = []

    def analyze(self, text: str) -> Any:
        self.calls.append(text)
        if self._error is not None:
            raise self._error
        return self._sentiment


class FakeExtractor:
    def __init__(
        self, result: ExtractedBookInfo | None = None, error: ExtractionError | None = None
    ) -> None:
        self._result = result
        self._error = error
        self.calls: list[tuple[str, str | None]] = []

    def extract_book_info(self, text: str, hints: str | None = None) -> ExtractedBookInfo | None:
        self.calls.append((text, hints))
        if self._error is not None:
            raise self._error
        return self._result


@dataclass
class SettableClock:
    """Clock whose time only moves when a test advances it."""

    now: datetime = field(default_factory=lambda: datetime(2024, 3, 1, 12, 0, tzinfo=UTC))

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)
