# ABOUTME: BookDataProvider protocol defining the contract for external metadata sources.
# ABOUTME: Google Books implements it; tests substitute in-memory fakes.

from typing import Protocol, runtime_checkable

from bookclub.metadata.types import BookSearchResult


@runtime_checkable
class BookDataProvider(Protocol):
    """Protocol for external book metadata lookups.

    Both methods may raise MetadataFetchError on API, network, or
    rate-limit failures; callers decide whether that is fatal.
    """

    @property
    def name(self) -> str: ...

    def search_books(self, query: str, max_results: int = 10) -> list[BookSearchResult]: ...

    def search_by_isbn(self, isbn: str) -> BookSearchResult | None: ...
