# ABOUTME: Candidate matchers reconciling a title/author against local and external sources.
# ABOUTME: Both apply the same independent title/author similarity thresholds.

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Protocol

from bookclub.metadata.http import MetadataFetchError
from bookclub.metadata.provider import BookDataProvider
from bookclub.metadata.similarity import similarity
from bookclub.metadata.types import (
    BookSearchResult,
    EnrichedBook,
    MatchSource,
    Similarity,
)

if TYPE_CHECKING:
    from bookclub.db.catalog import BookCatalog

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.9
STRICT_THRESHOLD = 1.0

_EXTERNAL_MATCH_LIMIT = 3


class CandidateMatcher(Protocol):
    """Contract shared by the local and external matchers."""

    def search(
        self, title: str, author: str | None, threshold: float = DEFAULT_THRESHOLD
    ) -> list[EnrichedBook]: ...


def score_pair(
    title: str,
    author: str | None,
    candidate_title: str,
    candidate_author: str | None,
    threshold: float,
) -> Similarity | None:
    """Score a candidate against the query, or None if it is rejected.

    Title and author must each reach the threshold on their own; a strong
    title never compensates for a weak author. When either side has no
    author, the author score is 1.0 and cannot cause a rejection.
    """
    title_sim = similarity(title, candidate_title)
    if title_sim < threshold:
        return None

    if author and candidate_author:
        author_sim = similarity(author, candidate_author)
        if author_sim < threshold:
            return None
    else:
        author_sim = 1.0

    return Similarity(title=title_sim, author=author_sim)


def rank_matches(matches: Iterable[EnrichedBook]) -> list[EnrichedBook]:
    """Sort candidates by average title/author similarity, best first."""
    return sorted(matches, key=lambda m: m.similarity.average, reverse=True)


class LocalMatcher:
    """Matches against every book in the local catalog.

    The catalog is small enough to scan in full. An empty result is not an
    error; storage failures (PersistenceError) propagate to the caller.
    """

    def __init__(self, catalog: "BookCatalog") -> None:
        self._catalog = catalog

    def search(
        self, title: str, author: str | None, threshold: float = DEFAULT_THRESHOLD
    ) -> list[EnrichedBook]:
        matches = []
        for record in self._catalog.list_all():
            scores = score_pair(title, author, record.title, record.author, threshold)
            if scores is None:
                continue
            matches.append(
                EnrichedBook(
                    title=record.title,
                    author=record.author,
                    source=MatchSource.LOCAL,
                    similarity=scores,
                    isbn=record.isbn,
                    cover_url=record.cover_url,
                    external_id=record.external_id,
                    local_id=record.id,
                )
            )
        return rank_matches(matches)


class ExternalMatcher:
    """Matches against the external metadata source (Google Books).

    One instance wraps one provider, and through it one HTTP client and its
    rate limiter. Reuse the same instance for every search in an enrichment
    run so consecutive calls share the rate-limit timeline.
    """

    def __init__(self, provider: BookDataProvider) -> None:
        self._provider = provider

    @property
    def provider(self) -> BookDataProvider:
        return self._provider

    @staticmethod
    def build_query(title: str, author: str | None) -> str:
        query = f"intitle:{title}"
        if author:
            query += f"+inauthor:{author}"
        return query

    def search(
        self, title: str, author: str | None, threshold: float = DEFAULT_THRESHOLD
    ) -> list[EnrichedBook]:
        """Search the external source and return at most three candidates.

        Any failure of the external source is logged and treated as "no
        results"; enrichment must never fail because of it.
        """
        try:
            results = self._provider.search_books(self.build_query(title, author))
        except MetadataFetchError as exc:
            logger.warning(
                "External search failed for title=%s author=%s: %s", title, author, exc
            )
            return []

        matches = []
        for result in results:
            scores = score_pair(title, author, result.title, result.author, threshold)
            if scores is None:
                continue
            matches.append(_from_search_result(result, scores))
        return rank_matches(matches)[:_EXTERNAL_MATCH_LIMIT]

    def lookup_isbn(self, isbn: str) -> BookSearchResult | None:
        """Look up a book by ISBN.

        Unlike search(), failures are not absorbed: MetadataFetchError
        propagates so the ISBN-entry step can tell the user.
        """
        return self._provider.search_by_isbn(isbn)


def _from_search_result(result: BookSearchResult, scores: Similarity) -> EnrichedBook:
    return EnrichedBook(
        title=result.title,
        author=result.author,
        source=MatchSource.EXTERNAL,
        similarity=scores,
        isbn=result.isbn,
        cover_url=result.cover_url,
        external_id=result.external_id,
    )
