# ABOUTME: Enrichment orchestrator: local catalog first, external source as fallback.
# ABOUTME: Merges, deduplicates, and caps candidates for the confirmation dialogue.

import logging

from bookclub.metadata.matching import DEFAULT_THRESHOLD, ExternalMatcher, LocalMatcher
from bookclub.metadata.similarity import match_key, normalize
from bookclub.metadata.types import (
    BookQuery,
    EnrichedBook,
    EnrichmentResult,
    ExtractedBookInfo,
    ResultSource,
)

logger = logging.getLogger(__name__)

MAX_MATCHES = 3


def _dedup_key(match: EnrichedBook) -> str:
    """Normalized title/author key, falling back to ids for blank titles."""
    if not normalize(match.title):
        if match.local_id is not None:
            return f"local:{match.local_id}"
        if match.external_id:
            return f"external:{match.external_id}"
    return match_key(match.title, match.author)


def deduplicate(matches: list[EnrichedBook], limit: int = MAX_MATCHES) -> list[EnrichedBook]:
    """Keep the first occurrence of each book key, up to limit entries.

    Multiple editions of the same book share a key, so only the
    highest-ranked edition is shown.
    """
    unique: list[EnrichedBook] = []
    seen: set[str] = set()
    for match in matches:
        key = _dedup_key(match)
        if key in seen:
            continue
        seen.add(key)
        unique.append(match)
        if len(unique) >= limit:
            break
    return unique


def enrich_book_info(
    extracted: ExtractedBookInfo,
    *,
    local: LocalMatcher,
    external: ExternalMatcher,
    threshold: float = DEFAULT_THRESHOLD,
) -> EnrichmentResult:
    """Resolve extracted book info into at most three ranked candidates.

    Searches the local catalog for the primary book and each alternate,
    then asks the external source only about books with no local match.
    The same ExternalMatcher instance is used for every external call so
    its rate limiter sees the whole batch.

    Args:
        extracted: Title/author pairs produced by the extraction engine.
        local: Matcher over the local catalog.
        external: Matcher over the external metadata source.
        threshold: Minimum per-field similarity.

    Returns:
        EnrichmentResult with source NONE and no matches if nothing was found.

    Raises:
        PersistenceError: If the local catalog cannot be read.
    """
    books = extracted.books_to_enrich()
    logger.info("Enriching %d book(s)", len(books))

    local_matches: list[EnrichedBook] = []
    not_found_locally: list[BookQuery] = []
    for book in books:
        matches = local.search(book.title, book.author, threshold)
        if matches:
            local_matches.extend(matches)
        else:
            not_found_locally.append(book)

    logger.info(
        "Local catalog: %d match(es) for %d/%d book(s)",
        len(local_matches),
        len(books) - len(not_found_locally),
        len(books),
    )

    external_matches: list[EnrichedBook] = []
    for book in not_found_locally:
        external_matches.extend(external.search(book.title, book.author, threshold))

    if not_found_locally:
        logger.info(
            "External source: %d match(es) for %d book(s) not found locally",
            len(external_matches),
            len(not_found_locally),
        )

    all_matches = local_matches + external_matches
    if not all_matches:
        logger.info("No matches found for %r", extracted.title)
        return EnrichmentResult.empty()

    source = ResultSource.LOCAL if local_matches else ResultSource.EXTERNAL
    unique = deduplicate(all_matches)
    logger.info("Returning %d unique match(es) (source: %s)", len(unique), source)
    return EnrichmentResult(source=source, matches=tuple(unique))
