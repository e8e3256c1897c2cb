# ABOUTME: Metadata package: similarity scoring, external lookups, matching, and enrichment.
# ABOUTME: Exports the data types that flow between extraction and the confirmation dialogue.

from bookclub.metadata.enrichment import enrich_book_info
from bookclub.metadata.matching import ExternalMatcher, LocalMatcher
from bookclub.metadata.provider import BookDataProvider
from bookclub.metadata.similarity import normalize, similarity
from bookclub.metadata.types import (
    BookQuery,
    BookSearchResult,
    Confidence,
    EnrichedBook,
    EnrichmentResult,
    ExtractedBookInfo,
    MatchSource,
    ResultSource,
    Similarity,
)

__all__ = [
    "BookDataProvider",
    "BookQuery",
    "BookSearchResult",
    "Confidence",
    "EnrichedBook",
    "EnrichmentResult",
    "ExternalMatcher",
    "ExtractedBookInfo",
    "LocalMatcher",
    "MatchSource",
    "ResultSource",
    "Similarity",
    "enrich_book_info",
    "normalize",
    "similarity",
]
