# ABOUTME: Core data structures for book identity resolution.
# ABOUTME: ExtractedBookInfo flows in, EnrichmentResult flows out to the confirmation dialogue.

from dataclasses import dataclass, field
from enum import StrEnum

# Extraction may name up to two further books mentioned in the same review.
MAX_ALTERNATIVE_BOOKS = 2


class Confidence(StrEnum):
    """The extraction engine's self-reported certainty about title/author."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class MatchSource(StrEnum):
    """Where a single candidate came from."""

    LOCAL = "local"
    EXTERNAL = "external"


class ResultSource(StrEnum):
    """Where an enrichment run found its candidates, if anywhere."""

    LOCAL = "local"
    EXTERNAL = "external"
    NONE = "none"


@dataclass(frozen=True)
class BookQuery:
    """A single title/author pair to resolve."""

    title: str
    author: str | None = None


@dataclass(frozen=True)
class ExtractedBookInfo:
    """Book information extracted from review text by the upstream extractor.

    Immutable once received. Alternates beyond MAX_ALTERNATIVE_BOOKS are
    dropped so that one run never resolves more than three books.
    """

    title: str
    author: str | None = None
    confidence: Confidence = Confidence.HIGH
    alternative_books: tuple[BookQuery, ...] = ()

    def __post_init__(self) -> None:
        alternates = tuple(self.alternative_books)[:MAX_ALTERNATIVE_BOOKS]
        object.__setattr__(self, "alternative_books", alternates)
        object.__setattr__(self, "confidence", Confidence(self.confidence))

    @property
    def primary(self) -> BookQuery:
        return BookQuery(title=self.title, author=self.author)

    def books_to_enrich(self) -> list[BookQuery]:
        """Primary book first, then alternates (at most three in total)."""
        return [self.primary, *self.alternative_books]


@dataclass(frozen=True)
class Similarity:
    """Per-field similarity scores, each in [0.0, 1.0]."""

    title: float
    author: float

    def __post_init__(self) -> None:
        for name in ("title", "author"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                msg = f"{name} similarity must be between 0.0 and 1.0, got {value}"
                raise ValueError(msg)

    @property
    def average(self) -> float:
        return (self.title + self.author) / 2


@dataclass(frozen=True)
class EnrichedBook:
    """A candidate book proposed during resolution.

    local_id is set only for candidates sourced from the local catalog;
    external_id carries the external metadata source's volume id.
    """

    title: str
    author: str | None
    source: MatchSource
    similarity: Similarity
    isbn: str | None = None
    cover_url: str | None = None
    external_id: str | None = None
    local_id: int | None = None

    @property
    def display_name(self) -> str:
        """Title with an em-dash author suffix, as shown in chat."""
        if self.author:
            return f"{self.title} — {self.author}"
        return self.title


@dataclass(frozen=True)
class EnrichmentResult:
    """Outcome of an enrichment run: at most three deduplicated candidates."""

    source: ResultSource
    matches: tuple[EnrichedBook, ...] = ()

    @classmethod
    def empty(cls) -> "EnrichmentResult":
        return cls(source=ResultSource.NONE, matches=())

    @property
    def has_matches(self) -> bool:
        return len(self.matches) > 0


@dataclass
class BookSearchResult:
    """A normalized record returned by the external metadata source."""

    external_id: str
    title: str
    author: str | None = None
    description: str | None = None
    genres: list[str] = field(default_factory=list)
    publication_year: int | None = None
    cover_url: str | None = None
    isbn: str | None = None
    page_count: int | None = None
