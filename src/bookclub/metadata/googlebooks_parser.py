# ABOUTME: Parsing functions for Google Books API responses.
# ABOUTME: Converts raw volume JSON into BookSearchResult records.

import re
from typing import Any

from bookclub.metadata.types import BookSearchResult

_YEAR_RE = re.compile(r"(\d{4})")

# Largest first: the best available cover wins.
_COVER_SIZES = ("large", "medium", "small", "thumbnail", "smallThumbnail")

_UNKNOWN_TITLE = "Unknown Title"


def extract_year(published_date: str | None) -> int | None:
    """Pull a four-digit year out of a publishedDate string like '1965-08-01'."""
    if not published_date:
        return None
    match = _YEAR_RE.search(published_date)
    return int(match.group(1)) if match else None


def extract_isbn(identifiers: list[dict[str, Any]] | None) -> str | None:
    """Pick an ISBN from industryIdentifiers, preferring ISBN-13."""
    if not identifiers:
        return None
    by_type = {entry.get("type"): entry.get("identifier") for entry in identifiers}
    return by_type.get("ISBN_13") or by_type.get("ISBN_10")


def best_cover_url(image_links: dict[str, str] | None) -> str | None:
    if not image_links:
        return None
    for size in _COVER_SIZES:
        url = image_links.get(size)
        if url:
            return url
    return None


def parse_volume(item: dict[str, Any]) -> BookSearchResult:
    """Convert a single volume item ({id, volumeInfo}) to a BookSearchResult.

    Multiple authors are joined with ', ' into one author string.
    """
    info = item.get("volumeInfo", {})
    authors = info.get("authors") or []
    return BookSearchResult(
        external_id=item.get("id", ""),
        title=info.get("title") or _UNKNOWN_TITLE,
        author=", ".join(authors) if authors else None,
        description=info.get("description"),
        genres=list(info.get("categories") or []),
        publication_year=extract_year(info.get("publishedDate")),
        cover_url=best_cover_url(info.get("imageLinks")),
        isbn=extract_isbn(info.get("industryIdentifiers")),
        page_count=info.get("pageCount"),
    )


def parse_search_response(data: dict[str, Any]) -> list[BookSearchResult]:
    """Parse a /volumes search response; missing or empty items yields []."""
    return [parse_volume(item) for item in data.get("items") or []]
