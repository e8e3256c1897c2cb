# ABOUTME: Google Books metadata provider implementation.
# ABOUTME: Searches the volumes endpoint by free query or ISBN and returns normalized results.

import logging

from bookclub.metadata.googlebooks_parser import parse_search_response
from bookclub.metadata.http import HttpClient
from bookclub.metadata.isbn import clean_isbn
from bookclub.metadata.types import BookSearchResult

logger = logging.getLogger(__name__)

_GB_VOLUMES_URL = "https://www.googleapis.com/books/v1/volumes"


class GoogleBooksProvider:
    """Metadata provider backed by the Google Books API.

    Uses a dependency-injected HttpClient for testability. Failures are not
    swallowed here: MetadataFetchError propagates so each caller can decide
    whether a failed lookup is silent or user-visible.
    """

    def __init__(self, http_client: HttpClient, *, api_key: str | None = None) -> None:
        self._http = http_client
        self._api_key = api_key

    @property
    def name(self) -> str:
        return "googlebooks"

    def search_books(self, query: str, max_results: int = 10) -> list[BookSearchResult]:
        """Search volumes with a query string.

        Supports the API's field operators, e.g. 'intitle:Dune+inauthor:Herbert'
        or 'isbn:9780441013593'.
        """
        params = {
            "q": query,
            "maxResults": str(max_results),
            "printType": "books",
        }
        if self._api_key:
            params["key"] = self._api_key

        data = self._http.get(_GB_VOLUMES_URL, params=params)
        results = parse_search_response(data)
        logger.debug("Google Books query %r returned %d result(s)", query, len(results))
        return results

    def search_by_isbn(self, isbn: str) -> BookSearchResult | None:
        """Look up a single volume by ISBN; None when nothing matches."""
        results = self.search_books(f"isbn:{clean_isbn(isbn)}")
        if not results:
            logger.info("No book found for ISBN %s", isbn)
            return None
        logger.info("Found book by ISBN %s: %s", isbn, results[0].title)
        return results[0]
