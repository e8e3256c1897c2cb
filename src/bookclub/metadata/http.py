# ABOUTME: HTTP client abstraction for external metadata API calls.
# ABOUTME: Provides an explicit rate limiter, retry with backoff, and injectable transport.

import logging
import time
from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

import httpx

logger = logging.getLogger(__name__)

_RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}

USER_AGENT = "bookclub/0.1.0"


class MetadataFetchError(Exception):
    """Raised when a request to the external metadata source fails."""


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for HTTP GET operations against metadata APIs."""

    def get(self, url: str, params: dict[str, str] | None = None) -> dict[str, Any]: ...


class RateLimiter:
    """Enforces a minimum interval between consecutive requests.

    The limiter is stateful: whoever holds it (one HTTP client, one provider,
    one ExternalMatcher) shares the same request timeline, which is what keeps
    a batch of searches within the API's quota.
    """

    def __init__(
        self,
        min_interval: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._last_request_time: float | None = None

    @property
    def min_interval(self) -> float:
        return self._min_interval

    def wait(self) -> None:
        """Sleep if needed so the next request respects the minimum interval."""
        if self._min_interval <= 0:
            return
        if self._last_request_time is not None:
            elapsed = self._clock() - self._last_request_time
            if elapsed < self._min_interval:
                self._sleep(self._min_interval - elapsed)
        self._last_request_time = self._clock()


class BookclubHttpClient:
    """GET-only JSON client for metadata APIs.

    Every attempt, retries included, passes through the RateLimiter. 429 and
    5xx responses are retried with exponential backoff starting at
    retry_delay.
    """

    def __init__(
        self,
        *,
        min_request_interval: float = 0.2,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        transport: httpx.BaseTransport | None = None,
        rate_limiter: RateLimiter | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._client = httpx.Client(
            headers={"User-Agent": USER_AGENT},
            timeout=30.0,
            transport=transport,
        )
        self._rate_limiter = rate_limiter or RateLimiter(min_request_interval, sleep=sleep)
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        self._sleep = sleep

    @property
    def rate_limiter(self) -> RateLimiter:
        return self._rate_limiter

    def get(self, url: str, params: dict[str, str] | None = None) -> dict[str, Any]:
        """Fetch url and decode its JSON body.

        Raises:
            MetadataFetchError: On connection failures, invalid JSON,
                non-retryable statuses, or when retries run out.
        """
        response = self._send(url, params)
        for retry in range(self._max_retries):
            if response.status_code not in _RETRYABLE_STATUS_CODES:
                break
            delay = self._retry_delay * 2**retry
            logger.warning(
                "HTTP %d from %s, retry %d/%d in %.1fs",
                response.status_code,
                url,
                retry + 1,
                self._max_retries,
                delay,
            )
            self._sleep(delay)
            response = self._send(url, params)

        status = response.status_code
        if status == 200:
            try:
                return response.json()
            except ValueError as exc:
                raise MetadataFetchError(f"Invalid JSON from {url}") from exc
        if status not in _RETRYABLE_STATUS_CODES:
            raise MetadataFetchError(f"HTTP {status} from {url}")
        if status == 429:
            raise MetadataFetchError(
                f"Rate limit exceeded after {self._max_retries} retries: {url}"
            )
        raise MetadataFetchError(
            f"HTTP {status} from {url} after {self._max_retries + 1} attempts"
        )

    def _send(self, url: str, params: dict[str, str] | None) -> httpx.Response:
        self._rate_limiter.wait()
        try:
            return self._client.get(url, params=params)
        except httpx.HTTPError as exc:
            raise MetadataFetchError(f"Request failed: {url}: {exc}") from exc

    def close(self) -> None:
        self._client.close()
