# ABOUTME: Unit tests for the HTTP client abstraction.
# ABOUTME: Tests the HttpClient protocol, BookclubHttpClient, the RateLimiter, and error handling.

import httpx
import pytest

from bookclub.metadata.http import (
    BookclubHttpClient,
    HttpClient,
    MetadataFetchError,
    RateLimiter,
)


class FakeTransport(httpx.BaseTransport):
    """Fake transport for httpx that returns canned responses."""

    def __init__(
        self,
        responses: list[httpx.Response] | None = None,
        error: httpx.HTTPError | None = None,
    ) -> None:
        self._responses = list(responses or [])
        self._error = error
        self._call_count = 0
        self.requests: list[httpx.Request] = []

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        self._call_count += 1
        self.requests.append(request)
        if self._error is not None:
            raise self._error
        if self._responses:
            return self._responses.pop(0)
        return httpx.Response(200, json={"ok": True})

    @property
    def call_count(self) -> int:
        return self._call_count


class FakeTimeline:
    """Monotonic clock and sleep that only move when slept on."""

    def __init__(self) -> None:
        self.now = 100.0
        self.sleeps: list[float] = []

    def clock(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class TestHttpClientProtocol:
    """Tests for HttpClient protocol compliance."""

    def test_bookclub_client_satisfies_protocol(self) -> None:
        """BookclubHttpClient satisfies the HttpClient protocol."""
        client = BookclubHttpClient(min_request_interval=0.0)
        assert isinstance(client, HttpClient)


class TestRateLimiter:
    """Tests for RateLimiter."""

    def test_first_request_is_not_delayed(self) -> None:
        timeline = FakeTimeline()
        limiter = RateLimiter(0.2, clock=timeline.clock, sleep=timeline.sleep)
        limiter.wait()
        assert timeline.sleeps == []

    def test_back_to_back_requests_wait_out_the_interval(self) -> None:
        """A second request right after the first sleeps the full interval."""
        timeline = FakeTimeline()
        limiter = RateLimiter(0.2, clock=timeline.clock, sleep=timeline.sleep)
        limiter.wait()
        limiter.wait()
        assert timeline.sleeps == [pytest.approx(0.2)]

    def test_only_remaining_time_is_slept(self) -> None:
        """Time already elapsed counts toward the interval."""
        timeline = FakeTimeline()
        limiter = RateLimiter(0.2, clock=timeline.clock, sleep=timeline.sleep)
        limiter.wait()
        timeline.now += 0.15
        limiter.wait()
        assert timeline.sleeps == [pytest.approx(0.05)]

    def test_no_wait_after_interval_has_passed(self) -> None:
        timeline = FakeTimeline()
        limiter = RateLimiter(0.2, clock=timeline.clock, sleep=timeline.sleep)
        limiter.wait()
        timeline.now += 1.0
        limiter.wait()
        assert timeline.sleeps == []

    def test_zero_interval_disables_limiting(self) -> None:
        timeline = FakeTimeline()
        limiter = RateLimiter(0.0, clock=timeline.clock, sleep=timeline.sleep)
        for _ in range(3):
            limiter.wait()
        assert timeline.sleeps == []


class TestBookclubHttpClient:
    """Tests for BookclubHttpClient concrete class."""

    def test_get_returns_json(self) -> None:
        """GET request returns parsed JSON response."""
        transport = FakeTransport()
        client = BookclubHttpClient(min_request_interval=0.0, transport=transport)
        result = client.get("https://example.com/api", params={"q": "test"})
        assert result == {"ok": True}
        assert transport.requests[0].url.params["q"] == "test"

    def test_user_agent_header(self) -> None:
        """Requests include the bookclub User-Agent header."""
        transport = FakeTransport()
        client = BookclubHttpClient(min_request_interval=0.0, transport=transport)
        client.get("https://example.com/api")
        assert transport.requests[0].headers["user-agent"].startswith("bookclub/")

    def test_requests_share_the_rate_limiter(self) -> None:
        """Consecutive requests go through the client's limiter."""
        timeline = FakeTimeline()
        limiter = RateLimiter(0.2, clock=timeline.clock, sleep=timeline.sleep)
        transport = FakeTransport()
        client = BookclubHttpClient(transport=transport, rate_limiter=limiter)

        client.get("https://example.com/1")
        client.get("https://example.com/2")

        assert client.rate_limiter is limiter
        assert timeline.sleeps == [pytest.approx(0.2)]
        assert transport.call_count == 2

    def test_http_error_raises_metadata_fetch_error(self) -> None:
        """Non-retryable HTTP errors raise MetadataFetchError."""
        responses = [httpx.Response(404, json={"error": "not found"})]
        transport = FakeTransport(responses=responses)
        client = BookclubHttpClient(min_request_interval=0.0, transport=transport)

        with pytest.raises(MetadataFetchError, match="404"):
            client.get("https://example.com/missing")
        assert transport.call_count == 1

    def test_transport_error_raises_metadata_fetch_error(self) -> None:
        """Connection failures are wrapped in MetadataFetchError."""
        transport = FakeTransport(error=httpx.ConnectError("connection refused"))
        client = BookclubHttpClient(min_request_interval=0.0, transport=transport)

        with pytest.raises(MetadataFetchError, match="Request failed"):
            client.get("https://example.com/api")

    def test_invalid_json_raises_metadata_fetch_error(self) -> None:
        transport = FakeTransport(responses=[httpx.Response(200, content=b"<html>")])
        client = BookclubHttpClient(min_request_interval=0.0, transport=transport)

        with pytest.raises(MetadataFetchError, match="Invalid JSON"):
            client.get("https://example.com/api")

    def test_retry_on_429(self) -> None:
        """Client retries on 429 status and succeeds on next attempt."""
        responses = [
            httpx.Response(429, json={"error": "rate limited"}),
            httpx.Response(200, json={"ok": True}),
        ]
        transport = FakeTransport(responses=responses)
        sleeps: list[float] = []
        client = BookclubHttpClient(
            min_request_interval=0.0, transport=transport, retry_delay=1.0, sleep=sleeps.append
        )

        result = client.get("https://example.com/api")
        assert result == {"ok": True}
        assert transport.call_count == 2
        assert sleeps == [1.0]

    def test_backoff_doubles_between_retries(self) -> None:
        """Retry delays grow exponentially from retry_delay."""
        responses = [httpx.Response(503)] * 3 + [httpx.Response(200, json={"ok": True})]
        transport = FakeTransport(responses=responses)
        sleeps: list[float] = []
        client = BookclubHttpClient(
            min_request_interval=0.0, transport=transport, retry_delay=0.5, sleep=sleeps.append
        )

        client.get("https://example.com/api")
        assert sleeps == [0.5, 1.0, 2.0]

    def test_exhausted_429_reports_rate_limit(self) -> None:
        """Running out of retries on 429 says the rate limit was exceeded."""
        responses = [httpx.Response(429)] * 4
        transport = FakeTransport(responses=responses)
        client = BookclubHttpClient(
            min_request_interval=0.0,
            transport=transport,
            max_retries=3,
            sleep=lambda _: None,
        )

        with pytest.raises(MetadataFetchError, match="Rate limit exceeded"):
            client.get("https://example.com/api")
        assert transport.call_count == 4

    def test_retry_exhausted_raises(self) -> None:
        """After max retries, raises MetadataFetchError."""
        responses = [httpx.Response(500, json={"error": "server error"})] * 4
        transport = FakeTransport(responses=responses)
        client = BookclubHttpClient(
            min_request_interval=0.0,
            transport=transport,
            max_retries=3,
            sleep=lambda _: None,
        )

        with pytest.raises(MetadataFetchError, match="500"):
            client.get("https://example.com/api")
        assert transport.call_count == 4  # 1 initial + 3 retries
