# ABOUTME: Per-user session storage for the confirmation dialogue.
# ABOUTME: In-memory store plus a clock-driven sweeper that drops stale sessions.

import logging
import threading
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Protocol

from bookclub.confirmation.state import ConfirmationSession

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TTL = timedelta(minutes=15)
DEFAULT_SWEEP_INTERVAL = timedelta(minutes=1)

Clock = Callable[[], datetime]


def utc_clock() -> datetime:
    return datetime.now(UTC)


class SessionStore(Protocol):
    """Storage contract for confirmation sessions, keyed by user id.

    get() never checks staleness; expiry is the sweeper's job.
    """

    def get(self, user_id: str) -> ConfirmationSession | None: ...

    def set(self, user_id: str, session: ConfirmationSession) -> None: ...

    def delete(self, user_id: str) -> None: ...

    def items(self) -> list[tuple[str, ConfirmationSession]]: ...

    def compare_and_set(
        self,
        user_id: str,
        expected: ConfirmationSession,
        new: ConfirmationSession | None,
    ) -> bool: ...


class InMemorySessionStore:
    """Dict-backed SessionStore; each operation is atomic under a lock."""

    def __init__(self) -> None:
        self._sessions: dict[str, ConfirmationSession] = {}
        self._lock = threading.Lock()

    def get(self, user_id: str) -> ConfirmationSession | None:
        with self._lock:
            return self._sessions.get(user_id)

    def set(self, user_id: str, session: ConfirmationSession) -> None:
        with self._lock:
            self._sessions[user_id] = session

    def delete(self, user_id: str) -> None:
        with self._lock:
            self._sessions.pop(user_id, None)

    def items(self) -> list[tuple[str, ConfirmationSession]]:
        with self._lock:
            return list(self._sessions.items())

    def compare_and_set(
        self,
        user_id: str,
        expected: ConfirmationSession,
        new: ConfirmationSession | None,
    ) -> bool:
        """Replace (or remove, if new is None) the session only if it is still
        the same version as expected. Returns whether the write happened.
        """
        with self._lock:
            if not expected.is_same_version(self._sessions.get(user_id)):
                return False
            if new is None:
                self._sessions.pop(user_id, None)
            else:
                self._sessions[user_id] = new
            return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


def sweep_stale_sessions(
    store: SessionStore, *, ttl: timedelta, now: datetime
) -> list[str]:
    """Remove sessions created more than ttl before now.

    Returns:
        User ids whose sessions were removed.
    """
    removed = []
    for user_id, session in store.items():
        if now - session.created_at > ttl:
            # Skips a session that was replaced or advanced since items() was read.
            if not store.compare_and_set(user_id, session, None):
                continue
            removed.append(user_id)
            logger.info("Cleaned up stale session for user %s", user_id)
    return removed


class SessionSweeper:
    """Periodic stale-session cleanup.

    run_once() performs one pass using the injected clock, which is all
    tests need. start() runs passes on a daemon thread every interval until
    stop() is called.
    """

    def __init__(
        self,
        store: SessionStore,
        *,
        ttl: timedelta = DEFAULT_SESSION_TTL,
        interval: timedelta = DEFAULT_SWEEP_INTERVAL,
        clock: Clock = utc_clock,
    ) -> None:
        self._store = store
        self._ttl = ttl
        self._interval = interval
        self._clock = clock
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_once(self) -> list[str]:
        return sweep_stale_sessions(self._store, ttl=self._ttl, now=self._clock())

    def start(self) -> None:
        if self._thread is not None:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name="bookclub-session-sweeper", daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None

    def _run(self) -> None:
        while not self._stop.wait(self._interval.total_seconds()):
            self.run_once()
