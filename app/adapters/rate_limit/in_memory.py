"""In-memory fixed-window rate limiter.

Notes:
- Per-process only: every worker keeps its own counters, and a restart
  forgets them.
- Windows are anchored to the first request a key makes, not to wall clock
  boundaries. Up to twice the limit can pass in a short burst straddling the
  end of one window and the start of the next.
- Thread-safe: one lock covers the lookup, expiry test and increment.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitDecision

WINDOW_MS = 60_000
DEFAULT_MAX_REQUESTS = 10


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class RateLimitEntry:
    """Counter state for one key.

    ``reset_at`` is fixed when the window starts; a new window replaces the
    entry instead of editing it.
    """

    count: int
    reset_at: int


class InMemoryFixedWindowRateLimiter(AbstractRateLimiter):
    """Fixed-window request counter keyed by an opaque string.

    ``check`` never raises: a bad ``max_requests`` falls back to the default
    and any key string is accepted as is. Idle keys are never evicted.
    """

    def __init__(
        self,
        *,
        window_ms: int = WINDOW_MS,
        default_max_requests: int = DEFAULT_MAX_REQUESTS,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        """Initialize the limiter.

        Args:
            window_ms: Window length in milliseconds.
            default_max_requests: Limit used when a caller passes none.
            clock: Time source returning UNIX time in milliseconds.

        Raises:
            ValueError: If window_ms or default_max_requests is not positive.
        """
        if window_ms < 1:
            raise ValueError("window_ms must be >= 1")
        if default_max_requests < 1:
            raise ValueError("default_max_requests must be >= 1")

        self._window_ms = window_ms
        self._default_max_requests = default_max_requests
        self._clock = clock
        self._lock = threading.RLock()
        self._entries: dict[str, RateLimitEntry] = {}

    @property
    def window_ms(self) -> int:
        return self._window_ms

    @property
    def default_max_requests(self) -> int:
        return self._default_max_requests

    def get_entry(self, key: str) -> RateLimitEntry | None:
        """Return a copy of the stored entry for ``key`` (None if unseen)."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            return RateLimitEntry(count=entry.count, reset_at=entry.reset_at)

    def check(self, key: str, max_requests: int | None = None) -> RateLimitDecision:
        limit = self.resolve_max_requests(max_requests)

        with self._lock:
            now = int(self._clock())
            entry = self._entries.get(key)

            if entry is None or now > entry.reset_at:
                self._entries[key] = RateLimitEntry(count=1, reset_at=now + self._window_ms)
                return RateLimitDecision(allowed=True)

            if entry.count >= limit:
                # Denials leave the count untouched.
                return RateLimitDecision(allowed=False, retry_after_ms=entry.reset_at - now)

            entry.count += 1
            return RateLimitDecision(allowed=True)

    def reset_for_testing(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
