"""Rate limiter interfaces.

Route dependencies talk to this abstraction only, so the in-process counter
can later be replaced by a shared store without touching the HTTP layer.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of a single admission check.

    Attributes:
        allowed: Whether the request may proceed.
        retry_after_ms: Milliseconds until the current window ends. Only set
            when the request was denied.
    """

    allowed: bool
    retry_after_ms: int | None = None

    @property
    def retry_after_seconds(self) -> int | None:
        """Retry hint rounded up to whole seconds (for ``Retry-After``)."""
        if self.retry_after_ms is None:
            return None
        return max(0, math.ceil(self.retry_after_ms / 1000))


class AbstractRateLimiter(ABC):
    """Interface for key-scoped rate limiters."""

    @property
    @abstractmethod
    def default_max_requests(self) -> int:
        """Limit applied when a caller passes none."""
        raise NotImplementedError

    def resolve_max_requests(self, max_requests: int | None) -> int:
        """Return the effective limit for a caller-supplied value."""
        if not max_requests or max_requests < 1:
            return self.default_max_requests
        return max_requests

    @abstractmethod
    def check(self, key: str, max_requests: int | None = None) -> RateLimitDecision:
        """Admit or deny one request for ``key``.

        Args:
            key: Opaque scope identifier (organization id, API key, IP...).
            max_requests: Requests allowed per window. Falls back to the
                limiter default when omitted or not positive.

        Returns:
            RateLimitDecision for this attempt.
        """
        raise NotImplementedError

    @abstractmethod
    def reset_for_testing(self) -> None:
        """Drop all counters. Never call this from request handling code."""
        raise NotImplementedError
