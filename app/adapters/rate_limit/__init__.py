"""Rate limiting adapters.

The in-memory limiter is the only backend today. Callers depend on
``AbstractRateLimiter`` so a shared store can be added later.
"""

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitDecision
from app.adapters.rate_limit.in_memory import (
    DEFAULT_MAX_REQUESTS,
    WINDOW_MS,
    InMemoryFixedWindowRateLimiter,
    RateLimitEntry,
)

__all__ = [
    "AbstractRateLimiter",
    "DEFAULT_MAX_REQUESTS",
    "InMemoryFixedWindowRateLimiter",
    "RateLimitDecision",
    "RateLimitEntry",
    "WINDOW_MS",
]
