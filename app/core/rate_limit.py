"""Rate limiting dependencies for FastAPI routes.

The limiter instance is owned by the application (``app.state.rate_limiter``,
built in ``create_app``) and reached through ``get_rate_limiter``, so tests
and workers never share hidden module state.

Key selection, most specific first:
- ``X-Organization-ID`` header -> ``org:<id>``
- ``X-API-Key`` header -> ``api_key:<key>``
- otherwise the client IP -> ``ip:<host>``
"""

from __future__ import annotations

import logging
from typing import Annotated, Awaitable, Callable

from fastapi import Header, Request

from app.adapters.rate_limit.base import AbstractRateLimiter
from app.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from app.core.auth import ORGANIZATION_HEADER, hash_secret
from app.core.config import settings
from app.core.errors import RateLimitAppError

logger = logging.getLogger(__name__)


def get_rate_limiter(request: Request) -> AbstractRateLimiter:
    """Return the limiter attached to the running application.

    Apps assembled without ``create_app`` get one lazily so the dependency
    still works in isolated router tests.
    """

    limiter = getattr(request.app.state, "rate_limiter", None)
    if limiter is None:
        limiter = InMemoryFixedWindowRateLimiter()
        request.app.state.rate_limiter = limiter
    return limiter


def build_rate_limit_key(
    request: Request,
    x_organization_id: str | None,
    x_api_key: str | None,
) -> str:
    """Build the namespaced limiter key for the current request."""

    if x_organization_id and x_organization_id.strip():
        return f"org:{x_organization_id.strip()}"
    if x_api_key:
        return f"api_key:{x_api_key}"

    client_host = request.client.host if request.client else "unknown"
    return f"ip:{client_host}"


def rate_limit(max_requests: int | None = None) -> Callable[..., Awaitable[None]]:
    """Create a dependency admitting at most ``max_requests`` per window.

    Args:
        max_requests: Per-route limit; ``None`` uses the limiter default.

    Returns:
        An async FastAPI dependency raising RateLimitAppError (HTTP 429)
        once the caller's window is exhausted.
    """

    async def dependency(
        request: Request,
        x_organization_id: Annotated[str | None, Header(alias=ORGANIZATION_HEADER)] = None,
        x_api_key: Annotated[str | None, Header(alias="X-API-Key")] = None,
    ) -> None:
        if not settings.app.rate_limit_enabled:
            return

        limiter = get_rate_limiter(request)
        key = build_rate_limit_key(request, x_organization_id, x_api_key)
        key_type = key.split(":", 1)[0]
        decision = limiter.check(key, max_requests)

        if decision.allowed:
            logger.debug(
                "rate_limit.allowed",
                extra={"key_type": key_type, "key_hash": hash_secret(key)},
            )
            return

        retry_after = decision.retry_after_seconds or 0
        limit = limiter.resolve_max_requests(max_requests)

        logger.warning(
            "rate_limit.exceeded",
            extra={
                "key_type": key_type,
                "key_hash": hash_secret(key),
                "limit": limit,
                "retry_after_ms": decision.retry_after_ms,
                "request_path": request.url.path,
            },
        )

        raise RateLimitAppError(
            code="rate_limit_exceeded",
            message="Rate limit exceeded. Try again later.",
            details={"retry_after": retry_after, "limit": limit},
        )

    return dependency


enforce_rate_limit = rate_limit()
