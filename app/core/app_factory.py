"""Application factory for the FastAPI app.

Builds the app together with the per-process state it owns: one rate
limiter and one recipient throttle, stored on ``app.state``.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI

from app.adapters.rate_limit.base import AbstractRateLimiter
from app.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from app.adapters.send_audit.in_memory import InMemorySendAuditStore
from app.api.routes import email_router, health_router, rate_limit_router
from app.core.config import settings
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import request_id_middleware
from app.core.openapi import apply_openapi_customizations
from app.services.recipient_throttle import RecipientThrottleService

logger = logging.getLogger(__name__)


def create_app(
    *,
    rate_limiter: AbstractRateLimiter | None = None,
    recipient_throttle: RecipientThrottleService | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        rate_limiter: Limiter to share across routes; a fresh in-memory one
            by default.
        recipient_throttle: Recipient throttle; built from ``settings.email``
            over an in-memory audit store by default.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    configure_logging(settings.log)

    app = FastAPI(
        title="Vergo Admission API",
        description=(
            "Best-effort, per-process admission control for Vergo workflows: "
            "fixed-window rate limiting per organization and a per-recipient "
            "email send throttle. Requires X-API-Key."
        ),
        version="0.1.0",
    )

    if rate_limiter is None:
        rate_limiter = InMemoryFixedWindowRateLimiter()
    if recipient_throttle is None:
        recipient_throttle = RecipientThrottleService(
            InMemorySendAuditStore(),
            max_emails=settings.email.recipient_max_emails,
            window_hours=settings.email.recipient_window_hours,
        )
    app.state.rate_limiter = rate_limiter
    app.state.recipient_throttle = recipient_throttle

    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    app.include_router(rate_limit_router, prefix="/v1")
    app.include_router(email_router, prefix="/v1")
    app.include_router(health_router)

    apply_openapi_customizations(app)

    logger.info(
        "app.created",
        extra={
            "app_env": settings.app_env,
            "rate_limit_enabled": settings.app.rate_limit_enabled,
            "api_key_required": settings.app.api_key_required,
        },
    )
    return app
