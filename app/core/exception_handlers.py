"""Global exception handlers for consistent error responses.

Design:
- ValidationAppError -> 400, AuthenticationAppError -> 403,
  RateLimitAppError -> 429 with Retry-After
- Unexpected Exception -> generic 500 (safety net)
- All bodies look like ``{"error": {"code", "message", "request_id"}}``
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.errors import AppError, AuthenticationAppError, RateLimitAppError
from app.core.logging import get_request_id

logger = logging.getLogger(__name__)


def _status_for(exc: AppError) -> int:
    if isinstance(exc, AuthenticationAppError):
        return 403
    if isinstance(exc, RateLimitAppError):
        return 429
    return 400


def _rate_limit_headers(exc: RateLimitAppError) -> dict[str, str]:
    if not settings.app.rate_limit_include_headers:
        return {}

    details = exc.details or {}
    headers = {"X-RateLimit-Remaining": "0"}
    if "retry_after" in details:
        headers["Retry-After"] = str(details["retry_after"])
    if "limit" in details:
        headers["X-RateLimit-Limit"] = str(details["limit"])
    return headers


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Translate an AppError into its JSON response.

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with the mapped status code and error body.
    """
    status_code = _status_for(exc)

    logger.warning(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "has_details": bool(exc.details),
            "request_path": request.url.path,
        },
    )

    error_content = {
        "code": exc.code,
        "message": exc.message,
        "request_id": get_request_id(),
    }
    if exc.details:
        error_content["details"] = exc.details

    headers = _rate_limit_headers(exc) if isinstance(exc, RateLimitAppError) else None

    return JSONResponse(
        status_code=status_code,
        content={"error": error_content},
        headers=headers or None,
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback for unexpected errors; never leaks internals to the client."""
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
        },
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "internal_server_error",
                "message": "An unexpected error occurred. Please try again later.",
                "request_id": get_request_id(),
            }
        },
    )


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(Exception)(general_exception_handler)
