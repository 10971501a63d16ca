"""Request identity: API key authentication and organization scoping.

Keys are validated against a comma-separated list from the environment.
The organization header scopes rate limits and email throttling; it is
trusted as supplied because session handling lives in the web tier.
"""

from __future__ import annotations

import hashlib
import logging
from typing import Annotated

from fastapi import Header

from app.core.config import settings
from app.core.errors import AuthenticationAppError, ValidationAppError

logger = logging.getLogger(__name__)

ORGANIZATION_HEADER = "X-Organization-ID"


def hash_secret(value: str) -> str:
    """Short SHA-256 fingerprint, safe to put in logs."""
    return hashlib.sha256(value.encode()).hexdigest()[:16]


def parse_api_keys(keys_string: str | None) -> set[str]:
    """Parse comma-separated API keys into a set.

    Examples:
        >>> sorted(parse_api_keys("key1, key2 ,key1"))
        ['key1', 'key2']
        >>> parse_api_keys(None)
        set()
    """
    if not keys_string:
        return set()
    return {key.strip() for key in keys_string.split(",") if key.strip()}


def validate_api_key(provided_key: str | None) -> None:
    """Check a key against the configured set.

    Raises:
        AuthenticationAppError: When auth is required and the key is missing,
            unknown, or no keys are configured at all.
    """
    if not settings.app.api_key_required:
        return

    if not provided_key:
        logger.warning("auth.missing_key", extra={"auth_required": True})
        raise AuthenticationAppError(
            code="missing_api_key",
            message="Missing API key. Provide X-API-Key header.",
        )

    valid_keys = parse_api_keys(settings.app.api_keys)
    if not valid_keys:
        logger.error(
            "auth.failed",
            extra={"reason": "api_keys_not_configured"},
        )
        raise AuthenticationAppError(
            code="api_keys_not_configured",
            message="API key authentication is enabled but no valid keys are configured",
            details={"hint": "Set APP_API_KEYS or disable auth with APP_API_KEY_REQUIRED=false"},
        )

    if provided_key not in valid_keys:
        logger.warning(
            "auth.failed",
            extra={"reason": "invalid_api_key", "api_key_hash": hash_secret(provided_key)},
        )
        raise AuthenticationAppError(
            code="invalid_api_key",
            message="Invalid or missing API key",
        )


async def verify_api_key(
    x_api_key: Annotated[str | None, Header(alias="X-API-Key")] = None,
) -> None:
    """FastAPI dependency for API key authentication.

    Usage:
        @router.post("/protected", dependencies=[Depends(verify_api_key)])
    """
    validate_api_key(x_api_key)
    if x_api_key:
        logger.debug("auth.success", extra={"api_key_hash": hash_secret(x_api_key)})


async def require_organization_id(
    x_organization_id: Annotated[str | None, Header(alias=ORGANIZATION_HEADER)] = None,
) -> str:
    """FastAPI dependency returning the caller's organization id.

    Raises:
        ValidationAppError: If the header is absent or blank.
    """
    organization_id = (x_organization_id or "").strip()
    if not organization_id:
        raise ValidationAppError(
            code="missing_organization_id",
            message=f"Provide the {ORGANIZATION_HEADER} header.",
            details={"header": ORGANIZATION_HEADER},
        )
    return organization_id
