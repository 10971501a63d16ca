"""Pydantic schemas for the admission check endpoint."""

from __future__ import annotations

from pydantic import BaseModel, Field


class RateLimitCheckRequest(BaseModel):
    """Admission check for an arbitrary caller-chosen key."""

    key: str = Field(
        ...,
        description="Opaque scope identifier (e.g., organization id, user id, IP).",
    )
    max_requests: int | None = Field(
        default=None,
        description="Requests allowed per 60s window. Omitted or non-positive uses the default (10).",
    )


class RateLimitCheckResponse(BaseModel):
    """Admission decision."""

    allowed: bool = Field(..., description="Whether the request may proceed.")
    retry_after_ms: int | None = Field(
        default=None,
        description="Milliseconds until the current window ends (only when denied).",
    )
