"""Pydantic schemas for recipient throttle endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from app.adapters.send_audit.base import SendResult


class RecipientCheckRequest(BaseModel):
    to_email: str = Field(..., min_length=3, description="Recipient email address.")
    skip_rate_limit: bool = Field(
        default=False,
        description="Bypass the per-recipient cap (reminders).",
    )


class RecipientCheckResponse(BaseModel):
    """Whether another email to the recipient may be sent now."""

    rate_limited: bool
    count: int = Field(..., description="Successful sends counted in the current window.")
    max_allowed: int
    window_hours: int
    last_sent_at: datetime | None = None
    hours_since_last_send: int | None = None


class SendRecordRequest(BaseModel):
    to_email: str = Field(..., min_length=3, description="Recipient email address.")
    result: SendResult = Field(default=SendResult.SUCCESS)


class SendRecordResponse(BaseModel):
    organization_id: str
    to_email: str
    result: SendResult
    created_at: datetime
