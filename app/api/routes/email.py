from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status

from app.adapters.send_audit.in_memory import InMemorySendAuditStore
from app.core.auth import require_organization_id, verify_api_key
from app.core.config import settings
from app.core.rate_limit import enforce_rate_limit
from app.schemas.email import (
    RecipientCheckRequest,
    RecipientCheckResponse,
    SendRecordRequest,
    SendRecordResponse,
)
from app.services.recipient_throttle import RecipientThrottleService

router = APIRouter(
    prefix="/email",
    tags=["Email"],
    dependencies=[Depends(verify_api_key), Depends(enforce_rate_limit)],
)


def get_recipient_throttle(request: Request) -> RecipientThrottleService:
    """Return the throttle attached to the app, creating one if missing."""

    service = getattr(request.app.state, "recipient_throttle", None)
    if service is None:
        service = RecipientThrottleService(
            InMemorySendAuditStore(),
            max_emails=settings.email.recipient_max_emails,
            window_hours=settings.email.recipient_window_hours,
        )
        request.app.state.recipient_throttle = service
    return service


@router.post("/recipient-check", response_model=RecipientCheckResponse)
def check_recipient(
    payload: RecipientCheckRequest,
    organization_id: str = Depends(require_organization_id),
    throttle: RecipientThrottleService = Depends(get_recipient_throttle),
) -> RecipientCheckResponse:
    """Report whether the organization may email ``payload.to_email`` now."""

    result = throttle.check(
        organization_id,
        payload.to_email,
        skip_rate_limit=payload.skip_rate_limit,
    )
    return RecipientCheckResponse(
        rate_limited=result.rate_limited,
        count=result.count,
        max_allowed=result.max_allowed,
        window_hours=throttle.window_hours,
        last_sent_at=result.last_sent_at,
        hours_since_last_send=result.hours_since_last_send,
    )


@router.post(
    "/sends",
    response_model=SendRecordResponse,
    status_code=status.HTTP_201_CREATED,
)
def record_send(
    payload: SendRecordRequest,
    organization_id: str = Depends(require_organization_id),
    throttle: RecipientThrottleService = Depends(get_recipient_throttle),
) -> SendRecordResponse:
    """Audit one email attempt so later checks can count it."""

    record = throttle.record_send(organization_id, payload.to_email, payload.result)
    return SendRecordResponse(
        organization_id=record.organization_id,
        to_email=record.to_email,
        result=record.result,
        created_at=record.created_at,
    )
