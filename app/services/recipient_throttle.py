"""Per-recipient email throttle.

Caps how many successful emails an organization sends to the same address
within a rolling window (5 per 24 hours by default). The count comes from the
send audit store, so it survives as long as the store does.

Behavior:
- Addresses are compared lower-cased
- ``skip_rate_limit`` bypasses the check entirely (used for reminders)
- Store failures fail open: the send is allowed and a warning is logged
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

from app.adapters.send_audit.base import AbstractSendAuditStore, SendAuditRecord, SendResult

logger = logging.getLogger(__name__)

DEFAULT_MAX_EMAILS = 5
DEFAULT_WINDOW_HOURS = 24


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class RecipientThrottleResult:
    """Outcome of a recipient throttle check.

    Attributes:
        rate_limited: True when another send must not go out now.
        count: Successful sends seen in the window (capped at max_allowed + 1).
        max_allowed: Configured limit per window.
        last_sent_at: Timestamp of the newest successful send, if any.
        hours_since_last_send: Whole hours since ``last_sent_at`` (rounded).
    """

    rate_limited: bool
    count: int
    max_allowed: int
    last_sent_at: datetime | None = None
    hours_since_last_send: int | None = None


class RecipientThrottleService:
    """Decide whether an organization may email a recipient again."""

    def __init__(
        self,
        store: AbstractSendAuditStore,
        *,
        max_emails: int = DEFAULT_MAX_EMAILS,
        window_hours: int = DEFAULT_WINDOW_HOURS,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if max_emails < 1:
            raise ValueError("max_emails must be >= 1")
        if window_hours < 1:
            raise ValueError("window_hours must be >= 1")

        self._store = store
        self._max_emails = max_emails
        self._window = timedelta(hours=window_hours)
        self._clock = clock

    @property
    def max_emails(self) -> int:
        return self._max_emails

    @property
    def window_hours(self) -> int:
        return int(self._window.total_seconds() // 3600)

    def check(
        self,
        organization_id: str,
        to_email: str,
        *,
        skip_rate_limit: bool = False,
    ) -> RecipientThrottleResult:
        """Count recent successful sends to ``to_email`` and compare to the cap.

        Args:
            organization_id: Sending tenant.
            to_email: Recipient address.
            skip_rate_limit: Bypass the check (the store is not queried).

        Returns:
            RecipientThrottleResult describing the decision.
        """
        if skip_rate_limit:
            return RecipientThrottleResult(
                rate_limited=False, count=0, max_allowed=self._max_emails
            )

        now = self._clock()
        try:
            recent = self._store.recent_successes(
                organization_id,
                to_email.lower(),
                since=now - self._window,
                limit=self._max_emails + 1,
            )
        except Exception as exc:
            logger.warning(
                "recipient_throttle.check_failed",
                extra={
                    "organization_id": organization_id,
                    "error_type": type(exc).__name__,
                    "error_msg": str(exc),
                },
            )
            return RecipientThrottleResult(
                rate_limited=False, count=0, max_allowed=self._max_emails
            )

        count = len(recent)
        if count < self._max_emails:
            return RecipientThrottleResult(
                rate_limited=False, count=count, max_allowed=self._max_emails
            )

        last_sent_at = recent[0].created_at if recent else None
        hours = None
        if last_sent_at is not None:
            hours = round((now - last_sent_at).total_seconds() / 3600)

        logger.info(
            "recipient_throttle.limited",
            extra={
                "organization_id": organization_id,
                "to_email": to_email,
                "count": count,
                "max_allowed": self._max_emails,
                "hours_since_last_send": hours,
            },
        )
        return RecipientThrottleResult(
            rate_limited=True,
            count=count,
            max_allowed=self._max_emails,
            last_sent_at=last_sent_at,
            hours_since_last_send=hours,
        )

    def record_send(
        self,
        organization_id: str,
        to_email: str,
        result: SendResult = SendResult.SUCCESS,
    ) -> SendAuditRecord:
        """Store an audit record stamped with the service clock.

        Records older than the window can no longer affect a check, so they
        are pruned from the store first.
        """
        now = self._clock()
        record = SendAuditRecord(
            organization_id=organization_id,
            to_email=to_email.lower(),
            result=result,
            created_at=now,
        )
        self._store.prune_before(now - self._window)
        self._store.record(record)
        return record
