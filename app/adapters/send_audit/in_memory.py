"""In-memory send audit store (per process, lost on restart)."""

from __future__ import annotations

import threading
from datetime import datetime

from app.adapters.send_audit.base import AbstractSendAuditStore, SendAuditRecord, SendResult


class InMemorySendAuditStore(AbstractSendAuditStore):
    """Thread-safe list of audit records.

    Records only leave the list through ``prune_before``; the recipient
    throttle calls it on every recorded send with its window as the cutoff.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._records: list[SendAuditRecord] = []

    def record(self, record: SendAuditRecord) -> None:
        with self._lock:
            self._records.append(record)

    def recent_successes(
        self,
        organization_id: str,
        to_email: str,
        *,
        since: datetime,
        limit: int,
    ) -> list[SendAuditRecord]:
        email = to_email.lower()
        with self._lock:
            matches = [
                r
                for r in self._records
                if r.organization_id == organization_id
                and r.to_email == email
                and r.result is SendResult.SUCCESS
                and r.created_at >= since
            ]
        matches.sort(key=lambda r: r.created_at, reverse=True)
        return matches[: max(0, limit)]

    def prune_before(self, cutoff: datetime) -> int:
        with self._lock:
            kept = [r for r in self._records if r.created_at >= cutoff]
            removed = len(self._records) - len(kept)
            self._records = kept
        return removed

    def clear(self) -> None:
        with self._lock:
            self._records.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
