"""Send audit store interface and record types."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class SendResult(str, Enum):
    """Outcome of one outbound email attempt."""

    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    QUEUED = "QUEUED"


@dataclass(frozen=True)
class SendAuditRecord:
    """One audited email attempt.

    Attributes:
        organization_id: Tenant that sent the email.
        to_email: Recipient address, lower-cased.
        result: Outcome of the attempt.
        created_at: Timezone-aware UTC timestamp.
    """

    organization_id: str
    to_email: str
    result: SendResult
    created_at: datetime


class AbstractSendAuditStore(ABC):
    """Interface for send audit storage."""

    @abstractmethod
    def record(self, record: SendAuditRecord) -> None:
        """Persist one audit record."""
        raise NotImplementedError

    @abstractmethod
    def recent_successes(
        self,
        organization_id: str,
        to_email: str,
        *,
        since: datetime,
        limit: int,
    ) -> list[SendAuditRecord]:
        """Return successful sends to ``to_email`` created at or after ``since``.

        Args:
            organization_id: Tenant to search within.
            to_email: Recipient address (compared lower-cased).
            since: Inclusive lower bound on ``created_at``.
            limit: Maximum number of records to return.

        Returns:
            Matching records, newest first.
        """
        raise NotImplementedError

    @abstractmethod
    def prune_before(self, cutoff: datetime) -> int:
        """Drop records created before ``cutoff``.

        Returns:
            Number of records removed.
        """
        raise NotImplementedError
