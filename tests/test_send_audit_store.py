"""Tests for the in-memory send audit store."""

from datetime import datetime, timedelta, timezone

from app.adapters.send_audit.base import SendAuditRecord, SendResult
from app.adapters.send_audit.in_memory import InMemorySendAuditStore

NOW = datetime(2026, 3, 1, tzinfo=timezone.utc)


def _record(minutes_ago: int, **overrides) -> SendAuditRecord:
    fields = {
        "organization_id": "org-1",
        "to_email": "a@example.com",
        "result": SendResult.SUCCESS,
        "created_at": NOW - timedelta(minutes=minutes_ago),
    }
    fields.update(overrides)
    return SendAuditRecord(**fields)


def test_recent_successes_newest_first_and_limited() -> None:
    store = InMemorySendAuditStore()
    for minutes in (30, 10, 20, 40):
        store.record(_record(minutes))

    found = store.recent_successes("org-1", "a@example.com", since=NOW - timedelta(hours=1), limit=3)

    assert [NOW - r.created_at for r in found] == [
        timedelta(minutes=10),
        timedelta(minutes=20),
        timedelta(minutes=30),
    ]


def test_since_is_inclusive() -> None:
    store = InMemorySendAuditStore()
    store.record(_record(60))

    found = store.recent_successes("org-1", "a@example.com", since=NOW - timedelta(minutes=60), limit=5)
    assert len(found) == 1


def test_lookup_lowercases_email() -> None:
    store = InMemorySendAuditStore()
    store.record(_record(1))

    assert store.recent_successes("org-1", "A@Example.com", since=NOW - timedelta(hours=1), limit=5)


def test_clear() -> None:
    store = InMemorySendAuditStore()
    store.record(_record(1))
    store.clear()

    assert len(store) == 0


def test_prune_before_drops_only_older_records() -> None:
    store = InMemorySendAuditStore()
    for minutes in (120, 61, 60, 5):
        store.record(_record(minutes))

    removed = store.prune_before(NOW - timedelta(minutes=60))

    assert removed == 2
    assert len(store) == 2
