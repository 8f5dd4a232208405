"""Expiration Gate — tests for the pure availability verdict.

Tests cover:
    - Available inside time and view budget
    - T0 + 14m available, T0 + 16m not available (15 minute expiry)
    - mark_expired only for ACTIVE records past their absolute expiry
    - Already EXPIRED records answer NotAvailable without asking for a write
    - View limit exhaustion and elapsed self-destruct deadlines
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

from vanish.core.domain_types import MessageId, MessageStatus, OwnerId, UnavailableReason
from vanish.core.evaluate_expiration import check_availability, is_deadline_passed
from vanish.core.message_record import MessageRecord

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _record(**overrides) -> MessageRecord:
    fields = dict(
        id=MessageId(uuid4()), owner_id=OwnerId("owner"), body="hi",
        created_at=T0, expiration_minutes=15, view_limit=3,
    )
    fields.update(overrides)
    return MessageRecord(**fields)


# ─── time budget ─────────────────────────────────────────────────

def test_available_before_expiry():
    verdict = check_availability(_record(), T0 + timedelta(minutes=14))
    assert verdict.available
    assert verdict.reason is None
    assert not verdict.mark_expired


def test_not_available_after_expiry_and_asks_for_mark():
    verdict = check_availability(_record(), T0 + timedelta(minutes=16))
    assert not verdict.available
    assert verdict.reason is UnavailableReason.TIME_EXPIRED
    assert verdict.mark_expired


def test_available_at_exact_expiry_instant():
    assert check_availability(_record(), T0 + timedelta(minutes=15)).available


def test_already_expired_status_never_asks_for_second_write():
    record = _record(status=MessageStatus.EXPIRED)
    verdict = check_availability(record, T0 + timedelta(minutes=16))
    assert not verdict.available
    assert verdict.reason is UnavailableReason.STATUS_EXPIRED
    assert not verdict.mark_expired


def test_naive_created_at_treated_as_utc():
    record = _record(created_at=T0.replace(tzinfo=None))
    assert check_availability(record, T0 + timedelta(minutes=14)).available
    assert not check_availability(record, T0 + timedelta(minutes=16)).available


# ─── view budget ─────────────────────────────────────────────────

def test_view_limit_reached_is_not_available():
    record = _record(view_count=3, view_limit=3)
    verdict = check_availability(record, T0)
    assert verdict.reason is UnavailableReason.VIEW_LIMIT_REACHED
    assert not verdict.mark_expired


def test_last_view_remaining_is_available():
    assert check_availability(_record(view_count=2, view_limit=3), T0).available


# ─── self-destruct deadline ──────────────────────────────────────

def _armed(armed_at: datetime, **overrides) -> MessageRecord:
    return _record(
        self_destruct=True, self_destruct_timer_seconds=30,
        timer_armed_at=armed_at, view_count=1, **overrides,
    )


def test_elapsed_deadline_requires_delete_regardless_of_budget():
    record = _armed(T0)
    verdict = check_availability(record, T0 + timedelta(seconds=31))
    assert not verdict.available
    assert verdict.must_delete
    assert verdict.reason is UnavailableReason.SELF_DESTRUCT_ELAPSED


def test_elapsed_deadline_outranks_expired_status():
    record = _armed(T0, status=MessageStatus.EXPIRED)
    assert check_availability(record, T0 + timedelta(minutes=1)).must_delete


def test_armed_deadline_not_yet_passed_keeps_record_available():
    record = _armed(T0)
    verdict = check_availability(record, T0 + timedelta(seconds=29))
    assert verdict.available
    assert not is_deadline_passed(record, T0 + timedelta(seconds=30))
    assert is_deadline_passed(record, T0 + timedelta(seconds=30, microseconds=1))


def test_unarmed_timer_never_passes():
    record = _record(self_destruct=True, self_destruct_timer_seconds=30)
    assert not is_deadline_passed(record, T0 + timedelta(days=1))
