"""Reveal Plan — tests for the pure view-transaction transition.

Tests cover:
    - INCREMENT keeps ACTIVE below the limit, flips to EXPIRED on the last view
    - Guard captures the observed view_count/status/armed-ness
    - Immediate self-destruct plans a guarded DELETE
    - Timer mode arms exactly once: deadline = now + timer on first reveal,
      existing deadline reused afterwards
    - Unavailable records cannot be planned
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from vanish.core.domain_types import MessageId, MessageStatus, OwnerId, RevealKind
from vanish.core.message_record import MessageRecord, RecordGuard
from vanish.core.plan_reveal import next_status, plan_reveal

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
NOW = T0 + timedelta(minutes=1)


def _record(**overrides) -> MessageRecord:
    fields = dict(
        id=MessageId(uuid4()), owner_id=OwnerId("owner"), body="hi",
        created_at=T0, expiration_minutes=60, view_limit=3,
    )
    fields.update(overrides)
    return MessageRecord(**fields)


def test_increment_below_limit_stays_active():
    plan = plan_reveal(_record(view_count=0), NOW)
    assert plan.kind is RevealKind.INCREMENT
    assert plan.fields == {"view_count": 1, "status": MessageStatus.ACTIVE}
    assert plan.new_status is MessageStatus.ACTIVE
    assert plan.deadline is None


def test_last_view_flips_to_expired():
    plan = plan_reveal(_record(view_count=2), NOW)
    assert plan.fields["view_count"] == 3
    assert plan.fields["status"] is MessageStatus.EXPIRED


def test_guard_matches_observed_state():
    plan = plan_reveal(_record(view_count=1), NOW)
    assert plan.guard == RecordGuard(
        view_count=1, status=MessageStatus.ACTIVE, timer_armed=False,
    )


def test_immediate_self_destruct_plans_delete():
    plan = plan_reveal(_record(self_destruct=True, view_limit=5), NOW)
    assert plan.kind is RevealKind.DELETE
    assert plan.fields == {}
    assert plan.new_status is MessageStatus.DESTROYED


def test_timer_mode_first_reveal_arms_deadline():
    record = _record(self_destruct=True, self_destruct_timer_seconds=30)
    plan = plan_reveal(record, NOW)
    assert plan.kind is RevealKind.INCREMENT
    assert plan.arms_timer
    assert plan.fields["timer_armed_at"] == NOW
    assert plan.deadline == NOW + timedelta(seconds=30)


def test_timer_mode_armed_record_keeps_original_deadline():
    armed_at = NOW - timedelta(seconds=10)
    record = _record(
        self_destruct=True, self_destruct_timer_seconds=30,
        timer_armed_at=armed_at, view_count=1,
    )
    plan = plan_reveal(record, NOW)
    assert not plan.arms_timer
    assert "timer_armed_at" not in plan.fields
    assert plan.deadline == armed_at + timedelta(seconds=30)
    assert plan.guard.timer_armed


def test_unavailable_record_cannot_be_planned():
    with pytest.raises(ValueError):
        plan_reveal(_record(view_count=3), NOW)
    with pytest.raises(ValueError):
        plan_reveal(_record(), T0 + timedelta(hours=2))


def test_next_status_never_overshoots():
    assert next_status(_record(view_count=0, view_limit=1)) is MessageStatus.EXPIRED
    assert next_status(_record(view_count=0, view_limit=2)) is MessageStatus.ACTIVE
