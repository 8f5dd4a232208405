"""Message Record & Domain Types — invariants of the immutable snapshot."""

from dataclasses import FrozenInstanceError
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from vanish.core.domain_types import MessageId, MessageStatus, OwnerId
from vanish.core.errors import (
    AccessDeniedError, ConcurrencyError, ForbiddenError, MessageExpiredError,
    MessageNotFoundError, SelfDestructNotArmedError, StoreUnavailableError,
)
from vanish.core.message_record import MessageRecord, RecordGuard, as_utc

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _record(**overrides) -> MessageRecord:
    fields = dict(
        id=MessageId(uuid4()), owner_id=OwnerId("owner"), body="hi",
        created_at=T0, expiration_minutes=15, view_limit=2,
    )
    fields.update(overrides)
    return MessageRecord(**fields)


def test_view_count_cannot_exceed_limit():
    with pytest.raises(ValueError):
        _record(view_count=3, view_limit=2)


def test_view_limit_must_be_positive():
    with pytest.raises(ValueError):
        _record(view_limit=0)


def test_record_is_immutable():
    with pytest.raises(FrozenInstanceError):
        _record().view_count = 1


def test_modes_are_mutually_exclusive():
    immediate = _record(self_destruct=True)
    timed = _record(self_destruct=True, self_destruct_timer_seconds=30)
    plain = _record(self_destruct_timer_seconds=30)
    assert immediate.destroys_on_reveal and not immediate.has_timer
    assert timed.has_timer and not timed.destroys_on_reveal
    assert not plain.has_timer and not plain.destroys_on_reveal


def test_expires_at_and_deadline():
    record = _record(
        self_destruct=True, self_destruct_timer_seconds=30, timer_armed_at=T0,
    )
    assert record.expires_at == T0 + timedelta(minutes=15)
    assert record.self_destruct_deadline == T0 + timedelta(seconds=30)
    assert _record().self_destruct_deadline is None


def test_guard_reflects_armed_state():
    assert _record(timer_armed_at=T0).guard() == RecordGuard(
        view_count=0, status=MessageStatus.ACTIVE, timer_armed=True,
    )


def test_as_utc_converts_offsets():
    plus_two = timezone(timedelta(hours=2))
    assert as_utc(datetime(2026, 3, 1, 14, 0, tzinfo=plus_two)) == T0


# ─── error taxonomy ──────────────────────────────────────────────

@pytest.mark.parametrize("error,status,code", [
    (MessageNotFoundError("m"), 404, "MESSAGE_NOT_FOUND"),
    (MessageExpiredError("m", "time_expired"), 410, "MESSAGE_EXPIRED"),
    (AccessDeniedError("m"), 403, "ACCESS_DENIED"),
    (ForbiddenError("m"), 403, "FORBIDDEN"),
    (ConcurrencyError("busy"), 409, "CONCURRENCY_CONFLICT"),
    (SelfDestructNotArmedError("m"), 409, "SELF_DESTRUCT_NOT_ARMED"),
    (StoreUnavailableError("get"), 503, "STORE_UNAVAILABLE"),
])
def test_errors_map_to_status_and_code(error, status, code):
    assert error.http_status == status
    assert error.to_response()["error"]["code"] == code


def test_store_error_message_is_generic():
    body = StoreUnavailableError("conditional_update").to_response()
    assert "sql" not in body["error"]["message"].lower()
    assert body["error"]["context"]["operation"] == "conditional_update"
