"""Self-Destruct Deadline Math — tests for deadline, remaining time, countdown."""

from datetime import datetime, timedelta, timezone

from vanish.core.self_destruct import Countdown, compute_deadline, countdown, remaining_seconds

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def test_deadline_is_armed_at_plus_timer():
    assert compute_deadline(T0, 30) == T0 + timedelta(seconds=30)


def test_remaining_seconds_never_negative():
    deadline = T0 + timedelta(seconds=30)
    assert remaining_seconds(deadline, T0) == 30
    assert remaining_seconds(deadline, T0 + timedelta(minutes=5)) == 0


def test_countdown_breakdown():
    deadline = T0 + timedelta(days=1, hours=2, minutes=3, seconds=4)
    assert countdown(deadline, T0) == Countdown(days=1, hours=2, minutes=3, seconds=4)


def test_countdown_is_none_once_reached():
    assert countdown(T0, T0) is None
    assert countdown(T0, T0 + timedelta(seconds=1)) is None


def test_countdown_serializes():
    assert countdown(T0 + timedelta(seconds=90), T0).to_dict() == {
        "days": 0, "hours": 0, "minutes": 1, "seconds": 30,
    }
