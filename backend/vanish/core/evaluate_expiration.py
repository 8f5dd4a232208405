"""Expiration Gate — decides whether a record still has time and view budget.

Invariants:
    - check_availability is PURE: returns a verdict, performs no IO
    - Fails closed: any doubt (non-active status, exhausted views, past deadline)
      answers NotAvailable
    - mark_expired is True only for an ACTIVE record past its absolute expiry,
      so a record already marked EXPIRED never triggers a second write
    - An elapsed self-destruct deadline outranks every other reason: the shell
      must delete, not merely mark

Design Decisions:
    - Action descriptor over side effect: shell applies the single idempotent
      expiry write (conditional on status == active)
    - Strict "now > expires_at": a record is still available at its exact expiry instant
"""

from dataclasses import dataclass
from datetime import datetime

from vanish.core.domain_types import MessageStatus, UnavailableReason
from vanish.core.message_record import MessageRecord


@dataclass(frozen=True)
class Availability:
    """Verdict of the expiration gate."""
    available: bool
    reason: UnavailableReason | None = None
    mark_expired: bool = False

    @property
    def must_delete(self) -> bool:
        return self.reason is UnavailableReason.SELF_DESTRUCT_ELAPSED


AVAILABLE = Availability(available=True)


def _not_available(
    reason: UnavailableReason, mark_expired: bool = False,
) -> Availability:
    return Availability(available=False, reason=reason, mark_expired=mark_expired)


def is_deadline_passed(record: MessageRecord, now: datetime) -> bool:
    """True once an armed self-destruct deadline is strictly in the past."""
    deadline = record.self_destruct_deadline
    return deadline is not None and now > deadline


def check_availability(record: MessageRecord, now: datetime) -> Availability:
    """Pure expiration gate. Order matters: deletion > status > views > time."""
    if is_deadline_passed(record, now):
        return _not_available(UnavailableReason.SELF_DESTRUCT_ELAPSED)

    if record.status is not MessageStatus.ACTIVE:
        return _not_available(UnavailableReason.STATUS_EXPIRED)

    if record.view_count >= record.view_limit:
        return _not_available(UnavailableReason.VIEW_LIMIT_REACHED)

    if now > record.expires_at:
        return _not_available(UnavailableReason.TIME_EXPIRED, mark_expired=True)

    return AVAILABLE
