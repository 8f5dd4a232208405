"""Reveal Plan — the pure half of the view transaction.

Computes WHAT one reveal does to a record; the shell executes it as a single
conditional store call guarded by the state observed here.

Invariants:
    - plan_reveal only accepts records the expiration gate found available
    - INCREMENT: view_count + 1, status flips to EXPIRED exactly when
      view_count + 1 == view_limit (never past it)
    - DELETE (immediate self-destruct): no field changes, the row goes away
    - Timer mode arms timer_armed_at = now in the same update, only if unarmed
    - guard == record.guard(): the update applies only if nobody moved first

Design Decisions:
    - Plan-then-execute (impureim sandwich): the store method stays generic
      (conditional_update / guarded delete) and per-backend, the transition rule
      stays here and is unit-testable without a database
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from vanish.core.domain_types import MessageStatus, RevealKind
from vanish.core.evaluate_expiration import check_availability
from vanish.core.message_record import MessageRecord, RecordGuard
from vanish.core.self_destruct import compute_deadline


@dataclass(frozen=True)
class RevealPlan:
    kind: RevealKind
    guard: RecordGuard
    fields: dict[str, Any] = field(default_factory=dict)
    arms_timer: bool = False
    deadline: datetime | None = None

    @property
    def new_status(self) -> MessageStatus:
        if self.kind is RevealKind.DELETE:
            return MessageStatus.DESTROYED
        return self.fields["status"]


def next_status(record: MessageRecord) -> MessageStatus:
    """Status after consuming one more view."""
    if record.view_count + 1 >= record.view_limit:
        return MessageStatus.EXPIRED
    return MessageStatus.ACTIVE


def plan_reveal(record: MessageRecord, now: datetime) -> RevealPlan:
    """Build the single-transaction plan for consuming one unit of view budget."""
    verdict = check_availability(record, now)
    if not verdict.available:
        raise ValueError(
            f"cannot plan reveal for unavailable record ({verdict.reason})",
        )

    guard = record.guard()
    if record.destroys_on_reveal:
        return RevealPlan(kind=RevealKind.DELETE, guard=guard)

    fields: dict[str, Any] = {
        "view_count": record.view_count + 1,
        "status": next_status(record),
    }
    arms_timer = record.has_timer and record.timer_armed_at is None
    if arms_timer:
        fields["timer_armed_at"] = now
        deadline = compute_deadline(now, record.self_destruct_timer_seconds)
    else:
        deadline = record.self_destruct_deadline

    return RevealPlan(
        kind=RevealKind.INCREMENT, guard=guard, fields=fields,
        arms_timer=arms_timer, deadline=deadline,
    )
