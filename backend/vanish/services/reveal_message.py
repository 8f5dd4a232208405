"""View Transaction Coordinator — grants reveals without over-reading the view budget.

Invariants:
    - Each attempt: fetch → expiration gate → access gate → ONE guarded store call
    - A caller that wins the guarded call is the sole grantee of that unit of budget
    - A caller that loses re-fetches and re-evaluates (never reuses its stale read);
      with r units left, at most r concurrent callers are granted
    - Immediate self-destruct: the guarded DELETE is the grant; losers see NotFound
    - Timer self-destruct: the first granted reveal arms the deadline in the same update
    - Store timeouts propagate as StoreUnavailableError: a timed-out write has an
      unknown outcome, so it is never retried here
    - Contention is bounded by max_contention_rounds → ConcurrencyError

Design Decisions:
    - Class with injected store/clock (like the handler classes): stateless across
      requests, safe to construct per request
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from vanish.core.domain_types import AccessDecision, MessageId, RevealKind
from vanish.core.errors import AccessDeniedError, ConcurrencyError, ErrorContext
from vanish.core.evaluate_access import evaluate_access
from vanish.core.message_record import Attachment, MessageRecord
from vanish.core.plan_reveal import RevealPlan, plan_reveal
from vanish.core.repository_protocols import MessageRecordStore
from vanish.core.self_destruct import Countdown, countdown
from vanish.services.message_gate import load_available_record, utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ViewerContext:
    """Who is asking. email is untrusted input."""
    email: str | None = None


@dataclass(frozen=True)
class RevealResult:
    content: str
    attachments: tuple[Attachment, ...]
    view_count: int
    view_limit: int
    destroyed: bool
    expiry_deadline: datetime | None = None
    countdown: Countdown | None = None


class RevealCoordinator:
    """Executes reveal transactions against a MessageRecordStore."""

    def __init__(
        self,
        store: MessageRecordStore,
        max_contention_rounds: int = 32,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.max_contention_rounds = max_contention_rounds
        self.clock = clock

    async def reveal(
        self, message_id: MessageId, viewer: ViewerContext,
    ) -> RevealResult:
        for attempt in range(self.max_contention_rounds):
            now = self.clock()
            record = await load_available_record(self.store, message_id, now)
            if evaluate_access(record, viewer.email) is AccessDecision.DENIED:
                raise AccessDeniedError(str(message_id))

            plan = plan_reveal(record, now)
            if await self._execute(record, plan):
                logger.info(
                    "Reveal granted",
                    extra={
                        "message_id": message_id,
                        "outcome": plan.new_status.value,
                        "attempt": attempt + 1,
                    },
                )
                return _result(record, plan, now)

            logger.info(
                "Reveal lost a concurrent update, re-evaluating",
                extra={"message_id": message_id, "attempt": attempt + 1},
            )

        raise ConcurrencyError(
            "Message is under heavy contention, please try again",
            ErrorContext(message_id=str(message_id), operation="reveal"),
        )

    async def _execute(self, record: MessageRecord, plan: RevealPlan) -> bool:
        if plan.kind is RevealKind.DELETE:
            return await self.store.delete(record.id, expected=plan.guard)
        return await self.store.conditional_update(record.id, plan.guard, plan.fields)


def _result(record: MessageRecord, plan: RevealPlan, now: datetime) -> RevealResult:
    if plan.kind is RevealKind.DELETE:
        view_count = record.view_count + 1
    else:
        view_count = plan.fields["view_count"]
    return RevealResult(
        content=record.body,
        attachments=record.attachments,
        view_count=view_count,
        view_limit=record.view_limit,
        destroyed=plan.kind is RevealKind.DELETE,
        expiry_deadline=plan.deadline,
        countdown=countdown(plan.deadline, now) if plan.deadline else None,
    )
