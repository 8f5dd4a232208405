"""Self-Destruct Scheduler — serves the one-shot deadline and enforces deletion server-side.

Invariants:
    - timer_armed_at is written only by the reveal transaction (core/plan_reveal.py),
      guarded by timer_armed_at IS NULL; nothing here writes it
    - arm() is read-only: it returns the deadline the first reveal armed, after the
      access gate, and never starts a countdown on its own
    - Deletion triggers: (a) expire() when the viewer's countdown hits zero,
      (b) any access past the deadline (services/message_gate.py)
    - expire() deletes only when the server clock agrees the deadline passed;
      the client's countdown is never the authority
    - Deleting an already-deleted record is silent success

Design Decisions:
    - No background sweeper: trigger (b) makes every read path enforce the
      deadline, so a record past its deadline can never be served
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from vanish.core.domain_types import AccessDecision, MessageId
from vanish.core.errors import (
    AccessDeniedError, MessageNotFoundError, SelfDestructNotArmedError,
    SelfDestructNotConfiguredError,
)
from vanish.core.evaluate_access import evaluate_access
from vanish.core.evaluate_expiration import is_deadline_passed
from vanish.core.repository_protocols import MessageRecordStore
from vanish.services.message_gate import load_record, utc_now
from vanish.services.reveal_message import ViewerContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExpireOutcome:
    destroyed: bool
    deadline: datetime | None = None


class SelfDestructScheduler:
    """Reports and enforces self-destruct deadlines."""

    def __init__(
        self,
        store: MessageRecordStore,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.clock = clock

    async def arm(self, message_id: MessageId, viewer: ViewerContext) -> datetime:
        """Authoritative deadline of a timer armed by the first reveal."""
        record = await load_record(self.store, message_id)
        if not record.has_timer:
            raise SelfDestructNotConfiguredError(str(message_id))
        if is_deadline_passed(record, self.clock()):
            await self.store.delete(message_id)
            logger.info(
                "Self-destruct deadline enforced on access",
                extra={"message_id": message_id, "outcome": "destroyed"},
            )
            raise MessageNotFoundError(str(message_id))
        if evaluate_access(record, viewer.email) is AccessDecision.DENIED:
            raise AccessDeniedError(str(message_id))

        deadline = record.self_destruct_deadline
        if deadline is None:
            raise SelfDestructNotArmedError(str(message_id))
        return deadline

    async def expire(self, message_id: MessageId) -> ExpireOutcome:
        """A viewer's countdown reached zero; delete if the server agrees."""
        record = await self.store.get(message_id)
        if record is None:
            return ExpireOutcome(destroyed=True)
        if not record.has_timer:
            raise SelfDestructNotConfiguredError(str(message_id))

        deadline = record.self_destruct_deadline
        if deadline is None or not is_deadline_passed(record, self.clock()):
            return ExpireOutcome(destroyed=False, deadline=deadline)

        await self.store.delete(message_id)
        logger.info(
            "Self-destruct deadline enforced by countdown",
            extra={"message_id": message_id, "outcome": "destroyed"},
        )
        return ExpireOutcome(destroyed=True)
