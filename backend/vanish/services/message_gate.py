"""Message Gate — loads a record and applies the expiration gate's side effects.

Invariants:
    - Missing record → MessageNotFoundError
    - Elapsed self-destruct deadline → record deleted (idempotent) → MessageNotFoundError
    - Absolute-time expiry on an ACTIVE record → exactly one guarded write
      (status active → expired); an already-EXPIRED record is never written again
    - Every other NotAvailable verdict → MessageExpiredError, no write

Design Decisions:
    - A lost race on the expiry write is harmless: whoever won either expired
      it too or consumed the last view, both leave the record unavailable
"""

import logging
from datetime import datetime, timezone

from vanish.core.domain_types import MessageId, MessageStatus
from vanish.core.errors import MessageExpiredError, MessageNotFoundError
from vanish.core.evaluate_expiration import Availability, check_availability as evaluate
from vanish.core.message_record import MessageRecord
from vanish.core.repository_protocols import MessageRecordStore

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


async def check_availability(
    store: MessageRecordStore, record: MessageRecord, now: datetime,
) -> Availability:
    """Evaluate a loaded record and apply the one side effect the verdict asks for."""
    verdict = evaluate(record, now)
    if verdict.must_delete:
        await store.delete(record.id)
        logger.info(
            "Self-destruct deadline enforced on access",
            extra={"message_id": record.id, "outcome": "destroyed"},
        )
    elif verdict.mark_expired:
        applied = await store.conditional_update(
            record.id, record.guard(), {"status": MessageStatus.EXPIRED},
        )
        logger.info(
            "Message expired by time",
            extra={
                "message_id": record.id,
                "outcome": "marked" if applied else "already_changed",
            },
        )
    return verdict


async def load_record(store: MessageRecordStore, message_id: MessageId) -> MessageRecord:
    record = await store.get(message_id)
    if record is None:
        raise MessageNotFoundError(str(message_id))
    return record


async def load_available_record(
    store: MessageRecordStore, message_id: MessageId, now: datetime,
) -> MessageRecord:
    """Fetch a record that still has budget, or raise NotFound/Expired."""
    record = await load_record(store, message_id)
    verdict = await check_availability(store, record, now)
    if verdict.available:
        return record
    if verdict.must_delete:
        raise MessageNotFoundError(str(message_id))
    raise MessageExpiredError(str(message_id), verdict.reason.value)
