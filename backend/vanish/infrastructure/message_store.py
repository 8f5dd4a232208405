"""SQL Message Store — MessageRecordStore implemented on SQLAlchemy async.

Invariants:
    - Every method runs in its own session/transaction and commits before returning
    - conditional_update is ONE guarded UPDATE: applied iff rowcount == 1
      (WHERE id AND view_count = seen AND status = seen AND armed-ness = seen)
    - delete(expected=...) is ONE guarded DELETE with the same guard;
      delete() without a guard is idempotent (missing row → False, no error)
    - Every call bounded by timeout_seconds; timeout → StoreUnavailableError,
      never retried here (outcome of a timed-out write is unknown)

Design Decisions:
    - Row-level atomicity of a single UPDATE/DELETE statement is the only lock:
      no SELECT ... FOR UPDATE, no in-process lock, works on PostgreSQL and SQLite
    - synchronize_session=False: no ORM identity map to reconcile, each call
      uses a fresh session
"""

import asyncio
import logging
from enum import Enum
from typing import Any

from sqlalchemy import delete, select, update

from vanish.core.domain_types import MessageId, MessageStatus, OwnerId
from vanish.core.errors import StoreUnavailableError
from vanish.core.message_record import Attachment, MessageRecord, RecordGuard, as_utc
from vanish.infrastructure.database import DatabaseSessionManager
from vanish.models.message import Message

logger = logging.getLogger(__name__)


def to_record(row: Message) -> MessageRecord:
    """Map an ORM row to the core's immutable snapshot."""
    return MessageRecord(
        id=MessageId(row.id),
        owner_id=OwnerId(row.owner_id),
        body=row.body,
        created_at=as_utc(row.created_at),
        expiration_minutes=row.expiration_minutes,
        view_limit=row.view_limit,
        view_count=row.view_count,
        status=MessageStatus(row.status),
        self_destruct=row.self_destruct,
        self_destruct_timer_seconds=row.self_destruct_timer_seconds,
        timer_armed_at=(
            as_utc(row.timer_armed_at) if row.timer_armed_at else None
        ),
        allowed_recipients=frozenset(row.allowed_recipients or ()),
        allowed_domains=frozenset(row.allowed_domains or ()),
        attachments=tuple(Attachment(**a) for a in row.attachments or ()),
    )


def _column_values(fields: dict[str, Any]) -> dict[str, Any]:
    return {
        key: value.value if isinstance(value, Enum) else value
        for key, value in fields.items()
    }


def _guard_clauses(expected: RecordGuard) -> list:
    armed = (
        Message.timer_armed_at.is_not(None)
        if expected.timer_armed
        else Message.timer_armed_at.is_(None)
    )
    return [
        Message.view_count == expected.view_count,
        Message.status == expected.status.value,
        armed,
    ]


class SqlMessageRecordStore:
    """Message persistence with guarded single-statement mutations."""

    def __init__(self, manager: DatabaseSessionManager, timeout_seconds: float = 5.0):
        self.manager = manager
        self.timeout_seconds = timeout_seconds

    async def get(self, message_id: MessageId) -> MessageRecord | None:
        return await self._bounded("get", self._get(message_id))

    async def create(self, fields: dict[str, Any]) -> MessageId:
        return await self._bounded("create", self._create(fields))

    async def conditional_update(
        self, message_id: MessageId, expected: RecordGuard, fields: dict[str, Any],
    ) -> bool:
        return await self._bounded(
            "conditional_update",
            self._conditional_update(message_id, expected, fields),
        )

    async def delete(
        self,
        message_id: MessageId,
        expected: RecordGuard | None = None,
        owner_id: str | None = None,
    ) -> bool:
        return await self._bounded(
            "delete", self._delete(message_id, expected, owner_id),
        )

    async def _bounded(self, operation: str, coro):
        try:
            return await asyncio.wait_for(coro, timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.error(
                f"Message store {operation} timed out after {self.timeout_seconds}s",
                extra={"operation": operation},
            )
            raise StoreUnavailableError(operation)

    async def _get(self, message_id: MessageId) -> MessageRecord | None:
        async with self.manager.session() as db:
            result = await db.execute(
                select(Message).where(Message.id == message_id),
            )
            row = result.scalar_one_or_none()
            return to_record(row) if row else None

    async def _create(self, fields: dict[str, Any]) -> MessageId:
        async with self.manager.session() as db:
            row = Message(**_column_values(fields))
            db.add(row)
            await db.commit()
            return MessageId(row.id)

    async def _conditional_update(
        self, message_id: MessageId, expected: RecordGuard, fields: dict[str, Any],
    ) -> bool:
        stmt = (
            update(Message)
            .where(Message.id == message_id, *_guard_clauses(expected))
            .values(**_column_values(fields))
            .execution_options(synchronize_session=False)
        )
        async with self.manager.session() as db:
            result = await db.execute(stmt)
            await db.commit()
            return result.rowcount == 1

    async def _delete(
        self,
        message_id: MessageId,
        expected: RecordGuard | None,
        owner_id: str | None,
    ) -> bool:
        stmt = delete(Message).where(Message.id == message_id)
        if expected is not None:
            stmt = stmt.where(*_guard_clauses(expected))
        if owner_id is not None:
            stmt = stmt.where(Message.owner_id == owner_id)
        stmt = stmt.execution_options(synchronize_session=False)
        async with self.manager.session() as db:
            result = await db.execute(stmt)
            await db.commit()
            return result.rowcount == 1
