"""SQL Message Store — guarded UPDATE/DELETE semantics on a real database.

Invariants:
    - conditional_update applies iff every guarded field still matches
    - delete(expected=...) is refused on a stale guard; delete(owner_id=...) on a non-owner
    - Unguarded delete of a missing row is False, never an error
    - Concurrent reveals through the real store never exceed the view budget
    - A call that overruns the timeout raises StoreUnavailableError
"""

import asyncio
from uuid import uuid4

import pytest

from vanish.core.domain_types import MessageId, MessageStatus
from vanish.core.errors import MessageExpiredError, StoreUnavailableError
from vanish.core.message_record import RecordGuard
from vanish.core.validate_message import build_message_fields
from vanish.infrastructure.message_store import SqlMessageRecordStore
from vanish.services.reveal_message import RevealCoordinator, ViewerContext


def _fields(**overrides):
    kwargs = dict(
        owner_id="owner-1", body="the secret", view_limit=2, expiration_minutes=60,
        self_destruct=False, self_destruct_timer_seconds=None,
        allowed_recipients=[], allowed_domains=[], attachments=[],
    )
    kwargs.update(overrides)
    return build_message_fields(**kwargs)


FRESH = RecordGuard(view_count=0, status=MessageStatus.ACTIVE, timer_armed=False)


async def test_create_then_get_round_trips_record(sql_store):
    message_id = await sql_store.create(_fields(
        allowed_domains=["@X.com"],
        attachments=[{"url": "https://cdn/x.pdf", "name": "x.pdf", "size": 10, "type": ""}],
    ))

    record = await sql_store.get(message_id)

    assert record.id == message_id
    assert record.status is MessageStatus.ACTIVE
    assert record.view_count == 0
    assert record.allowed_domains == frozenset({"@x.com"})
    assert record.attachments[0].name == "x.pdf"
    assert record.created_at.tzinfo is not None


async def test_get_missing_returns_none(sql_store):
    assert await sql_store.get(MessageId(uuid4())) is None


async def test_conditional_update_applies_on_matching_guard(sql_store):
    message_id = await sql_store.create(_fields())

    applied = await sql_store.conditional_update(
        message_id, FRESH, {"view_count": 1, "status": MessageStatus.ACTIVE},
    )

    assert applied
    assert (await sql_store.get(message_id)).view_count == 1


async def test_conditional_update_refused_on_stale_guard(sql_store):
    message_id = await sql_store.create(_fields())
    await sql_store.conditional_update(message_id, FRESH, {"view_count": 1})

    applied = await sql_store.conditional_update(message_id, FRESH, {"view_count": 1})

    assert not applied
    assert (await sql_store.get(message_id)).view_count == 1


async def test_timer_arm_guard_applies_once(sql_store, clock):
    message_id = await sql_store.create(
        _fields(self_destruct=True, self_destruct_timer_seconds=30),
    )
    first_arm = clock()

    assert await sql_store.conditional_update(
        message_id, FRESH, {"timer_armed_at": first_arm},
    )
    clock.advance(seconds=5)
    assert not await sql_store.conditional_update(
        message_id, FRESH, {"timer_armed_at": clock()},
    )
    record = await sql_store.get(message_id)
    assert record.timer_armed_at == first_arm


async def test_guarded_delete_refused_on_stale_guard(sql_store):
    message_id = await sql_store.create(_fields())
    await sql_store.conditional_update(message_id, FRESH, {"view_count": 1})

    assert not await sql_store.delete(message_id, expected=FRESH)
    assert await sql_store.get(message_id) is not None


async def test_owner_delete_checks_owner(sql_store):
    message_id = await sql_store.create(_fields())

    assert not await sql_store.delete(message_id, owner_id="intruder")
    assert await sql_store.get(message_id) is not None
    assert await sql_store.delete(message_id, owner_id="owner-1")
    assert await sql_store.get(message_id) is None


async def test_unguarded_delete_is_idempotent(sql_store):
    message_id = await sql_store.create(_fields())
    assert await sql_store.delete(message_id)
    assert not await sql_store.delete(message_id)


async def test_concurrent_reveals_respect_budget(sql_store, clock):
    message_id = await sql_store.create(_fields(view_limit=2))
    coordinator = RevealCoordinator(sql_store, max_contention_rounds=32, clock=clock)

    results = await asyncio.gather(
        *(coordinator.reveal(message_id, ViewerContext()) for _ in range(5)),
        return_exceptions=True,
    )

    granted = [r for r in results if not isinstance(r, Exception)]
    assert len(granted) == 2
    assert all(
        isinstance(r, MessageExpiredError)
        for r in results if isinstance(r, Exception)
    )
    record = await sql_store.get(message_id)
    assert record.view_count == 2
    assert record.status is MessageStatus.EXPIRED


async def test_timeout_raises_store_unavailable(db_manager, monkeypatch):
    store = SqlMessageRecordStore(db_manager, timeout_seconds=0.01)

    async def _slow_get(message_id):
        await asyncio.sleep(1)

    monkeypatch.setattr(store, "_get", _slow_get)

    with pytest.raises(StoreUnavailableError) as exc:
        await store.get(MessageId(uuid4()))
    assert exc.value.context.operation == "get"
