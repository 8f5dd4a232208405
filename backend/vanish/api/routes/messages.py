"""Message Routes — the public surface of the ephemeral message engine.

Invariants:
    - Routes never contain business logic: every decision is made by services/core
    - Reveal-path failures surface as VanishError envelopes (404/410/403/409/503),
      never with store detail
    - GET /{id} never returns content; only POST /{id}/reveal consumes budget

Design Decisions:
    - POST for access/reveal: they carry the viewer email in the body and
      reveal mutates state
    - Notifications scheduled with BackgroundTasks after the 201 is built
"""

import logging
from collections.abc import Callable
from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, Response, status

from vanish.api.dependencies import get_clock, get_message_store, get_requester_id
from vanish.config import Settings, get_settings
from vanish.core.domain_types import AccessDecision, MessageId, OwnerId
from vanish.core.repository_protocols import MessageRecordStore
from vanish.core.validate_message import normalize_recipients
from vanish.schemas.message import (
    AccessResponse, AvailabilityResponse, MessageCreate, MessageCreated,
    RevealResponse, SelfDestructResponse, ViewerRequest,
)
from vanish.services.message_gate import load_available_record
from vanish.services.message_lifecycle import (
    create_message, delete_message, shareable_link, verify_viewer,
)
from vanish.services.notify_recipients import build_mail_sender, notify_recipients
from vanish.services.reveal_message import RevealCoordinator, ViewerContext
from vanish.services.self_destruct import SelfDestructScheduler

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/messages", tags=["messages"])


@router.post(
    "", response_model=MessageCreated, status_code=status.HTTP_201_CREATED,
)
async def create(
    body: MessageCreate,
    background_tasks: BackgroundTasks,
    owner_id: OwnerId = Depends(get_requester_id),
    store: MessageRecordStore = Depends(get_message_store),
    settings: Settings = Depends(get_settings),
):
    """Create a message and notify its allowed recipients."""
    message_id = await create_message(store, owner_id, body, settings)
    link = shareable_link(settings.public_base_url, message_id)
    background_tasks.add_task(
        notify_recipients,
        build_mail_sender(settings),
        normalize_recipients(body.allowed_recipients),
        link,
        settings.mail_from_name,
    )
    return MessageCreated(id=message_id, link=link)


@router.get("/{message_id}", response_model=AvailabilityResponse)
async def availability(
    message_id: UUID,
    store: MessageRecordStore = Depends(get_message_store),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    """Pre-reveal summary. 404 if gone, 410 if out of budget."""
    record = await load_available_record(store, MessageId(message_id), clock())
    return AvailabilityResponse(
        id=record.id,
        available=True,
        view_count=record.view_count,
        view_limit=record.view_limit,
        self_destruct=record.self_destruct,
        self_destruct_timer_seconds=record.self_destruct_timer_seconds,
        requires_email=record.is_restricted,
        expires_at=record.expires_at,
        self_destruct_deadline=record.self_destruct_deadline,
    )


@router.post("/{message_id}/access", response_model=AccessResponse)
async def access(
    message_id: UUID,
    viewer: ViewerRequest,
    store: MessageRecordStore = Depends(get_message_store),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    """Check a viewer email against the allow-lists without consuming a view."""
    await verify_viewer(store, MessageId(message_id), viewer.email, clock())
    return AccessResponse(decision=AccessDecision.GRANTED.value)


@router.post("/{message_id}/reveal", response_model=RevealResponse)
async def reveal(
    message_id: UUID,
    viewer: ViewerRequest,
    store: MessageRecordStore = Depends(get_message_store),
    clock: Callable[[], datetime] = Depends(get_clock),
    settings: Settings = Depends(get_settings),
):
    """Consume one view (or destroy) and return the content."""
    coordinator = RevealCoordinator(
        store, settings.reveal_max_contention_rounds, clock,
    )
    result = await coordinator.reveal(
        MessageId(message_id), ViewerContext(email=viewer.email),
    )
    return RevealResponse(
        content=result.content,
        attachments=[a.to_dict() for a in result.attachments],
        view_count=result.view_count,
        view_limit=result.view_limit,
        destroyed=result.destroyed,
        expiry_deadline=result.expiry_deadline,
        countdown=result.countdown.to_dict() if result.countdown else None,
    )


@router.post("/{message_id}/self-destruct", response_model=SelfDestructResponse)
async def arm_self_destruct(
    message_id: UUID,
    viewer: ViewerRequest,
    store: MessageRecordStore = Depends(get_message_store),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    """Deadline armed by the first reveal. 409 before any reveal."""
    scheduler = SelfDestructScheduler(store, clock)
    deadline = await scheduler.arm(
        MessageId(message_id), ViewerContext(email=viewer.email),
    )
    return SelfDestructResponse(destroyed=False, deadline=deadline)


@router.post("/{message_id}/expire", response_model=SelfDestructResponse)
async def expire_self_destruct(
    message_id: UUID,
    store: MessageRecordStore = Depends(get_message_store),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    """A viewer's countdown reached zero; the server deletes if its clock agrees."""
    scheduler = SelfDestructScheduler(store, clock)
    outcome = await scheduler.expire(MessageId(message_id))
    return SelfDestructResponse(
        destroyed=outcome.destroyed, deadline=outcome.deadline,
    )


@router.delete("/{message_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete(
    message_id: UUID,
    requester_id: OwnerId = Depends(get_requester_id),
    store: MessageRecordStore = Depends(get_message_store),
):
    """Owner-only delete. 403 for anyone else, record unchanged."""
    await delete_message(store, MessageId(message_id), requester_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
