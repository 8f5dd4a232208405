"""Message Lifecycle — creation, viewer verification, and owner deletion.

Invariants:
    - create_message resolves defaults from Settings and validates via core rules;
      created_at is left to the store (server-assigned)
    - self_destruct without a timer is immediate mode: no default timer is applied
    - verify_viewer runs the expiration gate before the access gate
    - delete_message reads first: a non-owner gets ForbiddenError and no DELETE
      is ever issued; the owner's DELETE is still scoped to (id AND owner_id);
      a missing record (or one the owner deleted first) is success

Design Decisions:
    - Owner delete supersedes every other state: no status/view guard
"""

import logging
from datetime import datetime

from vanish.config import Settings
from vanish.core.domain_types import AccessDecision, MessageId, OwnerId
from vanish.core.errors import AccessDeniedError, ForbiddenError
from vanish.core.evaluate_access import evaluate_access
from vanish.core.message_record import MessageRecord
from vanish.core.repository_protocols import MessageRecordStore
from vanish.core.validate_message import build_message_fields, parse_expiration
from vanish.schemas.message import MessageCreate
from vanish.services.message_gate import load_available_record

logger = logging.getLogger(__name__)


def resolve_expiration_minutes(draft: MessageCreate, settings: Settings) -> int:
    if draft.expiration:
        return parse_expiration(draft.expiration, settings.max_expiration_minutes)
    if draft.expiration_minutes is not None:
        return draft.expiration_minutes
    return settings.default_expiration_minutes


async def create_message(
    store: MessageRecordStore,
    owner_id: OwnerId,
    draft: MessageCreate,
    settings: Settings,
) -> MessageId:
    fields = build_message_fields(
        owner_id=owner_id,
        body=draft.body,
        view_limit=draft.view_limit or settings.default_view_limit,
        expiration_minutes=resolve_expiration_minutes(draft, settings),
        self_destruct=draft.self_destruct,
        self_destruct_timer_seconds=draft.self_destruct_timer_seconds,
        allowed_recipients=draft.allowed_recipients,
        allowed_domains=draft.allowed_domains,
        attachments=[a.model_dump() for a in draft.attachments],
        max_expiration_minutes=settings.max_expiration_minutes,
    )
    message_id = await store.create(fields)
    logger.info("Message created", extra={"message_id": message_id})
    return message_id


def shareable_link(base_url: str, message_id: MessageId) -> str:
    return f"{base_url.rstrip('/')}/view/{message_id}"


async def verify_viewer(
    store: MessageRecordStore,
    message_id: MessageId,
    viewer_email: str | None,
    now: datetime,
) -> MessageRecord:
    """Expiration gate then access gate. Returns the record on success."""
    record = await load_available_record(store, message_id, now)
    if evaluate_access(record, viewer_email) is AccessDecision.DENIED:
        raise AccessDeniedError(str(message_id))
    return record


async def delete_message(
    store: MessageRecordStore, message_id: MessageId, requester_id: str,
) -> None:
    record = await store.get(message_id)
    if record is None:
        return
    if record.owner_id != requester_id:
        logger.warning(
            "Non-owner delete refused",
            extra={"message_id": message_id, "error_code": "FORBIDDEN"},
        )
        raise ForbiddenError(str(message_id))
    # statement stays owner-scoped
    if await store.delete(message_id, owner_id=requester_id):
        logger.info(
            "Message deleted by owner",
            extra={"message_id": message_id, "outcome": "destroyed"},
        )
