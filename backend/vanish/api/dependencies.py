"""Route Dependencies — store, clock, and requester identity for message routes.

Invariants:
    - A fresh SqlMessageRecordStore per request (stateless handlers)
    - The clock is a dependency so tests can move time without sleeping
    - Requester identity comes from the upstream identity provider as an opaque
      X-Requester-Id header; this service never authenticates users itself
"""

from collections.abc import Callable
from datetime import datetime

from fastapi import Depends, Header

from vanish.config import Settings, get_settings
from vanish.core.domain_types import OwnerId
from vanish.core.repository_protocols import MessageRecordStore
from vanish.infrastructure.database import DatabaseSessionManager, get_db_manager
from vanish.infrastructure.message_store import SqlMessageRecordStore
from vanish.services.message_gate import utc_now


def get_message_store(
    manager: DatabaseSessionManager = Depends(get_db_manager),
    settings: Settings = Depends(get_settings),
) -> MessageRecordStore:
    return SqlMessageRecordStore(manager, timeout_seconds=settings.store_timeout_seconds)


def get_clock() -> Callable[[], datetime]:
    return utc_now


def get_requester_id(
    x_requester_id: str = Header(min_length=1, max_length=128),
) -> OwnerId:
    return OwnerId(x_requester_id)
