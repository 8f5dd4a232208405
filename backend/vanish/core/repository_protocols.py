"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection
    - conditional_update / delete(expected=...) are the ONLY synchronization
      primitives: each is atomic per record and reports whether it applied

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Async in Protocol: boundary methods are async because implementations do IO,
      but core pure functions that USE these protocols are never async themselves —
      the shell orchestrates the async calls around the pure logic
    - bool return over Ok/Conflict objects: False means "not applied, re-fetch"
"""

from typing import Any, Protocol

from vanish.core.domain_types import MessageId
from vanish.core.message_record import MessageRecord, RecordGuard


class MessageRecordStore(Protocol):
    """Contract for message persistence — implemented by shell."""
    async def get(self, message_id: MessageId) -> MessageRecord | None: ...
    async def create(self, fields: dict[str, Any]) -> MessageId: ...
    async def conditional_update(
        self, message_id: MessageId, expected: RecordGuard, fields: dict[str, Any],
    ) -> bool: ...
    async def delete(
        self,
        message_id: MessageId,
        expected: RecordGuard | None = None,
        owner_id: str | None = None,
    ) -> bool: ...


class ObjectStore(Protocol):
    """Contract for attachment bytes — used on the creation path only."""
    async def put(self, data: bytes, path: str) -> str: ...


class MailSender(Protocol):
    """Contract for outbound notifications — fire-and-forget."""
    async def send(self, to: str, template_params: dict[str, str]) -> None: ...
