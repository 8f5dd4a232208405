"""Message Record — immutable snapshot of one stored message, as the core sees it.

Invariants:
    - view_count <= view_limit (the store enforces it too, via CHECK constraint)
    - view_limit >= 1, view_count >= 0
    - created_at is server-assigned and always timezone-aware (UTC) once loaded
    - timer_armed_at is None until the first timed reveal, then never changes
    - allowed_recipients / allowed_domains hold normalized (lower-case) entries

Design Decisions:
    - frozen dataclass: the core never mutates a snapshot; state changes go
      through the store's conditional update and a fresh read
    - RecordGuard captures exactly the fields a conditional update checks, so
      "what I observed" is an explicit value instead of an implicit re-read
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from vanish.core.domain_types import MessageId, MessageStatus, OwnerId
from vanish.core.self_destruct import compute_deadline


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (e.g. SQLite CURRENT_TIMESTAMP) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class Attachment:
    """Already-uploaded attachment metadata (bytes live in the object store)."""
    url: str
    name: str
    size: int
    type: str = ""

    def to_dict(self) -> dict:
        return {
            "url": self.url, "name": self.name,
            "size": self.size, "type": self.type,
        }


@dataclass(frozen=True)
class RecordGuard:
    """Observed state a conditional update is allowed to overwrite."""
    view_count: int
    status: MessageStatus
    timer_armed: bool


@dataclass(frozen=True)
class MessageRecord:
    id: MessageId
    owner_id: OwnerId
    body: str
    created_at: datetime
    expiration_minutes: int
    view_limit: int
    view_count: int = 0
    status: MessageStatus = MessageStatus.ACTIVE
    self_destruct: bool = False
    self_destruct_timer_seconds: int | None = None
    timer_armed_at: datetime | None = None
    allowed_recipients: frozenset[str] = field(default_factory=frozenset)
    allowed_domains: frozenset[str] = field(default_factory=frozenset)
    attachments: tuple[Attachment, ...] = ()

    def __post_init__(self):
        if self.view_limit < 1:
            raise ValueError(f"view_limit must be >= 1, got {self.view_limit}")
        if not 0 <= self.view_count <= self.view_limit:
            raise ValueError(
                f"view_count {self.view_count} outside 0..{self.view_limit}",
            )

    @property
    def expires_at(self) -> datetime:
        return as_utc(self.created_at) + timedelta(minutes=self.expiration_minutes)

    @property
    def remaining_views(self) -> int:
        return self.view_limit - self.view_count

    @property
    def has_timer(self) -> bool:
        """Timed self-destruct: deletion deferred to a deadline armed on first reveal."""
        return self.self_destruct and bool(self.self_destruct_timer_seconds)

    @property
    def destroys_on_reveal(self) -> bool:
        """Immediate self-destruct: the reveal itself deletes the record."""
        return self.self_destruct and not self.has_timer

    @property
    def is_restricted(self) -> bool:
        return bool(self.allowed_recipients or self.allowed_domains)

    @property
    def self_destruct_deadline(self) -> datetime | None:
        if self.timer_armed_at is None or not self.self_destruct_timer_seconds:
            return None
        return compute_deadline(
            as_utc(self.timer_armed_at), self.self_destruct_timer_seconds,
        )

    def guard(self) -> RecordGuard:
        return RecordGuard(
            view_count=self.view_count,
            status=self.status,
            timer_armed=self.timer_armed_at is not None,
        )
