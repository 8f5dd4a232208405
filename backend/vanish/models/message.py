"""Message ORM — persists one ephemeral message and its remaining budget.

Invariants:
    - id is UUID primary key (client-side default)
    - created_at is server-assigned (server_default=now()) and never updated
    - 0 <= view_count <= view_limit and view_limit >= 1 (CHECK constraints)
    - status is "active" or "expired"; a destroyed message is a deleted row
    - timer_armed_at is NULL until the first timed reveal

Design Decisions:
    - JSON columns for allow-lists and attachments: read as a whole, never queried into
    - owner_id is an opaque string from the external identity provider
    - Indexed owner_id: owner deletes and any external dashboard filter by owner
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean, CheckConstraint, DateTime, Integer, JSON, String, Text, func,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from vanish.db.base import Base


class Message(Base):
    """Ephemeral message row."""
    __tablename__ = "messages"
    __table_args__ = (
        CheckConstraint("view_limit >= 1", name="ck_messages_view_limit_positive"),
        CheckConstraint(
            "view_count >= 0 AND view_count <= view_limit",
            name="ck_messages_view_count_within_limit",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    owner_id: Mapped[str] = mapped_column(
        String(128), nullable=False, index=True,
    )
    body: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(),
    )
    expiration_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    view_limit: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="active",
    )
    self_destruct: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    self_destruct_timer_seconds: Mapped[int | None] = mapped_column(
        Integer, nullable=True,
    )
    timer_armed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    allowed_recipients: Mapped[list] = mapped_column(
        JSON, nullable=False, default=list,
    )
    allowed_domains: Mapped[list] = mapped_column(
        JSON, nullable=False, default=list,
    )
    attachments: Mapped[list] = mapped_column(
        JSON, nullable=False, default=list,
    )
