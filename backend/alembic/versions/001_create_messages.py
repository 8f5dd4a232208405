"""Create messages table.

Revision ID: 001_create_messages
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_create_messages"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "messages",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("owner_id", sa.String(128), nullable=False),
        sa.Column("body", sa.Text, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("expiration_minutes", sa.Integer, nullable=False),
        sa.Column("view_limit", sa.Integer, nullable=False, server_default="1"),
        sa.Column("view_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("self_destruct", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("self_destruct_timer_seconds", sa.Integer, nullable=True),
        sa.Column("timer_armed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("allowed_recipients", sa.JSON, nullable=False),
        sa.Column("allowed_domains", sa.JSON, nullable=False),
        sa.Column("attachments", sa.JSON, nullable=False),
        sa.CheckConstraint("view_limit >= 1", name="ck_messages_view_limit_positive"),
        sa.CheckConstraint(
            "view_count >= 0 AND view_count <= view_limit",
            name="ck_messages_view_count_within_limit",
        ),
    )
    op.create_index("ix_messages_owner_id", "messages", ["owner_id"])


def downgrade() -> None:
    op.drop_index("ix_messages_owner_id", table_name="messages")
    op.drop_table("messages")
