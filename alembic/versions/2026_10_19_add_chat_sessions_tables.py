"""add chat sessions tables

Revision ID: 7c2e51a0d9b4
Revises:
Create Date: 2026-10-19 09:12:40.118204

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "7c2e51a0d9b4"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema: chat_sessions and chat_messages tables."""
    op.create_table(
        "chat_sessions",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            primary_key=True,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("anchor_type", sa.String(length=16), nullable=False),
        sa.Column("anchor_id", sa.String(length=64), nullable=True),
        sa.Column("title", sa.String(length=256), nullable=False),
        sa.Column("token_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("word_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_message_at", sa.DateTime(), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(), nullable=False, server_default=sa.text("now()")
        ),
        sa.Column(
            "updated_at", sa.DateTime(), nullable=False, server_default=sa.text("now()")
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "anchor_type IN ('note', 'resource', 'general')",
            name="ck_chat_sessions_anchor_type",
        ),
        sa.CheckConstraint(
            "(anchor_type = 'general') = (anchor_id IS NULL)",
            name="ck_chat_sessions_anchor_id",
        ),
    )
    op.create_index("ix_chat_sessions_user_id", "chat_sessions", ["user_id"])
    op.create_index(
        "ix_chat_sessions_user_updated", "chat_sessions", ["user_id", "updated_at"]
    )
    op.create_index(
        "uq_chat_sessions_user_anchor",
        "chat_sessions",
        ["user_id", "anchor_type", "anchor_id"],
        unique=True,
        postgresql_where=sa.text("anchor_type <> 'general'"),
    )

    op.create_table(
        "chat_messages",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            primary_key=True,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column("session_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("sender", sa.String(length=16), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("sequence", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("token_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("client_id", sa.String(length=128), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(), nullable=False, server_default=sa.text("now()")
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["session_id"], ["chat_sessions.id"], ondelete="CASCADE"
        ),
        sa.CheckConstraint(
            "sender IN ('user', 'assistant')", name="ck_chat_messages_sender"
        ),
    )
    op.create_index(
        "ix_chat_messages_session_order",
        "chat_messages",
        ["session_id", "created_at", "sequence"],
    )
    op.create_index(
        "uq_chat_messages_session_client_id",
        "chat_messages",
        ["session_id", "client_id"],
        unique=True,
        postgresql_where=sa.text("client_id IS NOT NULL"),
    )


def downgrade() -> None:
    """Downgrade schema: drop chat_messages and chat_sessions."""
    op.drop_index("uq_chat_messages_session_client_id", table_name="chat_messages")
    op.drop_index("ix_chat_messages_session_order", table_name="chat_messages")
    op.drop_table("chat_messages")
    op.drop_index("uq_chat_sessions_user_anchor", table_name="chat_sessions")
    op.drop_index("ix_chat_sessions_user_updated", table_name="chat_sessions")
    op.drop_index("ix_chat_sessions_user_id", table_name="chat_sessions")
    op.drop_table("chat_sessions")
