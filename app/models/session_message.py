"""SessionMessage model: one row per user or assistant message in a session."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    text,
)
from sqlalchemy.orm import relationship

from app.db import Base

SENDER_USER = "user"
SENDER_ASSISTANT = "assistant"
SENDERS = (SENDER_USER, SENDER_ASSISTANT)


class SessionMessage(Base):
    """Append-only; ordered by (created_at, sequence) within a session."""

    __tablename__ = "chat_messages"

    __table_args__ = (
        Index("ix_chat_messages_session_order", "session_id", "created_at", "sequence"),
        Index(
            "uq_chat_messages_session_client_id",
            "session_id",
            "client_id",
            unique=True,
            postgresql_where=text("client_id IS NOT NULL"),
            sqlite_where=text("client_id IS NOT NULL"),
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    session_id = Column(
        Uuid,
        ForeignKey("chat_sessions.id", ondelete="CASCADE"),
        nullable=False,
    )
    sender = Column(String(16), nullable=False)  # 'user' | 'assistant'
    content = Column(Text, nullable=False)
    sequence = Column(Integer, nullable=False, default=0)
    token_count = Column(Integer, nullable=False, default=0)
    client_id = Column(String(128), nullable=True)
    created_at = Column(
        DateTime, default=lambda: datetime.now(timezone.utc), nullable=False
    )

    session = relationship("Session", back_populates="messages")
