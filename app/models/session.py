"""Session model: one conversation thread, optionally anchored to a note or learning resource."""

from __future__ import annotations

import uuid

from sqlalchemy import Column, DateTime, Index, Integer, String, Uuid, text
from sqlalchemy.orm import relationship

from app.db import Base
from app.models.mixins import TimestampMixin

ANCHOR_NOTE = "note"
ANCHOR_RESOURCE = "resource"
ANCHOR_GENERAL = "general"


class Session(Base, TimestampMixin):
    """One row per conversation. Non-general anchors have at most one session per user."""

    __tablename__ = "chat_sessions"

    __table_args__ = (
        Index(
            "uq_chat_sessions_user_anchor",
            "user_id",
            "anchor_type",
            "anchor_id",
            unique=True,
            postgresql_where=text("anchor_type <> 'general'"),
            sqlite_where=text("anchor_type <> 'general'"),
        ),
        Index("ix_chat_sessions_user_updated", "user_id", "updated_at"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, nullable=False, index=True)
    anchor_type = Column(String(16), nullable=False)  # 'note' | 'resource' | 'general'
    anchor_id = Column(String(64), nullable=True)
    title = Column(String(256), nullable=False)
    token_count = Column(Integer, nullable=False, default=0)
    word_count = Column(Integer, nullable=False, default=0)
    last_message_at = Column(DateTime, nullable=True)

    messages = relationship(
        "SessionMessage",
        back_populates="session",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="SessionMessage.sequence",
    )

    @property
    def is_general(self) -> bool:
        return self.anchor_type == ANCHOR_GENERAL
