"""Pydantic schemas for Session and SessionMessage."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel

# -----------------------------------------------------------------------------
# Anchors
# -----------------------------------------------------------------------------


class AnchorType(str, Enum):
    """What a session is attached to."""

    NOTE = "note"
    RESOURCE = "resource"
    GENERAL = "general"


# -----------------------------------------------------------------------------
# Session schemas
# -----------------------------------------------------------------------------


class SessionBase(BaseModel):
    """Base session fields."""

    user_id: UUID
    anchor_type: AnchorType
    anchor_id: Optional[str] = None
    title: str


class SessionInDB(SessionBase):
    """Session as stored in DB (includes id, counters and timestamps)."""

    id: UUID
    token_count: int = 0
    word_count: int = 0
    last_message_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class SessionRead(SessionInDB):
    """Session for API responses."""

    pass


# -----------------------------------------------------------------------------
# SessionMessage schemas
# -----------------------------------------------------------------------------

Sender = Literal["user", "assistant"]


class MessageBase(BaseModel):
    """Base message fields."""

    sender: Sender
    content: str


class MessageInDB(MessageBase):
    """Session message as stored in DB."""

    id: UUID
    session_id: UUID
    sequence: int
    token_count: int = 0
    client_id: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class MessageRead(MessageInDB):
    """Session message for API responses."""

    pass
