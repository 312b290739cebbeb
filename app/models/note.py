"""Note model. Owned by the notes feature; read here for anchor titles and context."""

from __future__ import annotations

import uuid

from sqlalchemy import Column, String, Text, Uuid

from app.db import Base
from app.models.mixins import TimestampMixin


class Note(Base, TimestampMixin):
    __tablename__ = "notes"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, nullable=False, index=True)
    title = Column(String(256), nullable=True)
    content = Column(Text, nullable=True)  # HTML, plain text or editor JSON
    linked_resource_id = Column(Uuid, nullable=True)
