"""LearningResource model (books, podcasts, courses). Read-only from the chat service."""

from __future__ import annotations

import uuid

from sqlalchemy import Column, Integer, String, Uuid

from app.db import Base
from app.models.mixins import TimestampMixin


class LearningResource(Base, TimestampMixin):
    __tablename__ = "learning_resources"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, nullable=False, index=True)
    title = Column(String(256), nullable=False)
    author = Column(String(256), nullable=True)
    type = Column(String(32), nullable=True)
    duration_minutes = Column(Integer, nullable=False, default=0)
    progress_minutes = Column(Integer, nullable=False, default=0)
    streak_days = Column(Integer, nullable=False, default=0)
