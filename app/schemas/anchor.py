"""Read-only summaries of the things a session can be anchored to."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class ResourceSummary(BaseModel):
    """A learning resource as seen by the chat assistant."""

    title: str
    author: Optional[str] = None
    total_minutes: int = Field(default=0, ge=0)
    completed_minutes: int = Field(default=0, ge=0)
    streak_days: int = Field(default=0, ge=0)

    @property
    def progress_percent(self) -> int:
        if self.total_minutes <= 0:
            return 0
        return min(100, round(self.completed_minutes * 100 / self.total_minutes))


class NoteSummary(BaseModel):
    """A note as seen by the chat assistant. content_excerpt is plain text."""

    title: Optional[str] = None
    content_excerpt: str = ""
    linked_resource_id: Optional[str] = None
