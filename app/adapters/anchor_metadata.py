"""Anchor metadata read from the application's notes and learning_resources tables."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session as DBSession

from app.adapters.base import AnchorMetadataProvider
from app.config import get_settings
from app.exceptions import AnchorNotFound
from app.models.learning_resource import LearningResource
from app.models.note import Note
from app.schemas.anchor import NoteSummary, ResourceSummary
from app.utils.text import note_content_to_text, truncate


def _parse_uuid(value: str) -> Optional[UUID]:
    try:
        return UUID(str(value))
    except ValueError:
        return None


class DatabaseAnchorMetadataProvider(AnchorMetadataProvider):
    """Looks anchors up by id, scoped to the owning user when one is given."""

    def __init__(self, db: DBSession, excerpt_max_chars: Optional[int] = None) -> None:
        self.db = db
        self._excerpt_max_chars = (
            excerpt_max_chars or get_settings().note_context_max_chars
        )

    def _first(self, query, kind: str, anchor_id: str):
        try:
            return query.first()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise AnchorNotFound(f"Could not load {kind} {anchor_id}: {e}") from e

    def get_resource_summary(
        self, resource_id: str, user_id: Optional[UUID] = None
    ) -> Optional[ResourceSummary]:
        rid = _parse_uuid(resource_id)
        if rid is None:
            return None
        query = self.db.query(LearningResource).filter(LearningResource.id == rid)
        if user_id is not None:
            query = query.filter(LearningResource.user_id == user_id)
        resource = self._first(query, "resource", resource_id)
        if resource is None:
            return None
        return ResourceSummary(
            title=resource.title,
            author=resource.author or None,
            total_minutes=max(resource.duration_minutes or 0, 0),
            completed_minutes=max(resource.progress_minutes or 0, 0),
            streak_days=max(resource.streak_days or 0, 0),
        )

    def get_note_summary(
        self, note_id: str, user_id: Optional[UUID] = None
    ) -> Optional[NoteSummary]:
        nid = _parse_uuid(note_id)
        if nid is None:
            return None
        query = self.db.query(Note).filter(Note.id == nid)
        if user_id is not None:
            query = query.filter(Note.user_id == user_id)
        note = self._first(query, "note", note_id)
        if note is None:
            return None
        excerpt = truncate(note_content_to_text(note.content), self._excerpt_max_chars)
        return NoteSummary(
            title=note.title or None,
            content_excerpt=excerpt,
            linked_resource_id=(
                str(note.linked_resource_id) if note.linked_resource_id else None
            ),
        )
