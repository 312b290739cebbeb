"""Fixtures for the notes and learning resources sessions anchor to."""

import json
from typing import Optional
from uuid import UUID

import pytest

from app.adapters.anchor_metadata import DatabaseAnchorMetadataProvider
from app.adapters.base import AnchorMetadataProvider
from app.exceptions import AnchorNotFound
from app.models.learning_resource import LearningResource
from app.models.note import Note
from app.schemas.anchor import NoteSummary, ResourceSummary


@pytest.fixture(scope="function")
def setup_resource(db, user_id):
    """The book from the 'Atomic Habits' scenario: 120 of 300 minutes, 5-day streak."""
    resource = LearningResource(
        user_id=user_id,
        title="Atomic Habits",
        author="James Clear",
        type="book",
        duration_minutes=300,
        progress_minutes=120,
        streak_days=5,
    )
    db.add(resource)
    db.commit()
    db.refresh(resource)
    return resource


@pytest.fixture(scope="function")
def setup_note(db, user_id, setup_resource):
    content = {
        "type": "doc",
        "content": [
            {
                "type": "paragraph",
                "content": [{"type": "text", "text": "Habits compound over time."}],
            },
            {
                "type": "paragraph",
                "content": [{"type": "text", "text": "Make it obvious."}],
            },
        ],
    }
    note = Note(
        user_id=user_id,
        title="Chapter 1 takeaways",
        content=json.dumps(content),
        linked_resource_id=setup_resource.id,
    )
    db.add(note)
    db.commit()
    db.refresh(note)
    return note


@pytest.fixture(scope="function")
def anchor_metadata(db):
    return DatabaseAnchorMetadataProvider(db)


class BrokenAnchorMetadata(AnchorMetadataProvider):
    """Every lookup fails."""

    def get_resource_summary(
        self, resource_id: str, user_id: Optional[UUID] = None
    ) -> Optional[ResourceSummary]:
        raise AnchorNotFound("metadata service down")

    def get_note_summary(
        self, note_id: str, user_id: Optional[UUID] = None
    ) -> Optional[NoteSummary]:
        raise AnchorNotFound("metadata service down")


@pytest.fixture(scope="function")
def broken_anchor_metadata():
    return BrokenAnchorMetadata()
