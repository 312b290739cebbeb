"""Turns a session's anchor into a system context line for the model."""

from __future__ import annotations

from typing import Optional

from app.adapters.base import AnchorMetadataProvider
from app.infra.logging_config import get_logger
from app.models.session import ANCHOR_NOTE, ANCHOR_RESOURCE, Session
from app.schemas.anchor import NoteSummary, ResourceSummary

logger = get_logger("anchor_context_service")


def format_resource_context(summary: ResourceSummary) -> str:
    line = f'Linked learning resource: "{summary.title}"'
    if summary.author:
        line += f" by {summary.author}"
    line += (
        f". Progress: {summary.completed_minutes} of {summary.total_minutes} minutes"
        f" ({summary.progress_percent}%)."
    )
    if summary.streak_days > 0:
        line += f" Current streak: {summary.streak_days} days."
    return line


def format_note_context(summary: NoteSummary) -> str:
    title = (summary.title or "").strip() or "Untitled"
    line = f'Linked note: "{title}".'
    if summary.content_excerpt:
        line += f" Note content: {summary.content_excerpt}"
    return line


class AnchorContextService:
    """Best-effort: lookup failures are logged and yield less (or no) context."""

    def __init__(self, anchor_metadata: AnchorMetadataProvider) -> None:
        self.anchor_metadata = anchor_metadata

    def _resource_line(self, resource_id: str, session: Session) -> Optional[str]:
        try:
            summary = self.anchor_metadata.get_resource_summary(
                resource_id, session.user_id
            )
        except Exception as e:
            logger.warning("Resource lookup failed for %s: %s", resource_id, e)
            return None
        if summary is None:
            logger.info("No resource metadata for %s", resource_id)
            return None
        return format_resource_context(summary)

    def _note_lines(self, note_id: str, session: Session) -> list[str]:
        try:
            summary = self.anchor_metadata.get_note_summary(note_id, session.user_id)
        except Exception as e:
            logger.warning("Note lookup failed for %s: %s", note_id, e)
            return []
        if summary is None:
            logger.info("No note metadata for %s", note_id)
            return []
        lines: list[str] = []
        if summary.linked_resource_id:
            resource_line = self._resource_line(summary.linked_resource_id, session)
            if resource_line:
                lines.append(resource_line)
        lines.append(format_note_context(summary))
        return lines

    def build_context(self, session: Session) -> Optional[str]:
        if not session.anchor_id:
            return None
        if session.anchor_type == ANCHOR_RESOURCE:
            return self._resource_line(session.anchor_id, session)
        if session.anchor_type == ANCHOR_NOTE:
            return "\n".join(self._note_lines(session.anchor_id, session)) or None
        return None
