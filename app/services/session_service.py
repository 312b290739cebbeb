"""Session lookup, listing and the one-session-per-anchor resolver."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session as DBSession

from app.adapters.base import AnchorMetadataProvider
from app.exceptions import InvalidAnchor, NotAuthenticated, StorageError
from app.infra.logging_config import get_logger
from app.models.session import (
    ANCHOR_GENERAL,
    ANCHOR_NOTE,
    ANCHOR_RESOURCE,
    Session,
)
from app.utils.db.db_session_helper import storage_errors

logger = get_logger("session_service")

GENERAL_SESSION_TITLE = "New Chat Session"
UNTITLED = "Untitled"
ANCHOR_TYPES = (ANCHOR_NOTE, ANCHOR_RESOURCE, ANCHOR_GENERAL)
_TITLE_PREFIXES = {ANCHOR_NOTE: "Note", ANCHOR_RESOURCE: "Resource"}


def _anchor_value(anchor_type) -> str:
    # Accepts the AnchorType enum or its plain string value.
    return getattr(anchor_type, "value", anchor_type)


class SessionService:
    def __init__(
        self,
        db: DBSession,
        anchor_metadata: Optional[AnchorMetadataProvider] = None,
    ) -> None:
        self.db = db
        self.anchor_metadata = anchor_metadata

    def get_session(self, session_id: UUID) -> Optional[Session]:
        with storage_errors(self.db, "load session"):
            return self.db.query(Session).filter(Session.id == session_id).first()

    def get_session_for_user(self, session_id: UUID, user_id: UUID) -> Optional[Session]:
        with storage_errors(self.db, "load session"):
            return (
                self.db.query(Session)
                .filter(Session.id == session_id, Session.user_id == user_id)
                .first()
            )

    def find_anchored_session(
        self, user_id: UUID, anchor_type: str, anchor_id: str
    ) -> Optional[Session]:
        with storage_errors(self.db, f"look up session for {anchor_type} {anchor_id}"):
            return (
                self.db.query(Session)
                .filter(
                    Session.user_id == user_id,
                    Session.anchor_type == anchor_type,
                    Session.anchor_id == anchor_id,
                )
                .first()
            )

    def list_sessions_query(
        self, user_id: UUID, anchor_type: Optional[str] = None
    ) -> Query[Session]:
        """Get a query for a user's sessions, newest activity first (for pagination)."""
        query = self.db.query(Session).filter(Session.user_id == user_id)
        if anchor_type is not None:
            query = query.filter(Session.anchor_type == _anchor_value(anchor_type))
        return query.order_by(Session.updated_at.desc(), Session.created_at.desc())

    def resolve_session(
        self,
        user_id: Optional[UUID],
        anchor_type,
        anchor_id: Optional[str] = None,
        commit: bool = True,
    ) -> Session:
        """
        Return the session for an anchor, creating it on first use.

        General anchors always get a fresh session. Note and resource anchors
        get at most one session per user; when a concurrent request inserts
        the same anchor first, the unique index fires and the existing row is
        returned instead.

        With commit=False a new general session is only flushed. The caller
        commits it together with its first messages, or rolls it back.
        """
        if user_id is None:
            raise NotAuthenticated()
        anchor_type = _anchor_value(anchor_type)
        if anchor_type not in ANCHOR_TYPES:
            raise InvalidAnchor(f"Unknown anchor type: {anchor_type!r}")

        if anchor_type == ANCHOR_GENERAL:
            return self._insert(
                Session(
                    user_id=user_id,
                    anchor_type=ANCHOR_GENERAL,
                    anchor_id=None,
                    title=GENERAL_SESSION_TITLE,
                ),
                commit=commit,
            )

        anchor_id = (anchor_id or "").strip()
        if not anchor_id:
            raise InvalidAnchor(f"anchor_id is required for {anchor_type} anchors")

        existing = self.find_anchored_session(user_id, anchor_type, anchor_id)
        if existing is not None:
            return existing

        session = Session(
            user_id=user_id,
            anchor_type=anchor_type,
            anchor_id=anchor_id,
            title=self._anchor_title(user_id, anchor_type, anchor_id),
        )
        try:
            return self._insert(session, reraise_integrity=True)
        except IntegrityError as e:
            logger.info(
                "Session for %s %s created concurrently; re-reading", anchor_type, anchor_id
            )
            winner = self.find_anchored_session(user_id, anchor_type, anchor_id)
            if winner is None:
                raise StorageError(str(e)) from e
            return winner

    def _insert(
        self, session: Session, reraise_integrity: bool = False, commit: bool = True
    ) -> Session:
        try:
            self.db.add(session)
            if not commit:
                self.db.flush()
                return session
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if reraise_integrity:
                raise
            raise StorageError(str(e)) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Failed to create session: %s", e)
            raise StorageError(str(e)) from e
        self.db.refresh(session)
        return session

    def _anchor_title(self, user_id: UUID, anchor_type: str, anchor_id: str) -> str:
        """'Note: <title>' / 'Resource: <title>'; lookup failures fall back to 'Untitled'."""
        title: Optional[str] = None
        if self.anchor_metadata is not None:
            try:
                if anchor_type == ANCHOR_NOTE:
                    summary = self.anchor_metadata.get_note_summary(anchor_id, user_id)
                else:
                    summary = self.anchor_metadata.get_resource_summary(anchor_id, user_id)
                if summary is None:
                    logger.warning("No metadata for %s %s", anchor_type, anchor_id)
                else:
                    title = summary.title
            except Exception as e:
                logger.warning(
                    "Anchor metadata lookup failed for %s %s: %s", anchor_type, anchor_id, e
                )
        title = (title or "").strip() or UNTITLED
        return f"{_TITLE_PREFIXES[anchor_type]}: {title}"

    def update_title(self, session_id: UUID, title: str) -> Optional[Session]:
        session = self.get_session(session_id)
        if session is None:
            return None
        session.title = title
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError(str(e)) from e
        self.db.refresh(session)
        return session

    def add_usage(
        self,
        session: Session,
        tokens: int,
        words: int,
        at: Optional[datetime] = None,
    ) -> Session:
        """Bump the advisory counters and last_message_at. Caller commits."""
        session.token_count = (session.token_count or 0) + tokens
        session.word_count = (session.word_count or 0) + words
        session.last_message_at = at or datetime.now(timezone.utc)
        # Listing orders by updated_at; touch it even if the counters did not change.
        session.updated_at = session.last_message_at
        return session
