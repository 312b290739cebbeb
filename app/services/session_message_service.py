"""SessionMessage append and ordered history reads."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session as DBSession

from app.exceptions import SessionNotFound
from app.infra.logging_config import get_logger
from app.models.session import Session
from app.models.session_message import (
    SENDER_ASSISTANT,
    SENDER_USER,
    SENDERS,
    SessionMessage,
)
from app.services.session_service import SessionService
from app.utils.db.db_session_helper import storage_errors
from app.utils.text import count_words, estimate_tokens
from uuid import UUID

logger = get_logger("session_message_service")


class SessionMessageService:
    def __init__(self, db: DBSession) -> None:
        self.db = db

    def _ordered(self, session_id: UUID):
        return self.db.query(SessionMessage).filter(
            SessionMessage.session_id == session_id
        )

    def list_messages(self, session_id: UUID) -> List[SessionMessage]:
        """Full history in (created_at, sequence) order."""
        with storage_errors(self.db, "list messages"):
            return (
                self._ordered(session_id)
                .order_by(SessionMessage.created_at, SessionMessage.sequence)
                .all()
            )

    def get_recent_messages(self, session_id: UUID, limit: int) -> List[SessionMessage]:
        """Last `limit` messages, oldest first."""
        if limit <= 0:
            return []
        with storage_errors(self.db, "list recent messages"):
            newest_first = (
                self._ordered(session_id)
                .order_by(SessionMessage.created_at.desc(), SessionMessage.sequence.desc())
                .limit(limit)
                .all()
            )
        return list(reversed(newest_first))

    def count_messages(self, session_id: UUID, sender: Optional[str] = None) -> int:
        with storage_errors(self.db, "count messages"):
            query = self._ordered(session_id)
            if sender is not None:
                query = query.filter(SessionMessage.sender == sender)
            return query.count()

    def find_by_client_id(
        self, session_id: UUID, client_id: str
    ) -> Optional[SessionMessage]:
        with storage_errors(self.db, "look up message by client_id"):
            return (
                self._ordered(session_id)
                .filter(SessionMessage.client_id == client_id)
                .first()
            )

    def find_reply_to(self, message: SessionMessage) -> Optional[SessionMessage]:
        """The assistant message stored right after `message`, if any."""
        with storage_errors(self.db, "look up reply"):
            return (
                self._ordered(message.session_id)
                .filter(
                    SessionMessage.sender == SENDER_ASSISTANT,
                    SessionMessage.sequence > message.sequence,
                )
                .order_by(SessionMessage.sequence)
                .first()
            )

    def _next_sequence(self, session_id: UUID) -> int:
        current = (
            self.db.query(func.max(SessionMessage.sequence))
            .filter(SessionMessage.session_id == session_id)
            .scalar()
        )
        return (current or 0) + 1

    def _build(
        self,
        session_id: UUID,
        sender: str,
        content: str,
        sequence: int,
        created_at: datetime,
        client_id: Optional[str] = None,
    ) -> SessionMessage:
        return SessionMessage(
            session_id=session_id,
            sender=sender,
            content=content,
            sequence=sequence,
            token_count=estimate_tokens(content),
            client_id=client_id,
            created_at=created_at,
        )

    def _commit(self, *messages: SessionMessage) -> None:
        with storage_errors(self.db, "append messages"):
            self.db.commit()
        for m in messages:
            self.db.refresh(m)

    def append_message(
        self,
        session_id: UUID,
        sender: str,
        content: str,
        client_id: Optional[str] = None,
    ) -> Optional[SessionMessage]:
        """Append one message. Blank content is ignored and returns None."""
        if sender not in SENDERS:
            raise ValueError(f"sender must be one of {SENDERS}, got {sender!r}")
        content = (content or "").strip()
        if not content:
            return None
        with storage_errors(self.db, "prepare message"):
            msg = self._build(
                session_id,
                sender,
                content,
                self._next_sequence(session_id),
                datetime.now(timezone.utc),
                client_id=client_id,
            )
            self.db.add(msg)
        self._commit(msg)
        return msg

    def append_turn(
        self,
        session_id: UUID,
        user_content: str,
        assistant_content: str,
        client_id: Optional[str] = None,
    ) -> Tuple[SessionMessage, SessionMessage]:
        """
        Append a user message and its assistant reply in one commit.

        Readers never see the reply without the question. The owning session's
        advisory counters and last_message_at are updated in the same commit.
        """
        user_content = (user_content or "").strip()
        assistant_content = (assistant_content or "").strip()
        if not user_content or not assistant_content:
            raise ValueError("both user and assistant content are required")

        now = datetime.now(timezone.utc)
        with storage_errors(self.db, "prepare turn"):
            session = self.db.query(Session).filter(Session.id == session_id).first()
            if session is None:
                raise SessionNotFound(f"Session {session_id} not found")
            seq = self._next_sequence(session_id)
            user_msg = self._build(
                session_id, SENDER_USER, user_content, seq, now, client_id=client_id
            )
            assistant_msg = self._build(
                session_id, SENDER_ASSISTANT, assistant_content, seq + 1, now
            )
            self.db.add_all([user_msg, assistant_msg])
            SessionService(self.db).add_usage(
                session,
                tokens=user_msg.token_count + assistant_msg.token_count,
                words=count_words(user_content) + count_words(assistant_content),
                at=now,
            )
        self._commit(user_msg, assistant_msg)
        logger.debug("Appended turn to session %s at sequence %d", session_id, seq)
        return user_msg, assistant_msg
