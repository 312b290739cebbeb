"""ChatOrchestrator: resolve session, assemble context, call the model, persist the turn."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session as DBSession

from app.adapters.base import AnchorMetadataProvider, CompletionGateway
from app.config import get_settings
from app.exceptions import EmptyMessage, NotAuthenticated, SessionNotFound
from app.infra.logging_config import get_logger
from app.models.session import Session
from app.models.session_message import SENDER_USER, SessionMessage
from app.services.anchor_context_service import AnchorContextService
from app.services.context_assembler import ContextAssembler
from app.services.session_message_service import SessionMessageService
from app.services.session_service import GENERAL_SESSION_TITLE, SessionService

logger = get_logger("chat_orchestrator")


@dataclass
class ChatExchange:
    session: Session
    user_message: SessionMessage
    assistant_message: SessionMessage
    needs_title: bool = False
    replayed: bool = False


class ChatOrchestrator:
    def __init__(
        self,
        db: DBSession,
        gateway: CompletionGateway,
        anchor_metadata: Optional[AnchorMetadataProvider] = None,
    ) -> None:
        self._db = db
        self._gateway = gateway
        self._session_svc = SessionService(db, anchor_metadata=anchor_metadata)
        self._message_svc = SessionMessageService(db)
        self._assembler = ContextAssembler()
        self._anchor_context = (
            AnchorContextService(anchor_metadata) if anchor_metadata is not None else None
        )

    def _build_anchor_context(self, session: Session) -> Optional[str]:
        if self._anchor_context is None:
            return None
        try:
            return self._anchor_context.build_context(session)
        except Exception as e:
            logger.warning("Anchor context unavailable for session %s: %s", session.id, e)
            return None

    def _needs_title(self, session: Session) -> bool:
        if session.title != GENERAL_SESSION_TITLE:
            return False
        user_count = self._message_svc.count_messages(session.id, sender=SENDER_USER)
        return user_count >= get_settings().title_generation_min_user_messages

    def _replay(self, session: Session, client_id: str) -> Optional[ChatExchange]:
        """Stored exchange for a retried send with the same client_id, if complete."""
        user_msg = self._message_svc.find_by_client_id(session.id, client_id)
        if user_msg is None:
            return None
        reply = self._message_svc.find_reply_to(user_msg)
        if reply is None:
            return None
        logger.info("Replaying exchange for client_id %s in session %s", client_id, session.id)
        return ChatExchange(
            session=session,
            user_message=user_msg,
            assistant_message=reply,
            replayed=True,
        )

    async def send_message(
        self,
        user_id: Optional[UUID],
        anchor_type,
        anchor_id: Optional[str],
        text: str,
        client_id: Optional[str] = None,
        session_id: Optional[UUID] = None,
    ) -> ChatExchange:
        """
        Send one user message and persist it with the assistant's reply.

        Nothing is written unless the model answers. A new general session is
        committed together with its first turn, so a failed send leaves no
        empty session behind. Passing session_id continues an existing
        session, which is how a general chat receives its follow-up messages.
        """
        if not (text or "").strip():
            raise EmptyMessage()
        if user_id is None:
            raise NotAuthenticated()

        if session_id is not None:
            session = self._session_svc.get_session_for_user(session_id, user_id)
            if session is None:
                raise SessionNotFound(f"Session {session_id} not found")
            return await self._send(session, text, client_id)

        session = self._session_svc.resolve_session(
            user_id, anchor_type, anchor_id, commit=False
        )
        if not session.is_general:
            return await self._send(session, text, client_id)
        try:
            return await self._send(session, text, client_id)
        except Exception:
            logger.info("Discarding unsaved general session %s", session.id)
            self._db.rollback()
            raise

    async def _send(
        self, session: Session, text: str, client_id: Optional[str]
    ) -> ChatExchange:
        prior = self._message_svc.list_messages(session.id)

        if client_id:
            replayed = self._replay(session, client_id)
            if replayed is not None:
                return replayed

        anchor_context = self._build_anchor_context(session)
        entries = self._assembler.assemble_prompt(session, prior, text, anchor_context)

        logger.debug(
            "Completing session %s with %d prompt entries", session.id, len(entries)
        )
        result = await self._gateway.complete(entries)

        user_msg, assistant_msg = self._message_svc.append_turn(
            session.id, text, result.text, client_id=client_id
        )
        self._db.refresh(session)
        return ChatExchange(
            session=session,
            user_message=user_msg,
            assistant_message=assistant_msg,
            needs_title=self._needs_title(session),
        )
