"""Names sessions from their recent messages."""

from __future__ import annotations

import re
from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy.orm import Session as DBSession

from app.adapters.base import CompletionGateway
from app.config import get_settings
from app.constants.default_system_prompt import TitlePrompt
from app.exceptions import CompletionError
from app.infra.logging_config import get_logger
from app.models.session_message import SENDER_USER, SessionMessage
from app.schemas.chat import PromptEntry
from app.services.session_message_service import SessionMessageService
from app.services.session_service import SessionService
from app.utils.title_heuristics import cap_title, heuristic_title

logger = get_logger("session_title_service")

_WRAPPING_RE = re.compile(r"^[\s\"'`*#_]+|[\s\"'`*#_.]+$")
_TITLE_LABEL_RE = re.compile(r"^title\s*:\s*", re.IGNORECASE)


def clean_model_title(raw: str) -> str:
    """First non-empty line, without quotes, markdown markers or a 'Title:' label."""
    for line in (raw or "").splitlines():
        line = _TITLE_LABEL_RE.sub("", _WRAPPING_RE.sub("", line))
        line = _WRAPPING_RE.sub("", line)
        if line:
            return cap_title(line)
    return ""


def format_conversation(messages: Sequence[SessionMessage]) -> str:
    return "\n".join(f"{m.sender}: {m.content}" for m in messages)


class SessionTitleService:
    def __init__(self, db: DBSession, gateway: CompletionGateway) -> None:
        self.db = db
        self.gateway = gateway
        self._sessions = SessionService(db)
        self._messages = SessionMessageService(db)

    def build_title_prompt(self, messages: Sequence[SessionMessage]) -> list[PromptEntry]:
        return [
            PromptEntry(role="system", content=TitlePrompt.SYSTEM),
            PromptEntry(
                role="user",
                content=TitlePrompt.USER_TEMPLATE.format(
                    conversation=format_conversation(messages)
                ),
            ),
        ]

    def _fallback_title(self, session_id: UUID) -> str:
        settings = get_settings()
        user_texts = [
            m.content
            for m in self._messages.list_messages(session_id)
            if m.sender == SENDER_USER
        ][:3]
        return heuristic_title(user_texts, include_emoji=settings.title_include_emoji)

    async def _title_from_model(self, messages: Sequence[SessionMessage]) -> Optional[str]:
        try:
            result = await self.gateway.complete(self.build_title_prompt(messages))
        except CompletionError as e:
            logger.info("Title generation via model failed (%r); using keywords", e)
            return None
        return clean_model_title(result.text) or None

    async def generate_session_title(self, session_id: UUID) -> Optional[str]:
        """
        Generate and store a title for the session. Returns the new title, or
        None when the session is missing, empty, or anything fails. Never raises.
        """
        try:
            session = self._sessions.get_session(session_id)
            if session is None:
                logger.warning("Cannot title missing session %s", session_id)
                return None
            recent = self._messages.get_recent_messages(
                session_id, get_settings().title_context_messages
            )
            if not recent:
                return None

            title = await self._title_from_model(recent)
            if not title:
                title = self._fallback_title(session_id)
            self._sessions.update_title(session_id, title)
            logger.info("Session %s titled %r", session_id, title)
            return title
        except Exception as e:
            logger.exception("Title generation failed for session %s: %s", session_id, e)
            self.db.rollback()
            return None
