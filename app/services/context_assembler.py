"""Builds the ordered context window sent to the completion gateway."""

from __future__ import annotations

from typing import Optional, Sequence

from app.exceptions import EmptyMessage
from app.models.session import Session
from app.models.session_message import SessionMessage
from app.schemas.chat import PromptEntry


class ContextAssembler:
    """
    Pure function of its inputs: optional system context, then the prior
    messages as stored, then the new user message. Nothing is reordered,
    deduplicated or truncated.
    """

    def assemble_prompt(
        self,
        session: Session,
        prior_messages: Sequence[SessionMessage],
        new_message_text: str,
        anchor_context: Optional[str] = None,
    ) -> list[PromptEntry]:
        text = (new_message_text or "").strip()
        if not text:
            raise EmptyMessage()

        entries: list[PromptEntry] = []
        if anchor_context:
            entries.append(PromptEntry(role="system", content=anchor_context))
        entries.extend(
            PromptEntry(role=m.sender, content=m.content) for m in prior_messages
        )
        entries.append(PromptEntry(role="user", content=text))
        return entries
