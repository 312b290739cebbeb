"""Schemas for the chat surface and the completion wire format."""

from __future__ import annotations

from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.schemas.session import AnchorType, MessageRead, SessionRead

PromptRole = Literal["system", "user", "assistant"]


class PromptEntry(BaseModel):
    """One entry of the ordered context window handed to a completion backend."""

    role: PromptRole
    content: str


class CompletionResult(BaseModel):
    text: str


# -----------------------------------------------------------------------------
# Completion endpoint wire shape
# -----------------------------------------------------------------------------


class CompletionRequestMessage(BaseModel):
    # role and content are validated by the endpoint so that error messages can
    # name the offending index.
    role: Optional[str] = None
    content: Optional[str] = None


class CompletionRequest(BaseModel):
    messages: Optional[list[CompletionRequestMessage]] = None


class CompletionResponseMessage(BaseModel):
    role: Literal["assistant"] = "assistant"
    content: str


class CompletionResponse(BaseModel):
    response: CompletionResponseMessage


# -----------------------------------------------------------------------------
# Chat
# -----------------------------------------------------------------------------


class SendMessageRequest(BaseModel):
    anchor_type: AnchorType = AnchorType.GENERAL
    anchor_id: Optional[str] = Field(default=None, max_length=64)
    text: str
    client_id: Optional[str] = Field(default=None, max_length=128)
    session_id: Optional[UUID] = None  # continue an existing session


class ChatExchangeRead(BaseModel):
    session: SessionRead
    user_message: MessageRead
    assistant_message: MessageRead
