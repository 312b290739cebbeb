"""Sessions API: list, get, messages, title."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi_pagination import Page, Params
from fastapi_pagination.ext.sqlalchemy import paginate
from sqlalchemy.orm import Session

from app.adapters.base import CompletionGateway
from app.db import get_db
from app.models.session import Session as ChatSession
from app.routers.utils.dependencies import (
    get_completion_gateway,
    get_current_user_id,
    get_owned_session,
)
from app.schemas.session import AnchorType, MessageRead, SessionRead
from app.services.session_message_service import SessionMessageService
from app.services.session_service import SessionService
from app.services.session_title_service import SessionTitleService

sessions_router = APIRouter(prefix="/sessions", tags=["Session"])


@sessions_router.get("", response_model=Page[SessionRead])
def list_sessions(
    params: Params = Depends(),
    anchor_type: Optional[AnchorType] = Query(None),
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> Page[SessionRead]:
    """List the caller's sessions, most recently active first."""
    query = SessionService(db).list_sessions_query(user_id, anchor_type=anchor_type)
    return paginate(query, params=params)


@sessions_router.get("/{session_id}", response_model=SessionRead)
def get_session(
    session: ChatSession = Depends(get_owned_session),
) -> SessionRead:
    """Get a session by ID."""
    return SessionRead.model_validate(session)


@sessions_router.get("/{session_id}/messages", response_model=list[MessageRead])
def list_session_messages(
    session: ChatSession = Depends(get_owned_session),
    db: Session = Depends(get_db),
) -> list[MessageRead]:
    """Full message history for a session, oldest first."""
    messages = SessionMessageService(db).list_messages(session.id)
    return [MessageRead.model_validate(m) for m in messages]


@sessions_router.post("/{session_id}/title", response_model=SessionRead)
async def generate_title(
    session: ChatSession = Depends(get_owned_session),
    gateway: CompletionGateway = Depends(get_completion_gateway),
    db: Session = Depends(get_db),
) -> SessionRead:
    """Generate a title from the latest messages and return the updated session."""
    await SessionTitleService(db, gateway).generate_session_title(session.id)
    db.refresh(session)
    return SessionRead.model_validate(session)
