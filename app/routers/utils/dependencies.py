from uuid import UUID

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from app.adapters.anchor_metadata import DatabaseAnchorMetadataProvider
from app.adapters.base import AnchorMetadataProvider, CompletionGateway, IdentityProvider
from app.adapters.identity import build_identity_provider_from_env
from app.db import get_db
from app.models.session import Session as ChatSession
from app.services.chat_orchestrator import ChatOrchestrator
from app.services.session_service import SessionService
from app.workers.llm import build_agent_gateway_from_env, build_completion_gateway_from_env


def get_identity_provider() -> IdentityProvider:
    """FastAPI dependency for the configured identity provider."""
    return build_identity_provider_from_env()


def get_current_user_id(
    request: Request,
    identity: IdentityProvider = Depends(get_identity_provider),
) -> UUID:
    """FastAPI dependency to get the calling user's id. Raises NotAuthenticated."""
    return identity.current_user_id(request)


def get_completion_gateway() -> CompletionGateway:
    """FastAPI dependency for the completion backend used by the chat flow."""
    return build_completion_gateway_from_env()


def get_agent_gateway() -> CompletionGateway:
    """FastAPI dependency for the model behind POST /chat/completions."""
    return build_agent_gateway_from_env()


def get_anchor_metadata(db: Session = Depends(get_db)) -> AnchorMetadataProvider:
    return DatabaseAnchorMetadataProvider(db)


def get_chat_orchestrator(
    db: Session = Depends(get_db),
    gateway: CompletionGateway = Depends(get_completion_gateway),
    anchor_metadata: AnchorMetadataProvider = Depends(get_anchor_metadata),
) -> ChatOrchestrator:
    return ChatOrchestrator(db, gateway, anchor_metadata=anchor_metadata)


def get_owned_session(
    session_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> ChatSession:
    """FastAPI dependency to get one of the caller's sessions by ID."""
    session = SessionService(db).get_session_for_user(session_id, user_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session
