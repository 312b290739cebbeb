"""Chat API: send a message in an anchored session, and the completion endpoint."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException

from app.adapters.base import CompletionGateway
from app.infra.logging_config import get_logger
from app.routers.utils.dependencies import (
    get_agent_gateway,
    get_chat_orchestrator,
    get_completion_gateway,
    get_current_user_id,
)
from app.schemas.chat import (
    ChatExchangeRead,
    CompletionRequest,
    CompletionResponse,
    CompletionResponseMessage,
    PromptEntry,
    SendMessageRequest,
)
from app.schemas.session import MessageRead, SessionRead
from app.services.chat_orchestrator import ChatOrchestrator
from app.tasks.title_task import run_title_generation

logger = get_logger("chat_router")

chat_router = APIRouter(prefix="/chat", tags=["Chat"])

ALLOWED_ROLES = ("user", "assistant", "system")


@chat_router.post("/messages", response_model=ChatExchangeRead)
async def send_message(
    data: SendMessageRequest,
    background_tasks: BackgroundTasks,
    user_id: UUID = Depends(get_current_user_id),
    orchestrator: ChatOrchestrator = Depends(get_chat_orchestrator),
    gateway: CompletionGateway = Depends(get_completion_gateway),
) -> ChatExchangeRead:
    """Send a message; returns the session and the stored user/assistant pair."""
    exchange = await orchestrator.send_message(
        user_id,
        data.anchor_type,
        data.anchor_id,
        data.text,
        client_id=data.client_id,
        session_id=data.session_id,
    )
    if exchange.needs_title:
        background_tasks.add_task(run_title_generation, exchange.session.id, gateway)
    return ChatExchangeRead(
        session=SessionRead.model_validate(exchange.session),
        user_message=MessageRead.model_validate(exchange.user_message),
        assistant_message=MessageRead.model_validate(exchange.assistant_message),
    )


def _validate_completion_request(data: CompletionRequest) -> list[PromptEntry]:
    messages = data.messages
    if messages is None:
        raise HTTPException(
            status_code=400,
            detail="Invalid request format. Messages array is required.",
        )
    if not messages:
        raise HTTPException(status_code=400, detail="At least one message is required.")
    for i, message in enumerate(messages):
        if message.role not in ALLOWED_ROLES:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid message role at index {i}. Must be 'user', 'assistant', or 'system'.",
            )
        if not message.content or not message.content.strip():
            raise HTTPException(
                status_code=400,
                detail=f"Message content cannot be empty at index {i}.",
            )
    if messages[-1].role != "user":
        raise HTTPException(status_code=400, detail="Last message must be from the user.")
    return [PromptEntry(role=m.role, content=m.content) for m in messages]


@chat_router.post("/completions", response_model=CompletionResponse)
async def create_completion(
    data: CompletionRequest,
    user_id: UUID = Depends(get_current_user_id),
    gateway: CompletionGateway = Depends(get_agent_gateway),
) -> CompletionResponse:
    """Answer an ordered list of messages with the SmartShelf assistant."""
    entries = _validate_completion_request(data)
    logger.debug("Completion for user %s with %d messages", user_id, len(entries))
    result = await gateway.complete(entries)
    return CompletionResponse(response=CompletionResponseMessage(content=result.text))
