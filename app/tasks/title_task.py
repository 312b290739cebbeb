"""Background title generation, run after the chat response has been sent."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from app.adapters.base import CompletionGateway
from app.infra.logging_config import get_logger
from app.services.session_title_service import SessionTitleService
from app.utils.db.db_session_helper import db_session

logger = get_logger("title_task")


async def run_title_generation(
    session_id: UUID, gateway: CompletionGateway
) -> Optional[str]:
    """Name a session using a database session of its own. Never raises."""
    try:
        with db_session() as db:
            return await SessionTitleService(db, gateway).generate_session_title(
                session_id
            )
    except Exception as e:
        logger.exception("Background title generation failed for %s: %s", session_id, e)
        return None
