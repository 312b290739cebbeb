from app.services.anchor_context_service import AnchorContextService
from app.services.chat_orchestrator import ChatExchange, ChatOrchestrator
from app.services.context_assembler import ContextAssembler
from app.services.session_message_service import SessionMessageService
from app.services.session_service import SessionService
from app.services.session_title_service import SessionTitleService

__all__ = [
    "AnchorContextService",
    "ChatExchange",
    "ChatOrchestrator",
    "ContextAssembler",
    "SessionMessageService",
    "SessionService",
    "SessionTitleService",
]
