"""
FastAPI application factory.

Registers the chat, sessions and health routers and translates chat errors
into HTTP responses.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi_pagination import add_pagination

from app.config import get_settings
from app.exceptions import (
    ChatError,
    CompletionError,
    EmptyMessage,
    InvalidAnchor,
    NotAuthenticated,
    SessionNotFound,
    StorageError,
)
from app.infra.logging_config import LoggingConfig, get_logger
from app.routers.chat_router import chat_router
from app.routers.health_router import health_router
from app.routers.sessions_router import sessions_router

logger = get_logger("main")

_STATUS_BY_ERROR: list[tuple[type[ChatError], int]] = [
    (NotAuthenticated, 401),
    (EmptyMessage, 400),
    (InvalidAnchor, 400),
    (SessionNotFound, 404),
    (StorageError, 500),
]


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(CompletionError)
    async def completion_error_handler(request: Request, exc: CompletionError):
        logger.warning("Completion failed on %s: %r", request.url.path, exc)
        return JSONResponse(
            status_code=502,
            content={"detail": {"status": exc.status, "message": exc.message}},
        )

    @app.exception_handler(ChatError)
    async def chat_error_handler(request: Request, exc: ChatError):
        status_code = 500
        for error_type, code in _STATUS_BY_ERROR:
            if isinstance(exc, error_type):
                status_code = code
                break
        if status_code >= 500:
            logger.error("Request to %s failed: %s", request.url.path, exc)
        headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
        return JSONResponse(
            status_code=status_code, content={"detail": str(exc)}, headers=headers
        )


def create_app(testing: bool = False) -> FastAPI:
    settings = get_settings()
    LoggingConfig(level="DEBUG" if testing else settings.log_level)

    app = FastAPI(
        title="SmartShelf Chat API",
        description="Session and context orchestration for the SmartShelf learning assistant",
        version="0.1.0",
    )

    _register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(chat_router)
    app.include_router(sessions_router)

    add_pagination(app)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=get_settings().port)
