"""Errors raised by the chat core. Routers translate them to HTTP responses in app.main."""

from __future__ import annotations

from typing import Optional


class ChatError(Exception):
    """Base class for chat/session errors."""


class NotAuthenticated(ChatError):
    """No resolvable user for the request."""

    def __init__(self, message: str = "Not authenticated") -> None:
        super().__init__(message)


class EmptyMessage(ChatError):
    """Message text is empty after trimming whitespace."""

    def __init__(self, message: str = "Message text must not be empty") -> None:
        super().__init__(message)


class InvalidAnchor(ChatError):
    """Anchor type unknown, or anchor id missing for a note/resource anchor."""


class AnchorNotFound(ChatError):
    """Anchor metadata lookup failed. Callers degrade to defaults."""


class SessionNotFound(ChatError):
    """Session does not exist or belongs to another user."""


class StorageError(ChatError):
    """Persistence failure while resolving, reading or appending."""


class CompletionError(ChatError):
    """Language model call failed or returned no text."""

    def __init__(self, status: Optional[int], message: str) -> None:
        super().__init__(message)
        self.status = status
        self.message = message

    def __repr__(self) -> str:
        return f"CompletionError(status={self.status!r}, message={self.message!r})"
