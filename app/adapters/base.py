"""
External interface contracts.

The chat core talks to the language model, to anchor metadata and to the
identity provider only through these interfaces, so tests and alternative
backends can be swapped in.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from fastapi import Request

from app.schemas.anchor import NoteSummary, ResourceSummary
from app.schemas.chat import CompletionResult, PromptEntry


class CompletionGateway(ABC):
    """Opaque text-in/text-out language model."""

    @abstractmethod
    async def complete(self, entries: list[PromptEntry]) -> CompletionResult:
        """
        Produce the assistant reply for an ordered, non-empty context window.

        Raise CompletionError on transport/upstream failure or when the backend
        returns no text. Implementations do not retry.
        """
        ...


class AnchorMetadataProvider(ABC):
    """
    Read access to the notes and learning resources sessions anchor to.

    Lookups return None for unknown anchors and raise AnchorNotFound when the
    lookup itself fails. Callers treat both as missing context.
    """

    @abstractmethod
    def get_resource_summary(
        self, resource_id: str, user_id: Optional[UUID] = None
    ) -> Optional[ResourceSummary]:
        ...

    @abstractmethod
    def get_note_summary(
        self, note_id: str, user_id: Optional[UUID] = None
    ) -> Optional[NoteSummary]:
        ...


class IdentityProvider(ABC):
    """Resolves the calling user for a request."""

    @abstractmethod
    def current_user_id(self, request: Request) -> UUID:
        """Return the caller's user id. Raise NotAuthenticated if there is none."""
        ...
