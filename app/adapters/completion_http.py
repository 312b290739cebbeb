"""Completion gateway that calls a chat completion endpoint over HTTP."""

from __future__ import annotations

from typing import Any, Optional

import httpx

from app.adapters.base import CompletionGateway
from app.config import get_settings
from app.exceptions import CompletionError
from app.infra.logging_config import get_logger
from app.schemas.chat import CompletionResult, PromptEntry

logger = get_logger("completion_http")

DEFAULT_TIMEOUT_SECONDS = 30.0


def _error_message(resp: httpx.Response) -> str:
    """Best-effort message from an error body ({"error"}, {"detail"} or raw text)."""
    try:
        data = resp.json()
    except ValueError:
        return resp.text[:500] if resp.text else f"HTTP {resp.status_code}"
    if isinstance(data, dict):
        for key in ("error", "detail", "message"):
            value = data.get(key)
            if isinstance(value, str) and value:
                return value
            if isinstance(value, dict) and value.get("message"):
                return str(value["message"])
    return f"HTTP {resp.status_code}"


def _extract_text(data: Any) -> Optional[str]:
    """Pull the assistant text out of {"response": {"content": ...}} (or a bare string)."""
    if not isinstance(data, dict):
        return None
    response = data.get("response")
    if isinstance(response, str):
        return response
    if isinstance(response, dict):
        content = response.get("content")
        if isinstance(content, str):
            return content
    return None


class HttpCompletionGateway(CompletionGateway):
    """POSTs {"messages": [...]} and expects {"response": {"content": "..."}}."""

    def __init__(
        self,
        url: str,
        api_key: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._url = url
        self._api_key = api_key
        self._timeout = timeout
        self._client = client

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    async def _post(self, payload: dict[str, Any]) -> httpx.Response:
        if self._client is not None:
            return await self._client.post(
                self._url, json=payload, headers=self._headers(), timeout=self._timeout
            )
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await client.post(self._url, json=payload, headers=self._headers())

    async def complete(self, entries: list[PromptEntry]) -> CompletionResult:
        if not entries:
            raise ValueError("entries must not be empty")

        payload = {"messages": [e.model_dump() for e in entries]}
        logger.debug("Posting %d prompt entries to %s", len(entries), self._url)
        try:
            resp = await self._post(payload)
        except httpx.HTTPError as e:
            logger.warning("Completion request to %s failed: %s", self._url, e)
            raise CompletionError(None, str(e) or e.__class__.__name__) from e

        if not resp.is_success:
            message = _error_message(resp)
            logger.warning(
                "Completion endpoint returned HTTP %s: %s", resp.status_code, message
            )
            raise CompletionError(resp.status_code, message)

        try:
            data = resp.json()
        except ValueError as e:
            raise CompletionError(resp.status_code, f"Invalid JSON: {e}") from e

        text = _extract_text(data)
        if not text or not text.strip():
            raise CompletionError(None, "empty response")
        return CompletionResult(text=text.strip())


def build_http_gateway_from_env() -> HttpCompletionGateway:
    settings = get_settings()
    if not settings.completion_api_url:
        raise ValueError("COMPLETION_API_URL must be set when COMPLETION_BACKEND=http")
    return HttpCompletionGateway(
        url=settings.completion_api_url,
        api_key=settings.completion_api_key,
        timeout=settings.completion_timeout_seconds,
    )
