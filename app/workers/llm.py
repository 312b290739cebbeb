from __future__ import annotations

from typing import Any, List, Optional

from pydantic_ai import Agent
from pydantic_ai.exceptions import ModelHTTPError
from pydantic_ai.messages import (
    ModelMessage,
    ModelRequest,
    ModelResponse,
    SystemPromptPart,
    TextPart,
    UserPromptPart,
)
from pydantic_ai.models import Model
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.litellm import LiteLLMProvider

from app.adapters.base import CompletionGateway
from app.adapters.completion_http import build_http_gateway_from_env
from app.config import get_settings
from app.constants.default_system_prompt import DefaultSystemPrompt
from app.exceptions import CompletionError
from app.infra.logging_config import get_logger
from app.schemas.chat import CompletionResult, PromptEntry

logger = get_logger("llm")

COMPLETION_BACKEND_AGENT = "agent"
COMPLETION_BACKEND_HTTP = "http"


def _history_to_message_list(entries: List[PromptEntry]) -> List[ModelMessage]:
    """Convert user/assistant entries to pydantic_ai messages for message_history."""
    out: List[ModelMessage] = []
    for entry in entries:
        content = (entry.content or "").strip()
        if not content:
            continue
        if entry.role == "user":
            out.append(ModelRequest(parts=[UserPromptPart(content=content)]))
        elif entry.role == "assistant":
            out.append(ModelResponse(parts=[TextPart(content=content)]))
    return out


def _message_list_with_system_prompt(
    system_prompt: str,
    history: List[PromptEntry],
) -> List[ModelMessage]:
    """Build message_history with the system prompt always first, then the conversation."""

    # https://ai.pydantic.dev/agent/#system-prompts
    # System entries (anchor context) are folded into the leading system prompt.
    context = [e.content.strip() for e in history if e.role == "system" and e.content.strip()]
    full_prompt = system_prompt.rstrip()
    if context:
        full_prompt = "\n\n".join([full_prompt, *context]) if full_prompt else "\n\n".join(context)
    rest = _history_to_message_list([e for e in history if e.role != "system"])
    if not full_prompt:
        return rest
    return [ModelRequest(parts=[SystemPromptPart(content=full_prompt)])] + rest


class AgentCompletionGateway(CompletionGateway):
    """Completion gateway backed by a pydantic_ai Agent."""

    def __init__(
        self,
        model: Model | str,
        system_prompt: Optional[str] = None,
    ) -> None:
        self._system_prompt = (
            DefaultSystemPrompt.CONTENT if system_prompt is None else system_prompt
        )
        self._agent = Agent(model)

    @classmethod
    def from_settings(
        cls,
        model_name: str,
        api_key: Optional[str] = None,
        api_base: Optional[str] = None,
        system_prompt: Optional[str] = None,
    ) -> "AgentCompletionGateway":
        provider = LiteLLMProvider(api_key=api_key, api_base=api_base)
        model = OpenAIChatModel(model_name, provider=provider)
        logger.info("Initializing agent completion gateway with model %s", model_name)
        return cls(model, system_prompt=system_prompt)

    async def complete(self, entries: list[PromptEntry]) -> CompletionResult:
        if not entries:
            raise ValueError("entries must not be empty")

        *history, last = entries
        if last.role == "user":
            prompt = last.content
        else:
            history, prompt = entries, None
        message_history = _message_list_with_system_prompt(self._system_prompt, history)

        try:
            result = await self._agent.run(
                prompt,
                message_history=message_history or None,
            )
        except ModelHTTPError as e:
            logger.warning("Model returned HTTP %s: %s", e.status_code, e)
            raise CompletionError(e.status_code, _http_error_message(e)) from e
        except Exception as e:
            logger.warning("Agent run failed: %s", e)
            raise CompletionError(None, str(e) or e.__class__.__name__) from e

        text = str(result.output or "").strip()
        if not text:
            raise CompletionError(None, "empty response")
        return CompletionResult(text=text)


def _http_error_message(e: ModelHTTPError) -> str:
    body: Any = e.body
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(body.get("message"), str):
            return body["message"]
    return e.message


def build_agent_gateway_from_env() -> AgentCompletionGateway:
    settings = get_settings()
    logger.info(
        "LLM config: model=%s, api_key=%s, api_base=%s",
        settings.llm_model,
        "set" if settings.litellm_api_key else "not set",
        settings.litellm_api_base or "(default)",
    )
    if not settings.litellm_api_key:
        logger.warning(
            "LITELLM_API_KEY is not set; set it to a valid OpenAI or LiteLLM API key to avoid 401 errors."
        )
    return AgentCompletionGateway.from_settings(
        model_name=settings.llm_model,
        api_key=settings.litellm_api_key,
        api_base=settings.litellm_api_base,
    )


def build_completion_gateway_from_env() -> CompletionGateway:
    """Pick the completion backend named by COMPLETION_BACKEND."""
    backend = (get_settings().completion_backend or COMPLETION_BACKEND_AGENT).lower()
    if backend == COMPLETION_BACKEND_HTTP:
        return build_http_gateway_from_env()
    if backend != COMPLETION_BACKEND_AGENT:
        raise ValueError(f"Unknown COMPLETION_BACKEND: {backend!r}")
    return build_agent_gateway_from_env()
