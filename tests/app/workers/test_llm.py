"""Tests for the agent-backed completion gateway."""

import pytest
from pydantic_ai.exceptions import ModelHTTPError
from pydantic_ai.messages import (
    ModelMessage,
    ModelRequest,
    ModelResponse,
    SystemPromptPart,
    TextPart,
    UserPromptPart,
)
from pydantic_ai.models.function import AgentInfo, FunctionModel

from app.adapters.completion_http import HttpCompletionGateway
from app.exceptions import CompletionError
from app.schemas.chat import PromptEntry
from app.workers.llm import (
    AgentCompletionGateway,
    _message_list_with_system_prompt,
    build_completion_gateway_from_env,
)


def _parts(messages: list[ModelMessage], part_type) -> list[str]:
    return [
        part.content
        for message in messages
        for part in message.parts
        if isinstance(part, part_type)
    ]


def test_message_list_folds_system_entries_into_prompt():
    history = [
        PromptEntry(role="system", content="Linked note: \"X\"."),
        PromptEntry(role="user", content="Hi"),
        PromptEntry(role="assistant", content="Hello"),
    ]
    messages = _message_list_with_system_prompt("Persona", history)
    assert isinstance(messages[0], ModelRequest)
    assert messages[0].parts[0].content == "Persona\n\nLinked note: \"X\"."
    assert isinstance(messages[1].parts[0], UserPromptPart)
    assert isinstance(messages[2], ModelResponse)
    assert len(messages) == 3


@pytest.mark.asyncio
async def test_agent_gateway_sends_history_and_prompt():
    seen: list[ModelMessage] = []

    def respond(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
        seen.extend(messages)
        return ModelResponse(parts=[TextPart(content="  Keep going!  ")])

    gateway = AgentCompletionGateway(FunctionModel(respond), system_prompt="You are SmartShelf.")
    result = await gateway.complete(
        [
            PromptEntry(role="system", content="Current streak: 5 days."),
            PromptEntry(role="user", content="Hi"),
            PromptEntry(role="assistant", content="Hello!"),
            PromptEntry(role="user", content="How am I doing?"),
        ]
    )

    assert result.text == "Keep going!"
    system_prompts = _parts(seen, SystemPromptPart)
    assert system_prompts == ["You are SmartShelf.\n\nCurrent streak: 5 days."]
    assert _parts(seen, UserPromptPart) == ["Hi", "How am I doing?"]
    assert "Hello!" in _parts(seen, TextPart)


@pytest.mark.asyncio
async def test_agent_gateway_maps_http_errors():
    def respond(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
        raise ModelHTTPError(
            status_code=429,
            model_name="test",
            body={"error": {"message": "Rate limit exceeded"}},
        )

    gateway = AgentCompletionGateway(FunctionModel(respond))
    with pytest.raises(CompletionError) as exc_info:
        await gateway.complete([PromptEntry(role="user", content="Hi")])
    assert exc_info.value.status == 429
    assert exc_info.value.message == "Rate limit exceeded"


@pytest.mark.asyncio
async def test_agent_gateway_maps_other_failures():
    def respond(messages: list[ModelMessage], info: AgentInfo) -> ModelResponse:
        raise RuntimeError("network down")

    gateway = AgentCompletionGateway(FunctionModel(respond))
    with pytest.raises(CompletionError) as exc_info:
        await gateway.complete([PromptEntry(role="user", content="Hi")])
    assert exc_info.value.status is None
    assert "network down" in exc_info.value.message


@pytest.mark.asyncio
async def test_agent_gateway_rejects_empty_input():
    gateway = AgentCompletionGateway(FunctionModel(lambda m, i: ModelResponse(parts=[])))
    with pytest.raises(ValueError):
        await gateway.complete([])


def test_build_gateway_http_backend(monkeypatch):
    monkeypatch.setenv("COMPLETION_BACKEND", "http")
    monkeypatch.setenv("COMPLETION_API_URL", "https://chat.example.com/api/chat")
    assert isinstance(build_completion_gateway_from_env(), HttpCompletionGateway)


def test_build_gateway_http_backend_requires_url(monkeypatch):
    monkeypatch.setenv("COMPLETION_BACKEND", "http")
    monkeypatch.delenv("COMPLETION_API_URL", raising=False)
    with pytest.raises(ValueError):
        build_completion_gateway_from_env()


def test_build_gateway_unknown_backend(monkeypatch):
    monkeypatch.setenv("COMPLETION_BACKEND", "carrier-pigeon")
    with pytest.raises(ValueError):
        build_completion_gateway_from_env()
