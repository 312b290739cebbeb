"""Tests for the chat router."""

import uuid

from app.exceptions import CompletionError
from app.models.session import Session
from app.models.session_message import SessionMessage


def test_send_message(client, auth_headers, fake_gateway):
    fake_gateway.reply = "Start with ten minutes a day."
    r = client.post(
        "/chat/messages",
        json={"anchor_type": "note", "anchor_id": "note-1", "text": "How do I start?"},
        headers=auth_headers,
    )
    assert r.status_code == 200
    data = r.json()
    assert data["session"]["anchor_type"] == "note"
    assert data["session"]["anchor_id"] == "note-1"
    assert data["user_message"]["sender"] == "user"
    assert data["user_message"]["content"] == "How do I start?"
    assert data["assistant_message"]["content"] == "Start with ten minutes a day."


def test_send_message_requires_identity(client):
    r = client.post("/chat/messages", json={"text": "hi"})
    assert r.status_code == 401


def test_send_empty_message(client, auth_headers, fake_gateway, db):
    r = client.post("/chat/messages", json={"text": "   "}, headers=auth_headers)
    assert r.status_code == 400
    assert fake_gateway.calls == []
    assert db.query(Session).count() == 0


def test_send_message_missing_anchor_id(client, auth_headers):
    r = client.post(
        "/chat/messages", json={"anchor_type": "resource", "text": "hi"}, headers=auth_headers
    )
    assert r.status_code == 400


def test_send_message_upstream_failure(client, auth_headers, fake_gateway, db):
    fake_gateway.error = CompletionError(429, "rate limited")
    r = client.post(
        "/chat/messages",
        json={"anchor_type": "note", "anchor_id": "n-1", "text": "hi"},
        headers=auth_headers,
    )
    assert r.status_code == 502
    assert r.json()["detail"] == {"status": 429, "message": "rate limited"}
    assert db.query(SessionMessage).count() == 0


def test_send_message_to_unknown_session(client, auth_headers):
    r = client.post(
        "/chat/messages",
        json={"text": "hi", "session_id": str(uuid.uuid4())},
        headers=auth_headers,
    )
    assert r.status_code == 404


def test_third_message_names_general_session(client, auth_headers, fake_gateway, db):
    first = client.post(
        "/chat/messages", json={"text": "I need a workout plan"}, headers=auth_headers
    ).json()
    session_id = first["session"]["id"]
    assert first["session"]["title"] == "New Chat Session"

    for text in ("for the gym", "three days a week"):
        r = client.post(
            "/chat/messages",
            json={"text": text, "session_id": session_id},
            headers=auth_headers,
        )
        assert r.status_code == 200

    # The title task ran after the third response and asked the model for a name.
    title_prompt = fake_gateway.calls[-1]
    assert title_prompt[0].content.startswith("Generate a short, descriptive title")

    # The task wrote through its own database session.
    db.expire_all()
    r = client.get(f"/sessions/{session_id}", headers=auth_headers)
    assert r.json()["title"] == "Happy to help with that"


def test_completions_endpoint(client, auth_headers, fake_gateway):
    fake_gateway.reply = "Sure."
    r = client.post(
        "/chat/completions",
        json={
            "messages": [
                {"role": "system", "content": "Be brief."},
                {"role": "user", "content": "Hello"},
            ]
        },
        headers=auth_headers,
    )
    assert r.status_code == 200
    assert r.json() == {"response": {"role": "assistant", "content": "Sure."}}
    assert [e.role for e in fake_gateway.calls[0]] == ["system", "user"]


def test_completions_validation(client, auth_headers, fake_gateway):
    cases = [
        {},
        {"messages": []},
        {"messages": [{"role": "tool", "content": "x"}]},
        {"messages": [{"role": "user", "content": "  "}]},
        {"messages": [{"role": "user"}]},
        {
            "messages": [
                {"role": "user", "content": "hi"},
                {"role": "assistant", "content": "hello"},
            ]
        },
    ]
    for body in cases:
        r = client.post("/chat/completions", json=body, headers=auth_headers)
        assert r.status_code == 400, body
    assert fake_gateway.calls == []


def test_completions_upstream_failure(client, auth_headers, fake_gateway):
    fake_gateway.error = CompletionError(None, "empty response")
    r = client.post(
        "/chat/completions",
        json={"messages": [{"role": "user", "content": "Hello"}]},
        headers=auth_headers,
    )
    assert r.status_code == 502
    assert r.json()["detail"]["message"] == "empty response"


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_completions_requires_identity(client, fake_gateway):
    r = client.post(
        "/chat/completions", json={"messages": [{"role": "user", "content": "Hello"}]}
    )
    assert r.status_code == 401
    assert fake_gateway.calls == []


def test_send_message_rejects_overlong_anchor_id(client, auth_headers, fake_gateway, db):
    r = client.post(
        "/chat/messages",
        json={"anchor_type": "note", "anchor_id": "n" * 65, "text": "hi"},
        headers=auth_headers,
    )
    assert r.status_code == 422
    assert fake_gateway.calls == []
    assert db.query(Session).count() == 0


def test_failed_general_send_lists_no_session(client, auth_headers, fake_gateway):
    fake_gateway.error = CompletionError(503, "upstream unavailable")
    r = client.post("/chat/messages", json={"text": "Hello?"}, headers=auth_headers)
    assert r.status_code == 502
    r = client.get("/sessions", headers=auth_headers)
    assert r.json()["total"] == 0
