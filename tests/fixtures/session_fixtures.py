"""Fixtures for chat sessions and messages."""

import uuid

import pytest

from app.models.session import ANCHOR_GENERAL, Session
from app.services.session_message_service import SessionMessageService


@pytest.fixture(scope="function")
def user_id():
    return uuid.uuid4()


@pytest.fixture(scope="function")
def setup_general_session(db, user_id):
    session = Session(
        user_id=user_id,
        anchor_type=ANCHOR_GENERAL,
        anchor_id=None,
        title="New Chat Session",
    )
    db.add(session)
    db.commit()
    db.refresh(session)
    return session


@pytest.fixture(scope="function")
def setup_conversation(db, setup_general_session, faker):
    """A general session holding two complete exchanges."""
    svc = SessionMessageService(db)
    for _ in range(2):
        svc.append_turn(
            setup_general_session.id,
            faker.sentence(nb_words=6),
            faker.sentence(nb_words=10),
        )
    db.refresh(setup_general_session)
    return setup_general_session
