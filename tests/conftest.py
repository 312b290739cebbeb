import os

# Settings pick the test database from ENV; set it before app modules are imported.
os.environ.setdefault("ENV", "test")
os.environ.setdefault("TEST_DATABASE_URL", "sqlite:///:memory:")

import pytest
from fastapi.testclient import TestClient

from app.adapters.identity import HeaderIdentityProvider
from app.db import Base, SessionLocal, engine, get_db
from app.main import create_app
from app.routers.utils.dependencies import (
    get_agent_gateway,
    get_completion_gateway,
    get_identity_provider,
)

import app.models  # noqa: F401  registers all tables on Base.metadata

pytest_plugins = [
    "tests.fixtures.session_fixtures",
    "tests.fixtures.anchor_fixtures",
    "tests.fixtures.gateway_fixtures",
]


@pytest.fixture(scope="function")
def db():
    """Fresh in-memory schema per test."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db, fake_gateway):
    """TestClient with the test db, a scripted completion backend and header auth."""
    app = create_app(testing=True)

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_completion_gateway] = lambda: fake_gateway
    app.dependency_overrides[get_agent_gateway] = lambda: fake_gateway
    app.dependency_overrides[get_identity_provider] = lambda: HeaderIdentityProvider()

    with TestClient(app) as c:
        yield c


@pytest.fixture
def auth_headers(user_id):
    return {"X-User-Id": str(user_id)}
