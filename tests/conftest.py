"""Shared test fixtures for the DocTree test suite.

All tests use an in-memory SQLite database shared through a StaticPool.
The schema is dropped and recreated around every test, so each test starts
from an empty tree.
"""

import os

# Force auth off and use the in-memory database before any app imports.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTH_ENABLED"] = "false"
os.environ["LOG_FORMAT"] = "text"

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from doctree import models  # noqa: F401  (registers tables)
from doctree.core.auth import Identity
from doctree.core.config import settings
from doctree.core.token_factory import issue_token
from doctree.database import Base, SessionLocal, engine, get_db
from doctree.main import app
from doctree.models import Tag


@pytest.fixture(autouse=True)
def _clean_tables():
    """Recreate all tables before each test for isolation."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture()
def db():
    """Per-test database session."""
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture()
def client(db):
    """FastAPI TestClient with the DB dependency overridden to use the test session."""

    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


class FakeClock:
    """Controllable clock: call it for the current time, advance() to move it."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> datetime:
        self.now = self.now + timedelta(seconds=seconds)
        return self.now


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 3, 1, 9, 0, 0))


@pytest.fixture()
def alice() -> Identity:
    return Identity(subject="user-alice", name="Alice")


@pytest.fixture()
def bob() -> Identity:
    return Identity(subject="user-bob", name="Bob")


@pytest.fixture()
def make_tag(db):
    """Insert a tag directly and return its id."""

    def _make(name: str = "planning", usage_count: int = 0) -> str:
        tag = Tag(
            id=f"tag-{name}",
            name=name,
            display_name=name.title(),
            usage_count=usage_count,
            created_by="seed",
            created_by_name="Seed",
        )
        db.add(tag)
        db.commit()
        return tag.id

    return _make


@pytest.fixture()
def enable_auth(monkeypatch):
    """Turn bearer-token identity resolution on for one test."""
    monkeypatch.setattr(settings, "auth_enabled", True)


@pytest.fixture()
def token_headers():
    """Build Authorization headers for a subject."""

    def _headers(subject: str = "user-alice", name: str = "Alice") -> dict:
        token = issue_token(subject, settings.jwt_secret_key, name=name)
        return {"Authorization": f"Bearer {token}"}

    return _headers
