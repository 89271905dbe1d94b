"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from bacefook.config import BacefookConfig
from bacefook.database.models import Base, User


@pytest.fixture
def db_engine() -> Engine:
    """Create an in-memory SQLite engine with all Bacefook tables.

    Uses StaticPool so every session (and the TestClient's worker thread)
    shares the same in-memory database.
    """
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def db_session(db_engine: Engine):
    """Provide a session that rolls back after each test."""
    with Session(db_engine) as session:
        yield session
        session.rollback()


@pytest.fixture
def test_config() -> BacefookConfig:
    return BacefookConfig(service_name="Bacefook Test", api_port=8000)


@pytest.fixture
def client(db_engine, test_config):
    """FastAPI TestClient wired to the in-memory engine."""
    from fastapi.testclient import TestClient

    from bacefook.api.deps import get_config, get_engine
    from bacefook.api.main import app

    app.dependency_overrides[get_engine] = lambda: db_engine
    app.dependency_overrides[get_config] = lambda: test_config
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


def make_user(engine: Engine, username: str, **overrides):
    """Register a user through the service layer and return its profile."""
    from bacefook.services.user_service import create_user

    fields = {
        "email": f"{username}@example.com",
        "username": username,
        "first_name": username.capitalize(),
        "last_name": "Tester",
    }
    fields.update(overrides)
    return create_user(engine, **fields)


def insert_user(
    engine: Engine,
    username: str,
    created_at: datetime,
    referred_by_id: str | None = None,
) -> str:
    """Insert a bare user row with an explicit ``created_at``; returns its id."""
    with Session(engine) as session:
        user = User(
            email=f"{username}@example.com",
            username=username,
            first_name=username.capitalize(),
            last_name="Seeded",
            referred_by_id=referred_by_id,
            created_at=created_at,
            updated_at=created_at,
        )
        session.add(user)
        session.commit()
        return user.id


def at(year: int, month: int, day: int, hour: int = 12, minute: int = 0) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=UTC)
