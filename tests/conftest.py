# tests/conftest.py

from __future__ import annotations

from typing import Callable, Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlmodel import Session

from task_tracker.core.config import Settings
from task_tracker.db.session import Database
from task_tracker.main import create_app


@pytest.fixture()
def settings() -> Settings:
    """
    Settings pinned for tests: in-memory SQLite and a fixed secret.

    The .env file is ignored so a developer's local configuration can't leak in.
    """
    return Settings(
        _env_file=None,
        DATABASE_URL="sqlite://",
        SECRET_KEY="test-secret",
        DEBUG=True,
    )


@pytest.fixture()
def app(settings: Settings) -> FastAPI:
    return create_app(settings)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    # Entering the client runs the lifespan, which opens the database
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def db() -> Iterator[Session]:
    """A session on a fresh in-memory database, for service-level tests."""
    database = Database("sqlite://")
    database.create_all()
    with Session(database.engine) as session:
        yield session
    database.dispose()


@pytest.fixture()
def register(client: TestClient) -> Callable[..., dict]:
    """Register a user over HTTP and return the response's ``data`` block."""

    def _register(username: str = "u1", email: str | None = None, password: str = "password123") -> dict:
        resp = client.post(
            "/api/auth/register",
            json={"username": username, "email": email or f"{username}@x.com", "password": password},
        )
        assert resp.status_code == 201, resp.text
        return resp.json()["data"]

    return _register


@pytest.fixture()
def auth_headers(register: Callable[..., dict]) -> Callable[..., dict]:
    """Register a user and return the Authorization header for them."""

    def _headers(username: str = "u1") -> dict:
        token = register(username)["token"]
        return {"Authorization": f"Bearer {token}"}

    return _headers
