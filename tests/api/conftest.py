"""Fixtures for API tests."""

from collections.abc import Iterator
from datetime import datetime

import pytest
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.testclient import TestClient

# Load environment variables before importing app
load_dotenv()

from shuttlehub.api.app import create_app  # noqa: E402
from shuttlehub.api.dependencies import get_advisor, get_clock  # noqa: E402
from shuttlehub.dao import MemoryStore  # noqa: E402
from shuttlehub.services.advisor import SessionAdvisor  # noqa: E402

ADMIN_AUTH = ("admin", "admin123")
MEMBER_AUTH = ("user", "user123")


@pytest.fixture
def api_store() -> MemoryStore:
    """Unopened in-memory store; the app lifespan opens it."""
    return MemoryStore()


@pytest.fixture
def app(api_store: MemoryStore, now: datetime) -> FastAPI:
    """App over the in-memory store, with a fixed clock and no Claude client."""
    app = create_app(store=api_store)
    app.dependency_overrides[get_clock] = lambda: (lambda: now)
    app.dependency_overrides[get_advisor] = lambda: SessionAdvisor()
    return app


@pytest.fixture
def client_as_admin(app: FastAPI) -> Iterator[TestClient]:
    """Provide a test client authenticated as admin."""
    with TestClient(app) as client:
        client.auth = ADMIN_AUTH
        yield client


@pytest.fixture
def client_as_user(app: FastAPI) -> Iterator[TestClient]:
    """Provide a test client authenticated as the member login (no admin access)."""
    with TestClient(app) as client:
        client.auth = MEMBER_AUTH
        yield client


@pytest.fixture
def client_unauthenticated(app: FastAPI) -> Iterator[TestClient]:
    """Provide a test client with no authentication."""
    with TestClient(app) as client:
        yield client


@pytest.fixture
def session_payload() -> dict:
    return {
        "date": "2025-03-14",
        "time": "19:00 - 21:00",
        "location": "SRC",
        "court_count": 2,
        "shuttle_qty": 3,
        "max_participants": 2,
    }


@pytest.fixture
def created_session(client_as_admin: TestClient, session_payload: dict) -> dict:
    response = client_as_admin.post("/api/v1/sessions", json=session_payload)
    assert response.status_code == 201
    return response.json()
