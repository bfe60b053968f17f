"""
Pytest configuration and fixtures.

Every test gets its own SQLite file under ``tmp_path`` with migrations
applied, and the process‑wide store is reset around it.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Dict

import pytest
from fastapi.testclient import TestClient

from sitter_board_api.app.core.config import settings
from sitter_board_api.app.core.db import init_db
from sitter_board_api.app.core.store import set_store
from sitter_board_api.app.main import app
from sitter_board_api.app.schemas.profile import Caller, Role
from sitter_board_api.app.services import notice_service


@pytest.fixture(autouse=True)
def database(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "database_url", str(tmp_path / "test.db"))
    monkeypatch.setattr(settings, "allow_applications_when_filled", False)
    monkeypatch.setattr(settings, "update_max_retries", 5)
    set_store(None)
    init_db()
    yield tmp_path / "test.db"
    set_store(None)


@pytest.fixture
def clock(monkeypatch) -> Callable[[], datetime]:
    """Deterministic clock for the notice service: one second per call."""
    state = {"now": datetime(2025, 10, 1, 9, 0, tzinfo=timezone.utc)}

    def tick() -> datetime:
        state["now"] += timedelta(seconds=1)
        return state["now"]

    monkeypatch.setattr(notice_service, "_utcnow", tick)
    return tick


@pytest.fixture
def parent() -> Caller:
    return Caller(user_id="p1", role=Role.PARENT, name="Sarah Parent")


@pytest.fixture
def other_parent() -> Caller:
    return Caller(user_id="p2", role=Role.PARENT, name="Paul Parent")


@pytest.fixture
def student() -> Caller:
    return Caller(user_id="s1", role=Role.STUDENT, name="Emma Student")


@pytest.fixture
def other_student() -> Caller:
    return Caller(user_id="s2", role=Role.STUDENT, name="Michael Student")


@pytest.fixture
def notice_fields() -> Dict[str, object]:
    return {
        "title": "Saturday Evening Babysitting",
        "description": "Two kids, dinner and bedtime routine",
        "date": "2025-10-18",
        "time": "6:00 PM - 11:00 PM",
        "address": "123 Maple Street",
        "location": "Downtown",
        "pay_rate": 18,
        "duration": "5 hours",
        "age_group": "5, 8",
    }


@pytest.fixture
def client() -> TestClient:
    """FastAPI test client."""
    return TestClient(app)


@pytest.fixture
def signup(client) -> Callable[..., Dict[str, str]]:
    """Register an account over HTTP and return its auth headers."""

    def _signup(email: str, role: str, name: str = "Test User", password: str = "secret123") -> Dict[str, str]:
        response = client.post(
            "/api/v1/auth/signup",
            json={"email": email, "password": password, "name": name, "role": role},
        )
        assert response.status_code == 201, response.text
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    return _signup
