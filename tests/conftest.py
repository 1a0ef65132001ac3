# tests/conftest.py

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable

import pytest
from fastapi.testclient import TestClient

from app.core.dependencies import get_auth_config
from app.database.supabase_client import get_supabase
from app.main import app, limiter
from app.modules.auth.schemas import RegisterRequest
from app.modules.auth.service import AuthConfig, AuthService
from app.modules.reports.service import ReportService
from app.modules.tasks.schemas import ChecklistItem, TaskCreate
from app.modules.tasks.service import TaskService

from .fakes import FakeSupabase

INVITE = "invite-123"


@pytest.fixture()
def fake_supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture()
def auth_config() -> AuthConfig:
    # Minimum bcrypt cost keeps hashing fast
    return AuthConfig(jwt_secret="test-secret", admin_invite_token=INVITE, bcrypt_rounds=4)


@pytest.fixture()
def auth_service(fake_supabase: FakeSupabase, auth_config: AuthConfig) -> AuthService:
    return AuthService(fake_supabase, auth_config)


@pytest.fixture()
def task_service(fake_supabase: FakeSupabase) -> TaskService:
    return TaskService(fake_supabase)


@pytest.fixture()
def report_service(fake_supabase: FakeSupabase) -> ReportService:
    return ReportService(fake_supabase)


@pytest.fixture()
def register(auth_service: AuthService) -> Callable[..., dict]:
    """Register a user and return the acting-user dict the routes would see."""

    def _register(name: str, email: str, admin: bool = False) -> dict[str, Any]:
        response = auth_service.register(RegisterRequest(
            name=name,
            email=email,
            password="secret123",
            admin_invite_token=INVITE if admin else None,
        ))
        actor = auth_service.get_current_user(response.token)
        actor["token"] = response.token
        return actor

    return _register


@pytest.fixture()
def admin(register) -> dict[str, Any]:
    return register("Ada Admin", "ada@example.com", admin=True)


@pytest.fixture()
def member(register) -> dict[str, Any]:
    return register("Mel Member", "mel@example.com")


@pytest.fixture()
def other_member(register) -> dict[str, Any]:
    return register("Otto Other", "otto@example.com")


@pytest.fixture()
def make_task(task_service: TaskService, admin: dict) -> Callable[..., Any]:
    def _make_task(assignees: list[dict], checklist: int = 0, **fields: Any):
        data = TaskCreate(
            title=fields.pop("title", "Write report"),
            due_date=fields.pop("due_date", datetime(2030, 1, 1, tzinfo=timezone.utc)),
            assigned_to=[user["id"] for user in assignees],
            todo_checklist=[ChecklistItem(text=f"step {i + 1}") for i in range(checklist)],
            **fields,
        )
        return task_service.create_task(admin, data)

    return _make_task


@pytest.fixture()
def client(fake_supabase: FakeSupabase, auth_config: AuthConfig):
    app.dependency_overrides[get_supabase] = lambda: fake_supabase
    app.dependency_overrides[get_auth_config] = lambda: auth_config
    limiter.reset()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def bearer(actor: dict) -> dict[str, str]:
    return {"Authorization": f"Bearer {actor['token']}"}
