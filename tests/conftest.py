from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Any

import pytest
from fastapi.testclient import TestClient

from auth import repository as auth_repository
from core.config import Settings
from main import create_app
from projects import repository as project_repository

TEST_SECRET = "test-secret-for-unit-tests"


class FakeStore:
    """In-memory stand-in for the two repository modules."""

    def __init__(self) -> None:
        self.users: list[dict[str, Any]] = []
        self.projects: list[dict[str, Any]] = []
        self._next_uid = 1
        self._next_pid = 1
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def _tick(self) -> datetime:
        self._clock += timedelta(seconds=1)
        return self._clock

    def _user(self, uid: int) -> dict[str, Any]:
        return next(u for u in self.users if u["uid"] == uid)

    def _project(self, pid: int) -> dict[str, Any] | None:
        if not -(2**31) <= pid < 2**31:
            # asyncpg refuses to encode these for an int4 column.
            raise OverflowError(f"value out of int32 range: {pid}")
        return next((p for p in self.projects if p["pid"] == pid), None)

    # ---- auth repository ----

    async def find_user_by_username_or_email(self, *, username: str, email: str) -> dict | None:
        for user in self.users:
            if user["username"].lower() == username.lower() or user["email"].lower() == email.lower():
                return {"uid": user["uid"]}
        return None

    async def create_user(self, *, username: str, email: str, password_hash: str) -> dict:
        user = {
            "uid": self._next_uid,
            "username": username,
            "email": email,
            "password_hash": password_hash,
            "created_at": self._tick(),
        }
        self._next_uid += 1
        self.users.append(user)
        return {k: v for k, v in user.items() if k != "password_hash"}

    async def get_user_for_login(self, username_or_email: str) -> dict | None:
        for user in self.users:
            if username_or_email.lower() in (user["username"].lower(), user["email"].lower()):
                return dict(user)
        return None

    # ---- project repository ----

    @staticmethod
    def _public(row: dict[str, Any]) -> dict[str, Any]:
        keys = ("pid", "title", "start_date", "end_date", "short_description", "phase", "created_at")
        return {k: row[k] for k in keys}

    async def list_projects(self) -> list[dict]:
        rows = sorted(self.projects, key=lambda p: (p["created_at"], p["pid"]), reverse=True)
        return [
            {
                "pid": p["pid"],
                "title": p["title"],
                "start_date": p["start_date"],
                "short_description": p["short_description"],
                "phase": p["phase"],
                "created_at": p["created_at"],
                "username": self._user(p["uid"])["username"],
            }
            for p in rows
        ]

    async def get_project_with_owner(self, pid: int) -> dict | None:
        row = self._project(pid)
        if row is None:
            return None
        owner = self._user(row["uid"])
        return {**self._public(row), "username": owner["username"], "owner_email": owner["email"]}

    async def search_projects(self, *, title: str | None = None, start_date: date | None = None) -> list[dict]:
        rows = self.projects
        if title:
            rows = [p for p in rows if title.lower() in p["title"].lower()]
        if start_date is not None:
            rows = [p for p in rows if p["start_date"] == start_date]
        rows = sorted(rows, key=lambda p: (p["start_date"], p["pid"]), reverse=True)
        return [
            {
                "pid": p["pid"],
                "title": p["title"],
                "start_date": p["start_date"],
                "short_description": p["short_description"],
                "phase": p["phase"],
                "username": self._user(p["uid"])["username"],
            }
            for p in rows
        ]

    async def list_projects_for_owner(self, uid: int) -> list[dict]:
        rows = [p for p in self.projects if p["uid"] == uid]
        rows.sort(key=lambda p: (p["created_at"], p["pid"]), reverse=True)
        return [self._public(p) for p in rows]

    async def get_project_owner(self, pid: int) -> dict | None:
        row = self._project(pid)
        return None if row is None else {"pid": row["pid"], "uid": row["uid"]}

    async def create_project(self, *, uid: int, **fields: Any) -> dict:
        row = {"pid": self._next_pid, "uid": uid, "created_at": self._tick(), **fields}
        self._next_pid += 1
        self.projects.append(row)
        return self._public(row)

    async def update_project(self, pid: int, **fields: Any) -> dict | None:
        row = self._project(pid)
        if row is None:
            return None
        row.update(fields)
        return self._public(row)

    async def delete_project(self, pid: int) -> bool:
        row = self._project(pid)
        if row is None:
            return False
        self.projects.remove(row)
        return True


@pytest.fixture
def store(monkeypatch) -> FakeStore:
    fake = FakeStore()
    for name in ("find_user_by_username_or_email", "create_user", "get_user_for_login"):
        monkeypatch.setattr(auth_repository, name, getattr(fake, name))
    for name in (
        "list_projects",
        "get_project_with_owner",
        "search_projects",
        "list_projects_for_owner",
        "get_project_owner",
        "create_project",
        "update_project",
        "delete_project",
    ):
        monkeypatch.setattr(project_repository, name, getattr(fake, name))
    return fake


@pytest.fixture
def settings() -> Settings:
    return Settings(jwt_secret=TEST_SECRET, auth_rate_limit_max=1000)


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app, store) -> TestClient:
    # Not used as a context manager, so the lifespan (DB pool) never starts.
    return TestClient(app, raise_server_exceptions=False)


def register(client: TestClient, username: str, email: str, password: str = "longpass1") -> dict:
    resp = client.post(
        "/api/auth/register",
        json={"username": username, "email": email, "password": password},
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def alice(client) -> dict:
    return register(client, "alice", "a@x.com")


@pytest.fixture
def bob(client) -> dict:
    return register(client, "bob", "b@x.com")
