"""
HTTP client for the project-tracker API.

Mirrors what the browser frontend does: one configured httpx client, the
stored bearer token attached to every request, and the session persisted on
successful login/registration.
"""

from __future__ import annotations

import os
from datetime import date
from typing import Any

import httpx

from .token_store import TokenStore


def api_base_url() -> str:
    return os.environ.get("PROJECT_TRACKER_API_URL", "http://localhost:8000/api").strip() or "http://localhost:8000/api"


class ApiClientError(RuntimeError):
    def __init__(self, status_code: int, message: str, errors: list[dict[str, str]] | None = None) -> None:
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.errors = errors or []


class ApiClient:
    def __init__(
        self,
        base_url: str | None = None,
        *,
        token_store: TokenStore | None = None,
        timeout_s: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.token_store = token_store or TokenStore()
        self._http = httpx.Client(
            base_url=(base_url or api_base_url()).rstrip("/"),
            timeout=timeout_s,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self._http.close()

    # ---- session ----

    @property
    def user(self) -> dict[str, Any] | None:
        return self.token_store.load()[1]

    @property
    def is_authenticated(self) -> bool:
        token, user = self.token_store.load()
        return bool(token) and user is not None

    def _auth_headers(self) -> dict[str, str]:
        token, _ = self.token_store.load()
        return {"Authorization": f"Bearer {token}"} if token else {}

    def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        resp = self._http.request(method, path, headers=self._auth_headers(), **kwargs)
        try:
            data = resp.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if resp.status_code >= 400 or not data.get("success", False):
            raise ApiClientError(
                resp.status_code,
                str(data.get("message") or resp.reason_phrase or "Request failed."),
                data.get("errors"),
            )
        return data

    def _start_session(self, data: dict[str, Any]) -> dict[str, Any]:
        self.token_store.save(data["token"], data["user"])
        return data["user"]

    def register(self, username: str, email: str, password: str) -> dict[str, Any]:
        data = self._request(
            "POST",
            "/auth/register",
            json={"username": username, "email": email, "password": password},
        )
        return self._start_session(data)

    def login(self, username_or_email: str, password: str) -> dict[str, Any]:
        data = self._request(
            "POST",
            "/auth/login",
            json={"usernameOrEmail": username_or_email, "password": password},
        )
        return self._start_session(data)

    def logout(self) -> None:
        self.token_store.clear()

    # ---- projects ----

    def list_projects(self) -> list[dict[str, Any]]:
        return self._request("GET", "/projects")["projects"]

    def get_project(self, pid: int) -> dict[str, Any]:
        return self._request("GET", f"/projects/{int(pid)}")["project"]

    def search_projects(self, *, title: str | None = None, start_date: date | str | None = None) -> list[dict[str, Any]]:
        params: dict[str, str] = {}
        if title:
            params["title"] = title
        if start_date:
            params["startDate"] = start_date.isoformat() if isinstance(start_date, date) else start_date
        return self._request("GET", "/projects/search/query", params=params)["projects"]

    def my_projects(self) -> list[dict[str, Any]]:
        return self._request("GET", "/projects/mine/list")["projects"]

    def create_project(self, **fields: Any) -> dict[str, Any]:
        return self._request("POST", "/projects", json=_project_body(fields))["project"]

    def update_project(self, pid: int, **fields: Any) -> dict[str, Any]:
        return self._request("PUT", f"/projects/{int(pid)}", json=_project_body(fields))["project"]

    def delete_project(self, pid: int) -> None:
        self._request("DELETE", f"/projects/{int(pid)}")


def _project_body(fields: dict[str, Any]) -> dict[str, Any]:
    body: dict[str, Any] = {}
    for key in ("title", "start_date", "end_date", "short_description", "phase"):
        value = fields.get(key)
        if isinstance(value, date):
            value = value.isoformat()
        body[key] = value
    return body
