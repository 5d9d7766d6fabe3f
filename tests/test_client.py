import json
from datetime import date

import httpx
import pytest

from client.api import ApiClient, ApiClientError
from client.token_store import TokenStore

USER = {"uid": 1, "username": "alice", "email": "a@x.com"}


class Recorder:
    def __init__(self, responses):
        self.responses = responses
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status, body = self.responses[(request.method, request.url.path)]
        return httpx.Response(status, json=body)


@pytest.fixture
def token_store(tmp_path):
    return TokenStore(tmp_path / "auth.json")


def _client(token_store, responses):
    recorder = Recorder(responses)
    api = ApiClient("http://api.test/api", token_store=token_store, transport=httpx.MockTransport(recorder))
    return api, recorder


def test_login_persists_session_and_sends_bearer(token_store):
    api, recorder = _client(
        token_store,
        {
            ("POST", "/api/auth/login"): (200, {"success": True, "user": USER, "token": "tok123"}),
            ("GET", "/api/projects/mine/list"): (200, {"success": True, "projects": []}),
        },
    )

    assert not api.is_authenticated
    assert api.login("alice", "longpass1") == USER
    assert api.is_authenticated
    assert json.loads(recorder.requests[0].content) == {"usernameOrEmail": "alice", "password": "longpass1"}
    assert "Authorization" not in recorder.requests[0].headers

    assert api.my_projects() == []
    assert recorder.requests[1].headers["Authorization"] == "Bearer tok123"

    # A fresh client picks up the stored session.
    assert ApiClient("http://api.test/api", token_store=TokenStore(token_store.path)).user == USER


def test_logout_clears_session(token_store):
    token_store.save("tok123", USER)
    api, _ = _client(token_store, {})
    api.logout()
    assert not api.is_authenticated
    assert not token_store.path.exists()


def test_error_response_raises_with_field_errors(token_store):
    api, _ = _client(
        token_store,
        {
            ("POST", "/api/auth/register"): (
                400,
                {
                    "success": False,
                    "message": "Validation failed.",
                    "errors": [{"field": "email", "message": "A valid email address is required."}],
                },
            )
        },
    )
    with pytest.raises(ApiClientError) as excinfo:
        api.register("alice", "bad", "longpass1")

    assert excinfo.value.status_code == 400
    assert excinfo.value.errors[0]["field"] == "email"
    assert not api.is_authenticated


def test_search_sends_only_given_filters(token_store):
    api, recorder = _client(
        token_store,
        {("GET", "/api/projects/search/query"): (200, {"success": True, "projects": [{"pid": 1}]})},
    )
    assert api.search_projects(title="Alpha", start_date=date(2024, 1, 1)) == [{"pid": 1}]
    assert dict(recorder.requests[0].url.params) == {"title": "Alpha", "startDate": "2024-01-01"}

    api.search_projects()
    assert dict(recorder.requests[1].url.params) == {}


def test_create_project_serialises_dates(token_store):
    token_store.save("tok123", USER)
    project = {"pid": 3, "title": "Site Redesign"}
    api, recorder = _client(
        token_store,
        {("POST", "/api/projects"): (201, {"success": True, "project": project})},
    )
    created = api.create_project(
        title="Site Redesign",
        start_date=date(2024, 1, 1),
        short_description="Revamp marketing site",
        phase="design",
    )
    assert created == project
    assert json.loads(recorder.requests[0].content) == {
        "title": "Site Redesign",
        "start_date": "2024-01-01",
        "end_date": None,
        "short_description": "Revamp marketing site",
        "phase": "design",
    }


def test_delete_project_forbidden(token_store):
    token_store.save("tok123", USER)
    api, _ = _client(
        token_store,
        {("DELETE", "/api/projects/9"): (403, {"success": False, "message": "You are not authorised to delete this project."})},
    )
    with pytest.raises(ApiClientError) as excinfo:
        api.delete_project(9)
    assert excinfo.value.status_code == 403


@pytest.mark.parametrize("status,body", [(200, ["not", "an", "object"]), (502, "Bad Gateway")])
def test_non_object_json_raises_client_error(token_store, status, body):
    api, _ = _client(token_store, {("GET", "/api/projects"): (status, body)})
    with pytest.raises(ApiClientError) as excinfo:
        api.list_projects()
    assert excinfo.value.status_code == status


def test_token_store_treats_corrupt_file_as_signed_out(token_store):
    token_store.path.write_text("{not json", encoding="utf-8")
    assert token_store.load() == (None, None)


def test_token_store_env_override(monkeypatch, tmp_path):
    target = tmp_path / "custom.json"
    monkeypatch.setenv("PROJECT_TRACKER_AUTH_FILE", str(target))
    assert TokenStore().path == target
