"""Shared pytest fixtures for the test suite.

Fixture overview
----------------
backend           in-memory stand-in for the hosted backend; it answers the
                  table, auth and function HTTP calls the client makes
settings          Settings pointing every data directory at tmp_path
monitor           API monitor with persistence switched off
client            BackendClient wired to ``backend`` (anonymous)
user              a registered user in ``backend``
user_client       ``client`` bound to ``user``'s session
app / web         Flask app and its test client
signed_in_web     test client that has already signed in as ``user``
"""

import json
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import urlparse

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from careerhub.backend.cache import AppCache
from careerhub.backend.client import AuthSession, BackendClient
from careerhub.backend.monitor import ApiMonitor
from careerhub.config.settings import MonitorSettings, Settings
from careerhub.web import create_app


BACKEND_URL = "http://backend.test"
ANON_KEY = "anon-key"
PASSWORD = "s3cret-pass"


def make_response(status: int, payload: Any = None, headers: Optional[Dict[str, str]] = None,
                  url: str = BACKEND_URL) -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response.url = url
    response.reason = {200: "OK", 201: "Created", 204: "No Content", 400: "Bad Request",
                       401: "Unauthorized", 404: "Not Found", 406: "Not Acceptable",
                       500: "Internal Server Error"}.get(status, "")
    response._content = b"" if payload is None else json.dumps(payload, default=str).encode("utf-8")
    response.headers = CaseInsensitiveDict(headers or {})
    if payload is not None:
        response.headers.setdefault("Content-Type", "application/json")
    return response


def _fmt(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _matches(row: Dict[str, Any], column: str, expression: str) -> bool:
    operator, _, raw = expression.partition(".")
    value = row.get(column)
    if operator == "eq":
        return _fmt(value) == raw
    if operator == "neq":
        return _fmt(value) != raw
    if operator == "is":
        return _fmt(value) == raw
    if operator == "in":
        items = [item.strip().strip('"') for item in raw.strip("()").split(",") if item]
        return _fmt(value) in items
    if value is None:
        return False
    if operator == "gt":
        return _fmt(value) > raw
    if operator == "gte":
        return _fmt(value) >= raw
    if operator == "lt":
        return _fmt(value) < raw
    if operator == "lte":
        return _fmt(value) <= raw
    raise AssertionError(f"Unsupported filter operator {operator}")


class FakeBackend:
    """
    Minimal in-memory backend speaking the same HTTP dialect as the real one.

    Passed to BackendClient as its ``http`` session. ``requests`` records every
    call as (method, url, params, json, headers).
    """

    RESERVED_PARAMS = {"select", "order", "limit", "on_conflict"}

    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.users: Dict[str, Dict[str, Any]] = {}
        self.functions: Dict[str, Callable[[Dict[str, Any]], Any]] = {}
        self.requests: List[tuple] = []
        self.head_headers: Dict[str, str] = {}
        self.head_status = 200

    # -- seeding -----------------------------------------------------------

    def add_user(self, email: str, password: str = PASSWORD) -> Dict[str, Any]:
        user = {"id": str(uuid.uuid4()), "email": email}
        self.users[email] = {"password": password, "user": user}
        return user

    def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        now = datetime.now(timezone.utc).isoformat()
        stored = {"id": str(uuid.uuid4()), "created_at": now, "updated_at": now, **row}
        self.tables.setdefault(table, []).append(stored)
        return stored

    def rows(self, table: str) -> List[Dict[str, Any]]:
        return self.tables.get(table, [])

    def calls_to(self, path_fragment: str) -> List[tuple]:
        return [r for r in self.requests if path_fragment in r[1]]

    # -- requests.Session interface ------------------------------------------

    def request(self, method, url, params=None, json=None, headers=None, timeout=None, **kwargs):
        self.requests.append((method, url, params, json, headers or {}))
        parsed = urlparse(url)
        path = parsed.path

        if not url.startswith(BACKEND_URL):
            return make_response(self.head_status, None, dict(self.head_headers), url=url)
        if path.startswith("/rest/v1/"):
            return self._rest(method, path[len("/rest/v1/"):], list(params or []), json, headers or {})
        if path.startswith("/auth/v1/"):
            return self._auth(method, path[len("/auth/v1/"):], dict(params or {}), json or {}, headers or {})
        if path.startswith("/functions/v1/"):
            return self._function(path[len("/functions/v1/"):], json or {})
        return make_response(404, {"message": "Not found"})

    # -- table dialect -------------------------------------------------------

    def _rest(self, method, table, params, body, headers):
        filters = [(k, v) for k, v in params if k not in self.RESERVED_PARAMS]
        options = {k: v for k, v in params if k in self.RESERVED_PARAMS}
        rows = self.tables.setdefault(table, [])
        prefer = headers.get("Prefer", "")

        def selected():
            return [r for r in rows if all(_matches(r, c, e) for c, e in filters)]

        if method in ("GET", "HEAD"):
            result = selected()
            if "order" in options:
                for term in reversed(options["order"].split(",")):
                    column, _, direction = term.rpartition(".")
                    result.sort(key=lambda r: (r.get(column) is None, _fmt(r.get(column))),
                                reverse=direction == "desc")
            total = len(result)
            if "limit" in options:
                result = result[:int(options["limit"])]
            extra = {"Content-Range": f"0-{max(len(result) - 1, 0)}/{total}"} if "count=" in prefer else {}
            if headers.get("Accept") == "application/vnd.pgrst.object+json":
                if len(result) != 1:
                    return make_response(406, {"message": "JSON object requested, multiple (or no) rows returned"})
                return make_response(200, dict(result[0]), extra)
            if method == "HEAD":
                return make_response(200, None, extra)
            return make_response(200, [dict(r) for r in result], extra)

        if method == "POST":
            incoming = body if isinstance(body, list) else [body]
            created = []
            conflict = options.get("on_conflict")
            for row in incoming:
                existing = None
                if conflict:
                    existing = next((r for r in rows if r.get(conflict) == row.get(conflict)), None)
                if existing is not None:
                    existing.update(row)
                    existing["updated_at"] = datetime.now(timezone.utc).isoformat()
                    created.append(dict(existing))
                else:
                    created.append(dict(self.insert(table, row)))
            if "return=minimal" in prefer:
                return make_response(201, None)
            return make_response(201, created)

        if method == "PATCH":
            updated = []
            for row in selected():
                row.update(body or {})
                row["updated_at"] = datetime.now(timezone.utc).isoformat()
                updated.append(dict(row))
            return make_response(200, updated)

        if method == "DELETE":
            doomed = selected()
            self.tables[table] = [r for r in rows if r not in doomed]
            return make_response(200, doomed)

        return make_response(405, {"message": f"Unsupported method {method}"})

    # -- auth dialect --------------------------------------------------------

    def _session_payload(self, user: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "access_token": f"token-{user['id']}",
            "refresh_token": f"refresh-{user['id']}",
            "token_type": "bearer",
            "expires_in": 3600,
            "user": user,
        }

    def _user_for_token(self, headers) -> Optional[Dict[str, Any]]:
        token = headers.get("Authorization", "").replace("Bearer ", "")
        return next((u["user"] for u in self.users.values() if token == f"token-{u['user']['id']}"), None)

    def _auth(self, method, path, params, body, headers):
        if path == "token" and params.get("grant_type") == "password":
            account = self.users.get(body.get("email"))
            if not account or account["password"] != body.get("password"):
                return make_response(400, {"error": "invalid_grant", "error_description": "Invalid login credentials"})
            return make_response(200, self._session_payload(account["user"]))

        if path == "token" and params.get("grant_type") == "refresh_token":
            user = next((u["user"] for u in self.users.values()
                         if body.get("refresh_token") == f"refresh-{u['user']['id']}"), None)
            if user is None:
                return make_response(400, {"error_description": "Invalid refresh token"})
            return make_response(200, self._session_payload(user))

        if path == "signup":
            if body.get("email") in self.users:
                return make_response(422, {"msg": "User already registered"})
            user = self.add_user(body["email"], body["password"])
            return make_response(200, self._session_payload(user))

        if path == "user":
            user = self._user_for_token(headers)
            if user is None:
                return make_response(401, {"message": "Invalid token"})
            return make_response(200, user)

        if path == "logout":
            return make_response(204, None)

        return make_response(404, {"message": "Unknown auth endpoint"})

    # -- functions -----------------------------------------------------------

    def _function(self, name, body):
        handler = self.functions.get(name)
        if handler is None:
            return make_response(404, {"error": f"Function {name} not found"})
        result = handler(body)
        if isinstance(result, requests.Response):
            return result
        return make_response(200, result)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        backend_url=BACKEND_URL,
        backend_anon_key=ANON_KEY,
        secret_key="test-secret",
        exports_dir=tmp_path / "exports",
        reports_dir=tmp_path / "reports",
        cache_dir=tmp_path / "cache",
        monitor=MonitorSettings(persist=False),
    )


@pytest.fixture
def monitor() -> ApiMonitor:
    return ApiMonitor(persist=False)


@pytest.fixture
def client(backend, monitor) -> BackendClient:
    return BackendClient(BACKEND_URL, ANON_KEY, monitor=monitor, http=backend)


@pytest.fixture
def user(backend) -> Dict[str, Any]:
    return backend.add_user("ada@example.com")


@pytest.fixture
def user_client(client, user) -> BackendClient:
    return client.with_session(AuthSession(access_token=f"token-{user['id']}", user=user))


@pytest.fixture
def cache(tmp_path) -> AppCache:
    return AppCache(cache_dir=tmp_path / "cache")


@pytest.fixture
def app(settings, client, monitor, cache):
    flask_app = create_app(settings, client=client, monitor=monitor, cache=cache)
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def web(app):
    return app.test_client()


@pytest.fixture
def signed_in_web(web, user):
    response = web.post("/api/auth/signin", json={"email": user["email"], "password": PASSWORD})
    assert response.status_code == 200
    return web
