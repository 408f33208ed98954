"""
HTTP client for the hosted backend-as-a-service.

One shared handle gives access to three things:
- table queries and mutations (PostgREST-style ``/rest/v1/<table>``)
- the auth session (GoTrue-style ``/auth/v1``)
- serverless function invocation (``/functions/v1/<name>``)
"""

import time
from typing import Any, Dict, Iterable, List, Optional, Tuple
from urllib.parse import urlparse

import requests
from pydantic import BaseModel, Field

from careerhub.exceptions import AuthError, BackendError, FunctionInvokeError, NotFoundError
from careerhub.utils.logger import get_logger


logger = get_logger(__name__)


class QueryResult(BaseModel):
    """Rows (or a single row) returned by a query, plus the exact count when requested."""
    data: Any = None
    count: Optional[int] = None


class AuthSession(BaseModel):
    """An authenticated user session."""
    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    expires_in: Optional[int] = None
    expires_at: Optional[int] = None
    user: Dict[str, Any] = Field(default_factory=dict)

    @property
    def user_id(self) -> Optional[str]:
        return self.user.get("id")

    @property
    def is_expired(self) -> bool:
        if self.expires_at is None:
            return False
        # Treat tokens within 10 seconds of expiry as expired
        return time.time() >= self.expires_at - 10


def _format_value(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _quote_list_item(value: Any) -> str:
    text = _format_value(value)
    if any(ch in text for ch in ',()"'):
        escaped = text.replace('"', '\\"')
        return f'"{escaped}"'
    return text


def _parse_count(content_range: Optional[str]) -> Optional[int]:
    """Extract the total from a ``Content-Range: 0-24/3573`` header."""
    if not content_range or "/" not in content_range:
        return None
    total = content_range.rsplit("/", 1)[1]
    return int(total) if total.isdigit() else None


def _error_message(response: requests.Response) -> Tuple[str, Optional[str], Any]:
    try:
        payload = response.json()
    except ValueError:
        return (response.text or response.reason or f"HTTP {response.status_code}"), None, None

    if isinstance(payload, dict):
        message = (
            payload.get("message")
            or payload.get("error_description")
            or payload.get("msg")
            or payload.get("error")
            or f"HTTP {response.status_code}"
        )
        return str(message), payload.get("code"), payload.get("details") or payload.get("hint")
    return str(payload), None, None


class QueryBuilder:
    """
    Fluent builder for one table request.

    Example:
        client.table("jobs").select("*").eq("user_id", uid).order("created_at", ascending=False).execute()
    """

    def __init__(self, client: "BackendClient", table: str):
        self.client = client
        self.table_name = table
        self._method = "GET"
        self._params: List[Tuple[str, str]] = []
        self._orders: List[str] = []
        self._body: Any = None
        self._headers: Dict[str, str] = {}
        self._single = False
        self._maybe_single = False
        self._monitored = True

    # -- operations --------------------------------------------------------

    def select(self, columns: str = "*", count: Optional[str] = None, head: bool = False) -> "QueryBuilder":
        self._method = "HEAD" if head else "GET"
        self._params.append(("select", columns))
        if count:
            self._headers["Prefer"] = f"count={count}"
        return self

    def insert(self, rows: Any, returning: bool = True) -> "QueryBuilder":
        self._method = "POST"
        self._body = rows
        self._headers["Prefer"] = "return=representation" if returning else "return=minimal"
        return self

    def upsert(self, rows: Any, on_conflict: Optional[str] = None) -> "QueryBuilder":
        self._method = "POST"
        self._body = rows
        self._headers["Prefer"] = "resolution=merge-duplicates,return=representation"
        if on_conflict:
            self._params.append(("on_conflict", on_conflict))
        return self

    def update(self, values: Dict[str, Any]) -> "QueryBuilder":
        self._method = "PATCH"
        self._body = values
        self._headers["Prefer"] = "return=representation"
        return self

    def delete(self) -> "QueryBuilder":
        self._method = "DELETE"
        self._headers["Prefer"] = "return=representation"
        return self

    # -- filters -----------------------------------------------------------

    def _filter(self, column: str, operator: str, value: Any) -> "QueryBuilder":
        self._params.append((column, f"{operator}.{_format_value(value)}"))
        return self

    def eq(self, column: str, value: Any) -> "QueryBuilder":
        if value is None:
            return self._filter(column, "is", None)
        return self._filter(column, "eq", value)

    def neq(self, column: str, value: Any) -> "QueryBuilder":
        return self._filter(column, "neq", value)

    def gt(self, column: str, value: Any) -> "QueryBuilder":
        return self._filter(column, "gt", value)

    def gte(self, column: str, value: Any) -> "QueryBuilder":
        return self._filter(column, "gte", value)

    def lt(self, column: str, value: Any) -> "QueryBuilder":
        return self._filter(column, "lt", value)

    def lte(self, column: str, value: Any) -> "QueryBuilder":
        return self._filter(column, "lte", value)

    def ilike(self, column: str, pattern: str) -> "QueryBuilder":
        return self._filter(column, "ilike", pattern)

    def in_(self, column: str, values: Iterable[Any]) -> "QueryBuilder":
        items = ",".join(_quote_list_item(v) for v in values)
        self._params.append((column, f"in.({items})"))
        return self

    # -- modifiers ---------------------------------------------------------

    def order(self, column: str, ascending: bool = True) -> "QueryBuilder":
        self._orders.append(f"{column}.{'asc' if ascending else 'desc'}")
        return self

    def limit(self, count: int) -> "QueryBuilder":
        self._params.append(("limit", str(count)))
        return self

    def single(self) -> "QueryBuilder":
        """Expect exactly one row; a missing row raises NotFoundError."""
        self._single = True
        self._headers["Accept"] = "application/vnd.pgrst.object+json"
        return self

    def maybe_single(self) -> "QueryBuilder":
        """Expect at most one row; a missing row yields ``data=None``."""
        self._maybe_single = True
        return self

    def without_monitoring(self) -> "QueryBuilder":
        """Skip API metrics for this request (used by the monitor's own writes)."""
        self._monitored = False
        return self

    # -- execution ---------------------------------------------------------

    def build_params(self) -> List[Tuple[str, str]]:
        params = list(self._params)
        if self._orders:
            params.append(("order", ",".join(self._orders)))
        return params

    def execute(self) -> QueryResult:
        response = self.client.request(
            self._method,
            f"/rest/v1/{self.table_name}",
            params=self.build_params(),
            json=self._body,
            headers=self._headers,
            monitored=self._monitored,
        )

        if response.status_code == 406 and self._single:
            raise NotFoundError(f"No row found in {self.table_name}")

        self.client.raise_for_error(response)

        count = _parse_count(response.headers.get("Content-Range"))
        if self._method == "HEAD" or not response.content:
            return QueryResult(data=None if self._single else [], count=count)

        data = response.json()
        if self._maybe_single:
            data = data[0] if isinstance(data, list) and data else None
        return QueryResult(data=data, count=count)


class AuthClient:
    """Session and user accessor."""

    def __init__(self, client: "BackendClient"):
        self.client = client
        self.session: Optional[AuthSession] = None

    def _store_session(self, payload: Dict[str, Any]) -> AuthSession:
        if not payload.get("access_token"):
            raise AuthError("Authentication response did not include an access token", status=401)
        if payload.get("expires_at") is None and payload.get("expires_in"):
            payload = {**payload, "expires_at": int(time.time()) + int(payload["expires_in"])}
        self.session = AuthSession(**{k: v for k, v in payload.items() if k in AuthSession.model_fields})
        return self.session

    def _auth_request(self, method: str, path: str, json: Optional[Dict] = None, params=None) -> Dict[str, Any]:
        response = self.client.request(method, f"/auth/v1/{path}", json=json, params=params)
        if response.status_code in (400, 401, 403, 422):
            message, code, _ = _error_message(response)
            raise AuthError(message, status=response.status_code, code=code)
        self.client.raise_for_error(response)
        return response.json() if response.content else {}

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        payload = self._auth_request(
            "POST", "token", json={"email": email, "password": password}, params={"grant_type": "password"}
        )
        session = self._store_session(payload)
        logger.info(f"🔐 Signed in as {email}")
        return session

    def sign_up(self, email: str, password: str, data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        payload = self._auth_request("POST", "signup", json={"email": email, "password": password, "data": data or {}})
        if payload.get("access_token"):
            self._store_session(payload)
        logger.info(f"🆕 Signed up {email}")
        return payload

    def refresh_session(self) -> AuthSession:
        if not self.session or not self.session.refresh_token:
            raise AuthError("No refresh token available", status=401)
        payload = self._auth_request(
            "POST", "token", json={"refresh_token": self.session.refresh_token},
            params={"grant_type": "refresh_token"},
        )
        return self._store_session(payload)

    def set_session(self, access_token: str, refresh_token: Optional[str] = None,
                    expires_at: Optional[int] = None, user: Optional[Dict[str, Any]] = None) -> AuthSession:
        self.session = AuthSession(
            access_token=access_token, refresh_token=refresh_token, expires_at=expires_at, user=user or {}
        )
        return self.session

    def get_session(self) -> Optional[AuthSession]:
        """Return the current session, refreshing it first if it has expired."""
        if self.session and self.session.is_expired:
            if self.session.refresh_token:
                logger.debug("Access token expired, refreshing session")
                return self.refresh_session()
            self.session = None
        return self.session

    def get_user(self) -> Dict[str, Any]:
        session = self.get_session()
        if not session:
            raise AuthError("Not authenticated", status=401)
        user = self._auth_request("GET", "user")
        session.user = user
        return user

    def sign_out(self) -> None:
        if self.session:
            try:
                self._auth_request("POST", "logout")
            finally:
                self.session = None
        logger.info("👋 Signed out")


class FunctionsClient:
    """Invoke serverless functions by name."""

    def __init__(self, client: "BackendClient"):
        self.client = client

    def invoke(self, name: str, body: Optional[Dict[str, Any]] = None,
               headers: Optional[Dict[str, str]] = None) -> Any:
        try:
            response = self.client.request("POST", f"/functions/v1/{name}", json=body or {}, headers=headers)
        except BackendError as e:
            raise FunctionInvokeError(name, e.message, status=e.status) from e

        if not response.ok:
            message, _, details = _error_message(response)
            raise FunctionInvokeError(name, message, status=response.status_code, details=details)

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            return {"data": response.text}


class BackendClient:
    """
    Shared handle for every query, mutation, auth check and function call.

    The HTTP session and API monitor are shared between copies made with
    ``with_session`` so that each web request can carry its own user token.
    """

    def __init__(
        self,
        url: str,
        anon_key: str,
        timeout: int = 30,
        monitor=None,
        http: Optional[requests.Session] = None,
    ):
        self.url = url.rstrip("/")
        self.anon_key = anon_key
        self.timeout = timeout
        self.monitor = monitor
        self.http = http or requests.Session()
        self.auth = AuthClient(self)
        self.functions = FunctionsClient(self)

        if self.monitor is not None:
            host = urlparse(self.url).netloc
            if host:
                self.monitor.register_service(host, "backend")

    @classmethod
    def from_settings(cls, settings, monitor=None) -> "BackendClient":
        return cls(settings.backend_url, settings.backend_anon_key, timeout=settings.timeout, monitor=monitor)

    def with_session(self, session: Optional[AuthSession]) -> "BackendClient":
        """Copy of this client bound to another user's session."""
        clone = BackendClient.__new__(BackendClient)
        clone.url = self.url
        clone.anon_key = self.anon_key
        clone.timeout = self.timeout
        clone.monitor = self.monitor
        clone.http = self.http
        clone.auth = AuthClient(clone)
        clone.auth.session = session
        clone.functions = FunctionsClient(clone)
        return clone

    def table(self, name: str) -> QueryBuilder:
        return QueryBuilder(self, name)

    def headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        token = self.auth.session.access_token if self.auth.session else self.anon_key
        headers = {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if extra:
            headers.update(extra)
        return headers

    def request(
        self,
        method: str,
        path: str,
        params=None,
        json: Any = None,
        headers: Optional[Dict[str, str]] = None,
        monitored: bool = True,
    ) -> requests.Response:
        url = f"{self.url}{path}"
        start = time.perf_counter()
        try:
            response = self.http.request(
                method, url, params=params, json=json, headers=self.headers(headers), timeout=self.timeout
            )
        except requests.RequestException as e:
            duration = round((time.perf_counter() - start) * 1000)
            if monitored and self.monitor is not None:
                self.monitor.record_metric(
                    endpoint=url, method=method, status_code=0, duration=duration,
                    success=False, error_message=str(e),
                )
            logger.error(f"❌ {method} {path} failed: {e}")
            raise BackendError(f"Request to backend failed: {e}", status=0) from e

        duration = round((time.perf_counter() - start) * 1000)
        if monitored and self.monitor is not None:
            self.monitor.record_metric(
                endpoint=url, method=method, status_code=response.status_code, duration=duration,
                success=response.ok, error_message=None if response.ok else response.reason,
            )
        return response

    @staticmethod
    def raise_for_error(response: requests.Response) -> None:
        if response.ok:
            return
        message, code, details = _error_message(response)
        if response.status_code == 401:
            raise AuthError(message, status=401, code=code, details=details)
        raise BackendError(message, status=response.status_code, code=code, details=details)
