"""
Request helpers shared by the blueprints.

The signed-in user's tokens live in the Flask session; every request builds
a client bound to them from the shared one in ``app.extensions``.
"""

import io
from typing import Any, Dict, Optional, Type, TypeVar

from flask import current_app, request, send_file, session

from careerhub.backend.client import AuthSession, BackendClient
from careerhub.exceptions import AuthError
from careerhub.services.base import BaseService


SESSION_KEY = "auth"

ServiceT = TypeVar("ServiceT", bound=BaseService)


def extension() -> Dict[str, Any]:
    return current_app.extensions["careerhub"]


def store_session(auth: AuthSession) -> None:
    session[SESSION_KEY] = auth.model_dump()
    session.permanent = True


def clear_session() -> None:
    session.pop(SESSION_KEY, None)


def current_session() -> Optional[AuthSession]:
    data = session.get(SESSION_KEY)
    return AuthSession(**data) if data else None


def user_client() -> BackendClient:
    """
    Client bound to the signed-in user's session.

    Refreshes an expired access token and writes the new tokens back to the
    Flask session.

    Raises:
        AuthError: If nobody is signed in or the session can't be refreshed
    """
    auth = current_session()
    if auth is None:
        raise AuthError("Not authenticated", status=401)

    client = extension()["client"].with_session(auth)
    try:
        active = client.auth.get_session()
    except AuthError:
        # Refresh token rejected, the stored tokens are dead
        clear_session()
        raise
    if active is None:
        clear_session()
        raise AuthError("Session expired, please sign in again", status=401)
    if active.access_token != auth.access_token:
        store_session(active)
    return client


def service(cls: Type[ServiceT]) -> ServiceT:
    return cls(user_client())


def json_body(*required: str) -> Dict[str, Any]:
    """Request JSON as a dict; raises ValueError naming any missing required fields."""
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        raise ValueError("Request body must be a JSON object")
    missing = [name for name in required if data.get(name) in (None, "")]
    if missing:
        raise ValueError(f"Missing required field(s): {', '.join(missing)}")
    return data


def query_flag(name: str, default: bool = False) -> bool:
    value = request.args.get(name)
    if value is None:
        return default
    return value.lower() in ("1", "true", "yes", "on")


def send_export(content: bytes, filename: str, mimetype: str):
    return send_file(io.BytesIO(content), mimetype=mimetype, as_attachment=True, download_name=filename)
