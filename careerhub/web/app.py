"""
Flask application factory.

The shared backend client, API monitor and cache are created once here and
kept in ``app.extensions["careerhub"]``; blueprints bind the client to the
signed-in user per request.
"""

import atexit
from datetime import timedelta
from typing import Optional

from flask import Flask, jsonify, render_template_string, request
from pydantic import ValidationError
from werkzeug.exceptions import HTTPException

from careerhub.backend.cache import AppCache
from careerhub.backend.client import BackendClient
from careerhub.backend.monitor import ApiMonitor
from careerhub.config.settings import Settings, get_settings
from careerhub.exceptions import CareerHubError
from careerhub.utils.logger import get_logger
from careerhub.web.helpers import current_session
from careerhub.web.routes import analytics, assistant, auth, contacts, documents, exports, interviews, jobs
from careerhub.web.routes import monitoring, profile


logger = get_logger(__name__)


SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}

INDEX_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <title>CareerHub</title>
  <style>
    body { font-family: Arial, sans-serif; margin: 40px; color: #111827; }
    code { background: #f3f4f6; padding: 2px 4px; }
    li { margin: 4px 0; }
  </style>
</head>
<body>
  <h1>CareerHub</h1>
  <p>{% if signed_in %}Signed in.{% else %}Not signed in. POST <code>/api/auth/signin</code> to start.{% endif %}</p>
  <h2>API</h2>
  <ul>
  {% for rule in rules %}
    <li><code>{{ rule.methods }} {{ rule.path }}</code></li>
  {% endfor %}
  </ul>
</body>
</html>
"""


def _error_response(message: str, status: int):
    return jsonify({"error": message, "success": False}), status


def register_error_handlers(app: Flask) -> None:

    @app.errorhandler(CareerHubError)
    def handle_app_error(e: CareerHubError):
        status = e.status_code
        if status >= 500:
            logger.error(f"❌ {request.method} {request.path}: {e.message}")
        else:
            logger.warning(f"⚠️ {request.method} {request.path}: {e.message}")
        return _error_response(e.message, status)

    @app.errorhandler(ValidationError)
    def handle_validation_error(e: ValidationError):
        messages = [
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" if err.get("loc") else err["msg"]
            for err in e.errors()
        ]
        logger.warning(f"⚠️ Validation failed on {request.path}: {'; '.join(messages)}")
        return _error_response("; ".join(messages), 400)

    @app.errorhandler(ValueError)
    def handle_value_error(e: ValueError):
        logger.warning(f"⚠️ Bad request on {request.path}: {e}")
        return _error_response(str(e), 400)

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return _error_response(e.description or e.name, e.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception(f"❌ Unhandled error on {request.method} {request.path}: {e}")
        return _error_response("Internal server error", 500)


def create_app(
    settings: Optional[Settings] = None,
    client: Optional[BackendClient] = None,
    monitor: Optional[ApiMonitor] = None,
    cache: Optional[AppCache] = None,
) -> Flask:
    """
    Build the Flask app.

    Args:
        settings: Settings to use (defaults to ``get_settings()``)
        client: Shared backend client (built from settings when omitted)
        monitor: API monitor (built from settings when omitted and monitoring is enabled)
        cache: Tiered cache (built from settings when omitted)

    Returns:
        Configured Flask app
    """
    settings = settings or get_settings()

    if monitor is None and settings.monitor.enabled:
        monitor = ApiMonitor.from_settings(settings)
    if client is None:
        client = BackendClient.from_settings(settings, monitor=monitor)
    if monitor is not None:
        monitor.attach_client(client)
        atexit.register(monitor.force_flush)
    if cache is None:
        cache = AppCache.from_settings(settings)

    app = Flask(__name__)
    app.config.update(
        SECRET_KEY=settings.secret_key,
        DEBUG=settings.debug,
        SESSION_COOKIE_HTTPONLY=True,
        SESSION_COOKIE_SAMESITE="Lax",
        PERMANENT_SESSION_LIFETIME=timedelta(days=7),
    )
    # Keep response keys in the order the handlers build them
    app.json.sort_keys = False
    app.extensions["careerhub"] = {
        "settings": settings,
        "client": client,
        "monitor": monitor,
        "cache": cache,
    }

    for blueprint in (
        auth.bp,
        jobs.bp,
        profile.bp,
        documents.resumes_bp,
        documents.cover_letters_bp,
        interviews.interviews_bp,
        interviews.responses_bp,
        contacts.bp,
        assistant.bp,
        analytics.bp,
        exports.bp,
        monitoring.monitoring_bp,
        monitoring.security_bp,
    ):
        app.register_blueprint(blueprint)

    register_error_handlers(app)

    @app.after_request
    def add_security_headers(response):
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

    @app.route("/")
    def index():
        rules = sorted(
            (
                {"path": rule.rule, "methods": ",".join(sorted(rule.methods - {"HEAD", "OPTIONS"}))}
                for rule in app.url_map.iter_rules()
                if rule.rule.startswith("/api/")
            ),
            key=lambda r: r["path"],
        )
        return render_template_string(INDEX_TEMPLATE, rules=rules, signed_in=current_session() is not None)

    @app.route("/api/health")
    def health():
        return jsonify({"success": True, "status": "ok", "backend": settings.backend_url})

    logger.info(f"🚀 App created (backend: {settings.backend_url})")
    return app
