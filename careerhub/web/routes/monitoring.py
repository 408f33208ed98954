"""API monitor, cache and security self-check endpoints."""

from flask import Blueprint, jsonify, request

from careerhub.exceptions import CareerHubError
from careerhub.services.security_service import ClientContext, SecurityService
from careerhub.web.helpers import current_session, extension, json_body, query_flag


monitoring_bp = Blueprint("monitoring", __name__, url_prefix="/api/monitoring")
security_bp = Blueprint("security", __name__, url_prefix="/api/security")


def _monitor():
    monitor = extension()["monitor"]
    if monitor is None:
        raise CareerHubError("API monitoring is disabled")
    return monitor


@monitoring_bp.route("/stats", methods=["GET"])
def monitor_stats():
    return jsonify({"success": True, **_monitor().get_stats()})


@monitoring_bp.route("/metrics", methods=["GET"])
def monitor_metrics():
    monitor = _monitor()
    endpoint = request.args.get("endpoint")
    metrics = monitor.get_metrics_by_endpoint(endpoint) if endpoint else monitor.get_metrics()
    return jsonify({"success": True, "metrics": [m.model_dump() for m in metrics]})


@monitoring_bp.route("/errors", methods=["GET"])
def monitor_errors():
    limit = request.args.get("limit", default=20, type=int)
    errors = _monitor().get_recent_errors(limit)
    return jsonify({"success": True, "errors": [m.model_dump() for m in errors]})


@monitoring_bp.route("/clear", methods=["POST"])
def monitor_clear():
    _monitor().clear_metrics()
    return jsonify({"success": True})


@monitoring_bp.route("/flush", methods=["POST"])
def monitor_flush():
    return jsonify({"success": True, "written": _monitor().force_flush()})


@monitoring_bp.route("/cache", methods=["GET"])
def cache_stats():
    return jsonify({"success": True, **extension()["cache"].get_stats()})


@monitoring_bp.route("/cache", methods=["DELETE"])
def cache_invalidate():
    cache = extension()["cache"]
    pattern = request.args.get("pattern")
    if pattern:
        return jsonify({"success": True, "removed": cache.invalidate(pattern)})
    cache.clear()
    return jsonify({"success": True})


# -- security ------------------------------------------------------------------

def _security() -> SecurityService:
    ext = extension()
    settings = ext["settings"]
    client = ext["client"].with_session(current_session())
    return SecurityService(
        client,
        settings.security,
        monitor=ext["monitor"],
        debug=settings.debug,
        reports_dir=settings.reports_dir,
        http=ext["client"].http,
    )


@security_bp.route("/sanitizer-test", methods=["POST"])
def sanitizer_test():
    origin = json_body().get("origin") or request.host_url.rstrip("/")
    return jsonify({"success": True, **_security().run_sanitizer_tests(origin)})


@security_bp.route("/custom-html", methods=["POST"])
def custom_html():
    return jsonify({"success": True, **SecurityService.test_custom_html(json_body("html")["html"])})


@security_bp.route("/custom-url", methods=["POST"])
def custom_url():
    return jsonify({"success": True, **SecurityService.test_custom_url(json_body("url")["url"])})


@security_bp.route("/pentest", methods=["POST"])
def penetration_test():
    context = ClientContext.model_validate(json_body())
    if not context.origin:
        context.origin = request.host_url.rstrip("/")
    security = _security()
    report = security.run_penetration_tests(context)
    if query_flag("save"):
        report["path"] = str(security.export_report(report))
    return jsonify({"success": True, **report})
