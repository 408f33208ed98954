"""
Tests for the security self-check panels.

Tests:
- Sanitizer self-test and header capture
- Custom HTML/URL checks
- Individual penetration checks driven by the client context
- Category roll-up, summary and report export
"""

import json

import pytest

from careerhub.config.settings import SecuritySettings
from careerhub.services.security_service import (
    OWASP_CATEGORIES,
    ClientContext,
    PenTestResult,
    SecurityService,
    build_categories,
    category_status,
    summarize,
)

from conftest import make_response


ORIGIN = "http://localhost:5001"


@pytest.fixture
def security(client, backend, monitor, tmp_path):
    return SecurityService(
        client,
        SecuritySettings(rate_limit_probe_requests=3),
        monitor=monitor,
        reports_dir=tmp_path / "reports",
        http=backend,
    )


def result(status, severity="high", category="A01"):
    return PenTestResult(category=category, name="t", status=status, severity=severity, description="d")


class TestSanitizerPanel:
    """Tests for the sanitizer self-test."""

    def test_all_checks_pass(self, security):
        report = security.run_sanitizer_tests()
        assert report["total"] == 8
        assert report["passed"] == 8
        assert report["security_headers"] == {}

    def test_captures_security_headers(self, security, backend, monitor):
        backend.head_headers = {"X-Frame-Options": "DENY", "X-Content-Type-Options": "nosniff"}
        report = security.run_sanitizer_tests(ORIGIN)
        assert report["security_headers"] == {"x-frame-options": "DENY", "x-content-type-options": "nosniff"}
        assert monitor.get_metrics()[-1].service_name == "app"

    def test_custom_html(self):
        result = SecurityService.test_custom_html("<script>alert(1)</script>")
        assert result["safe"] is True
        assert result["completely_removed"] is True
        assert result["output"] == "(empty - all content removed)"

    def test_custom_html_harmless(self):
        assert SecurityService.test_custom_html("<b>hi</b>")["safe"] is False

    def test_custom_url(self):
        assert SecurityService.test_custom_url("javascript:alert(1)")["blocked"] is True
        assert SecurityService.test_custom_url("https://example.com")["blocked"] is False

    def test_blank_input(self):
        with pytest.raises(ValueError):
            SecurityService.test_custom_url("  ")


class TestRollUp:
    """Tests for category status and summary helpers."""

    def test_category_status_precedence(self):
        assert category_status([]) == "pending"
        assert category_status([result("pass")]) == "pass"
        assert category_status([result("pass"), result("warning")]) == "warning"
        assert category_status([result("warning"), result("fail")]) == "fail"

    def test_summary_counts_failed_severities(self):
        summary = summarize([
            result("fail", "critical"),
            result("fail", "high"),
            result("warning", "critical"),
            result("pass"),
        ])
        assert summary == {"total": 4, "passed": 1, "warnings": 1, "failed": 2, "critical": 1, "high": 1}

    def test_build_categories_lists_every_category(self):
        categories = build_categories([result("fail", category="CSRF")])
        assert [c["id"] for c in categories] == [c[0] for c in OWASP_CATEGORIES]
        csrf = next(c for c in categories if c["id"] == "CSRF")
        assert csrf["status"] == "fail"
        assert categories[0]["status"] == "pending"


class TestPenetrationChecks:
    """Tests for the individual penetration checks."""

    def test_access_control_with_rls(self, security):
        access = security.test_broken_access_control()[0]
        assert access.status == "pass"

    def test_access_control_with_visible_rows(self, security, backend):
        backend.insert("jobs", {"job_title": "Leaked"})
        access = security.test_broken_access_control()[0]
        assert access.status == "warning"
        anonymous_call = backend.calls_to("/rest/v1/jobs")[-1]
        assert anonymous_call[4]["Authorization"] == "Bearer anon-key"

    def test_access_control_denied(self, security, backend):
        backend.request = lambda *a, **kw: make_response(401, {"message": "permission denied"})
        access = security.test_broken_access_control()[0]
        assert access.status == "pass"
        assert "permission denied" in access.details

    def test_sensitive_storage_keys(self):
        context = ClientContext(storage={"user_password": "x", "sb-project-auth-token": "jwt"})
        storage_check = SecurityService.test_cryptographic_failures(context)[0]
        assert storage_check.status == "fail"
        assert storage_check.details == "Found potentially sensitive keys: user_password"

    @pytest.mark.parametrize("url, status", [
        ("https://app.example.com", "pass"),
        ("http://localhost:5001/security", "pass"),
        ("http://app.example.com", "fail"),
    ])
    def test_https_enforcement(self, url, status):
        https_check = SecurityService.test_cryptographic_failures(ClientContext(current_url=url))[1]
        assert https_check.status == status

    def test_injection_checks_pass(self):
        assert [r.status for r in SecurityService.test_injection()] == ["pass", "pass", "pass"]

    def test_debug_mode_warns(self, client):
        checks = SecurityService(client, debug=True).test_security_misconfiguration(ClientContext())
        assert checks[0].status == "warning"

    def test_api_key_in_page_source(self, security):
        context = ClientContext(page_source="const key = 'sk_live_abc123';")
        assert security.test_security_misconfiguration(context)[2].status == "fail"

    def test_rate_limit_warns_when_unthrottled(self, security, backend):
        basic = security.test_rate_limiting(ORIGIN)[0]
        assert basic.status == "warning"
        assert len(backend.calls_to(ORIGIN)) == 3

    def test_rate_limit_passes_when_throttled(self, security, backend):
        backend.head_status = 429
        assert security.test_rate_limiting(ORIGIN)[0].status == "pass"

    def test_api_authorization_follows_settings(self, client):
        service = SecurityService(client, SecuritySettings(edge_functions_verify_jwt=True))
        assert service.test_api_authorization()[0].status == "pass"

    def test_sensitive_url_params_and_pii(self):
        context = ClientContext(
            current_url="https://app.example.com/?token=abc&page=2",
            storage={"notes": "call ada@example.com"},
        )
        url_check, pii_check, _ = SecurityService.test_sensitive_data_exposure(context)
        assert url_check.status == "fail"
        assert url_check.details == "Sensitive parameters in URL: token"
        assert pii_check.status == "warning"


class TestPenetrationReport:
    """Tests for the full penetration test run."""

    def test_clean_run(self, security):
        report = security.run_penetration_tests(ClientContext(origin=ORIGIN))
        summary = report["summary"]
        assert summary["total"] == 23
        assert summary["failed"] == 0
        assert summary["warnings"] == 2
        assert summary["passed"] == 21
        assert len(report["categories"]) == len(OWASP_CATEGORIES)

    def test_export_report(self, security):
        report = security.run_penetration_tests()
        path = security.export_report(report)
        assert path.name.startswith("pentest-report-")
        assert json.loads(path.read_text())["summary"]["total"] == 23
