import json

import pytest

import ui.log_utils as log_utils
from core.config import Config
from core.request_types import Principal, PreparedRequest
from core.router import CredentialClass, RoutingDecision
from ui.dashboard import Dashboard
from ui.log_utils import body_preview, mask, redact_headers, write_request_log


@pytest.fixture
def log_root(tmp_path, monkeypatch):
    monkeypatch.setattr(log_utils, "LOG_ROOT", tmp_path)
    monkeypatch.setattr(log_utils, "CLI_LOG_FILE", tmp_path / "proxy.log")
    return tmp_path


class TestRedaction:
    def test_mask_keeps_short_prefix_only(self):
        assert mask("abcdefghijklmnop") == "abcde...mnop"

    def test_short_values_fully_masked(self):
        assert mask("secret") == "***"

    def test_token_headers_redacted(self):
        redacted = redact_headers(
            {"admintoken": "admin-secret-value", "token": "instance-secret", "Content-Type": "application/json"}
        )
        assert redacted["admintoken"] == "admin...alue"
        assert redacted["token"] == "insta...cret"
        assert redacted["Content-Type"] == "application/json"


class TestBodyPreview:
    def test_long_body_truncated(self):
        assert body_preview(b"x" * 150) == "x" * 100 + "..."

    def test_short_body_unchanged(self):
        assert body_preview(b'{"ok":true}') == '{"ok":true}'


class TestRequestLog:
    def test_request_log_never_contains_raw_token(self, tmp_path):
        path = write_request_log(
            "POST",
            "/uazapi-proxy/send/text",
            "/send/text",
            {"token": "instance-secret-value"},
            credential="instance",
            user="alice@example.com",
            log_root=tmp_path,
        )

        payload = json.loads(path.read_text())
        assert payload["upstream_path"] == "/send/text"
        assert "instance-secret-value" not in path.read_text()


class TestDashboard:
    def _prepared(self, header: str, path: str = "/send/text") -> PreparedRequest:
        decision = RoutingDecision(path, header, "secret-value-123")
        return PreparedRequest("POST", decision, {header: "secret-value-123"}, b"{}")

    def test_counts_requests_per_credential(self, log_root):
        dashboard = Dashboard(Config())
        principal = Principal(id="user-1", email="alice@example.com")

        dashboard.log_request("/uazapi-proxy/send/text", self._prepared("token"), principal)
        dashboard.log_request("/uazapi-proxy/instance/all", self._prepared("admintoken", "/instance/all"), principal)
        dashboard.log_request("/uazapi-proxy/instance/init", self._prepared("admintoken", "/instance/init"), principal)

        assert dashboard.request_count == {CredentialClass.ADMIN: 2, CredentialClass.INSTANCE: 1}
        assert "secret-value-123" not in (log_root / "proxy.log").read_text()

    def test_errors_kept_most_recent_first(self, log_root):
        dashboard = Dashboard(Config())
        for i in range(5):
            dashboard.log_error("invalid-session", 401, f"failure {i}")

        assert dashboard.errors == [
            "invalid-session 401: failure 4",
            "invalid-session 401: failure 3",
            "invalid-session 401: failure 2",
        ]

    def test_response_logged_with_preview(self, log_root):
        dashboard = Dashboard(Config())
        prepared = self._prepared("token")
        dashboard.log_request("/uazapi-proxy/send/text", prepared, Principal(id="user-1"))
        dashboard.log_response(prepared, 201, b'{"ok":true}')

        log = (log_root / "proxy.log").read_text()
        assert "UPSTREAM" in log
        assert '{"ok":true}' in log
        assert "status=201" in log

    def test_status_recorded_on_matching_request(self, log_root):
        dashboard = Dashboard(Config())
        principal = Principal(id="user-1")
        first = self._prepared("token", "/instance/status")
        second = self._prepared("token", "/instance/status")
        dashboard.log_request("/uazapi-proxy/instance/status", first, principal)
        dashboard.log_request("/uazapi-proxy/instance/status", second, principal)

        dashboard.log_response(first, 404, b"{}")

        newest, oldest = dashboard.requests
        assert newest.prepared is second
        assert newest.status is None
        assert oldest.status == 404
