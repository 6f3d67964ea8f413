import httpx
import pytest

from auth import IdentityVerifier
from core.exceptions import InvalidSession

BASE_URL = "http://auth.test"


def _verifier(handler) -> tuple[IdentityVerifier, httpx.AsyncClient]:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return IdentityVerifier(http, BASE_URL, "service-role-key"), http


class TestVerify:
    async def test_valid_token_returns_principal(self):
        seen = {}

        def handler(request):
            seen["request"] = request
            return httpx.Response(200, json={"id": "user-1", "email": "alice@example.com"})

        verifier, http = _verifier(handler)
        async with http:
            principal = await verifier.verify("jwt-token")

        assert principal.id == "user-1"
        assert principal.email == "alice@example.com"
        request = seen["request"]
        assert request.url.path == "/auth/v1/user"
        assert request.headers["authorization"] == "Bearer jwt-token"
        assert request.headers["apikey"] == "service-role-key"

    async def test_rejected_token_carries_provider_reason(self):
        def handler(request):
            return httpx.Response(401, json={"code": 401, "msg": "invalid JWT: token is expired"})

        verifier, http = _verifier(handler)
        async with http:
            with pytest.raises(InvalidSession) as exc_info:
                await verifier.verify("expired")

        assert exc_info.value.detail == "invalid JWT: token is expired"
        assert exc_info.value.status_code == 401

    async def test_non_json_error_reports_status(self):
        def handler(request):
            return httpx.Response(502, content=b"Bad Gateway")

        verifier, http = _verifier(handler)
        async with http:
            with pytest.raises(InvalidSession) as exc_info:
                await verifier.verify("jwt-token")

        assert "502" in exc_info.value.detail

    async def test_absent_user_is_rejected(self):
        def handler(request):
            return httpx.Response(200, json={})

        verifier, http = _verifier(handler)
        async with http:
            with pytest.raises(InvalidSession) as exc_info:
                await verifier.verify("jwt-token")

        assert exc_info.value.detail == "User not found"

    async def test_unreachable_provider_is_invalid_session(self):
        def handler(request):
            raise httpx.ConnectError("name resolution failed", request=request)

        verifier, http = _verifier(handler)
        async with http:
            with pytest.raises(InvalidSession) as exc_info:
                await verifier.verify("jwt-token")

        assert exc_info.value.code == "invalid-session"
        assert "unreachable" in exc_info.value.detail
