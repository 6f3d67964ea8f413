from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from app import create_app
from core.config import Config, IdentitySettings, ProxySettings, UpstreamSettings
from core.request_types import Principal, UpstreamResponse

ADMIN_TOKEN = "admin-secret-token"
UPSTREAM_URL = "http://uazapi.test"
IDENTITY_URL = "http://auth.test"


def make_config(admin_token: str = ADMIN_TOKEN, **proxy) -> Config:
    return Config(
        proxy=ProxySettings(**proxy),
        identity=IdentitySettings(base_url=IDENTITY_URL, service_key="service-role-key"),
        upstream=UpstreamSettings(base_url=UPSTREAM_URL, admin_token=admin_token),
    )


@pytest.fixture
def config() -> Config:
    return make_config()


@pytest.fixture
def logger():
    return MagicMock()


@pytest.fixture
def verifier():
    mock = AsyncMock()
    mock.verify = AsyncMock(return_value=Principal(id="user-123", email="alice@example.com"))
    return mock


@pytest.fixture
def upstream():
    mock = AsyncMock()
    mock.forward = AsyncMock(return_value=UpstreamResponse(status_code=200, body=b'{"ok":true}'))
    return mock


@pytest.fixture
def make_client(logger, verifier, upstream):
    """Build a TestClient whose identity provider and upstream are mocks."""
    opened = []

    def _make(config: Config) -> TestClient:
        app = create_app(config, logger)
        client = TestClient(app)
        client.__enter__()
        app.state.identity_verifier = verifier
        app.state.upstream_client = upstream
        opened.append(client)
        return client

    yield _make
    for client in opened:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client, config):
    return make_client(config)
