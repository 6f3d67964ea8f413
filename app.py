"""FastAPI application factory."""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.handlers import error_response, handle_proxy
from auth import IdentityVerifier
from core.config import Config
from core.exceptions import RouteError
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from core.router import CredentialSelector
from services.routing_service import RoutingService
from services.upstream import UpstreamClient

PROXY_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def create_app(
    config: Config,
    logger: RequestLogger,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    ``transport`` replaces the network layer of the outbound httpx clients.
    """
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        limits = httpx.Limits(max_connections=100, max_keepalive_connections=20)
        uazapi_client = httpx.AsyncClient(
            timeout=config.upstream.timeout,
            limits=limits,
            transport=transport,
        )
        identity_client = httpx.AsyncClient(
            timeout=config.identity.timeout,
            limits=limits,
            transport=transport,
        )
        app.state.upstream_client = UpstreamClient(
            uazapi_client,
            config.upstream.base_url,
            timeout=config.upstream.timeout,
        )
        app.state.identity_verifier = IdentityVerifier(
            identity_client,
            config.identity.base_url,
            config.identity.service_key,
            timeout=config.identity.timeout,
        )
        app.state.routing_service = RoutingService(
            config=config,
            selector=CredentialSelector(
                config.upstream.admin_token,
                config.routing.admin_routes,
            ),
            header_builder=HeaderBuilder(config.routing.instance_header),
        )
        try:
            yield
        finally:
            await uazapi_client.aclose()
            await identity_client.aclose()

    app = FastAPI(title="Uazapi Proxy", version="0.1.0", lifespan=lifespan)

    @app.exception_handler(StarletteHTTPException)
    async def route_error(request: Request, exc: StarletteHTTPException):
        return error_response(RouteError(exc.status_code, str(exc.detail)), config, exc.headers)

    @app.api_route("/{full_path:path}", methods=PROXY_METHODS)
    async def proxy(request: Request):
        return await handle_proxy(request, config, logger)

    return app
