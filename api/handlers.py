"""FastAPI route handlers."""

import json
from collections.abc import Callable
from typing import Any

from fastapi import Request, Response
from rich.console import Console

from core.config import Config
from core.exceptions import InternalProxyError, MissingAdminConfig, NoAuthHeader, ProxyError
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from core.request_types import PreparedRequest, UpstreamResponse

console = Console(stderr=True)


def _safe_log(log: Callable[..., None], *args: Any) -> None:
    """Run a logger call; its failures never reach the client."""
    try:
        log(*args)
    except Exception as e:
        console.print(f"[red]Logging failed:[/red] {type(e).__name__}: {e}")


async def _authenticate_and_forward(
    request: Request,
    config: Config,
    logger: RequestLogger,
) -> tuple[PreparedRequest, UpstreamResponse]:
    auth_header = request.headers.get("authorization")
    if not auth_header:
        raise NoAuthHeader("Authorization header is required")

    verifier = request.app.state.identity_verifier
    principal = await verifier.verify(auth_header.replace("Bearer ", "", 1))

    if not config.upstream.admin_token:
        raise MissingAdminConfig("UAZAPI_ADMIN_TOKEN is not configured on the server")

    body = await request.body()
    prepared = request.app.state.routing_service.prepare(
        request.method, request.url.path, request.headers, body
    )
    _safe_log(logger.log_request, request.url.path, prepared, principal)

    upstream = await request.app.state.upstream_client.forward(prepared)
    return prepared, upstream


def error_response(
    error: ProxyError,
    config: Config,
    headers: dict[str, str] | None = None,
) -> Response:
    """Render ``error`` as the JSON envelope with CORS headers."""
    payload = {"error": error.code}
    if config.proxy.expose_error_details and error.detail:
        payload["details"] = error.detail
    cors = HeaderBuilder(config.routing.instance_header).build_cors_headers()
    return Response(
        content=json.dumps(payload),
        status_code=error.status_code,
        headers={**(headers or {}), **cors},
        media_type="application/json",
    )


async def handle_proxy(
    request: Request,
    config: Config,
    logger: RequestLogger,
) -> Response:
    """Authenticate the caller and forward the request to Uazapi.

    OPTIONS is answered locally. Every failure becomes a JSON error envelope
    with the CORS headers attached; a successful upstream call is relayed
    with its status and body untouched.
    """
    cors = HeaderBuilder(config.routing.instance_header).build_cors_headers()
    if request.method == "OPTIONS":
        return Response(status_code=200, headers=cors)

    try:
        prepared, upstream = await _authenticate_and_forward(request, config, logger)
    except ProxyError as e:
        _safe_log(logger.log_error, e.code, e.status_code, e.detail or e.code)
        return error_response(e, config)
    except Exception as e:
        error = InternalProxyError(str(e) or type(e).__name__)
        _safe_log(logger.log_error, error.code, error.status_code, f"{type(e).__name__}: {e}")
        return error_response(error, config)

    _safe_log(logger.log_response, prepared, upstream.status_code, upstream.body)
    # Upstream is assumed to speak JSON; its own content-type is not relayed
    return Response(
        content=upstream.body,
        status_code=upstream.status_code,
        headers=cors,
        media_type="application/json",
    )
