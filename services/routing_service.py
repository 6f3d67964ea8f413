"""Routing orchestration for proxy requests."""

from collections.abc import Mapping

from core.config import Config
from core.headers import HeaderBuilder
from core.paths import resolve_path
from core.request_types import PreparedRequest
from core.router import CredentialSelector

BODYLESS_METHODS = frozenset({"GET", "OPTIONS"})


class RoutingService:
    """Prepare inbound requests for forwarding to Uazapi."""

    def __init__(
        self,
        config: Config,
        selector: CredentialSelector,
        header_builder: HeaderBuilder,
    ) -> None:
        self._route_prefix = config.proxy.route_prefix
        self._instance_header = config.routing.instance_header
        self._selector = selector
        self._headers = header_builder

    def prepare(
        self,
        method: str,
        full_path: str,
        headers: Mapping[str, str],
        body: bytes | None,
    ) -> PreparedRequest:
        """Resolve the upstream path, pick credentials and build headers."""
        path = resolve_path(full_path, self._route_prefix)
        decision = self._selector.select(path, headers.get(self._instance_header))
        method = method.upper()
        return PreparedRequest(
            method=method,
            decision=decision,
            headers=self._headers.build_upstream_headers(headers, decision),
            body=None if method in BODYLESS_METHODS else (body or b""),
        )
