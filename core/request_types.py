"""Shared request data types."""

from dataclasses import dataclass

from core.router import RoutingDecision


@dataclass(frozen=True)
class Principal:
    """Authenticated caller as reported by the identity provider."""

    id: str
    email: str | None = None


@dataclass(frozen=True)
class PreparedRequest:
    """Prepared data for an upstream request."""

    method: str
    decision: RoutingDecision
    headers: dict[str, str]
    body: bytes | None


@dataclass(frozen=True)
class UpstreamResponse:
    """Status and raw body returned by the upstream service."""

    status_code: int
    body: bytes
