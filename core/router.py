"""Credential selection - determines admin vs instance token upstream."""

from dataclasses import dataclass
from enum import Enum

ADMIN_HEADER = "admintoken"
INSTANCE_HEADER = "token"


class CredentialClass(str, Enum):
    ADMIN = "admin"
    INSTANCE = "instance"


@dataclass(frozen=True)
class RoutingDecision:
    """Routing decision for a request."""

    upstream_path: str
    header_name: str
    header_value: str

    @property
    def credential_class(self) -> CredentialClass:
        if self.header_name == ADMIN_HEADER:
            return CredentialClass.ADMIN
        return CredentialClass.INSTANCE


class CredentialSelector:
    """Decide which upstream credential a request is sent with.

    Instance-lifecycle routes always use the admin token, even when the caller
    supplied an instance token. Callers without an instance token fall back to
    the admin token.
    """

    def __init__(self, admin_token: str, admin_routes: list[str] | None = None):
        self.admin_token = admin_token
        self.admin_routes = tuple(admin_routes or [])

    def select(self, path: str, instance_token: str | None) -> RoutingDecision:
        """Return the credential header to attach for ``path``."""
        token = (instance_token or "").strip()
        if self._is_admin_route(path) or not token:
            return RoutingDecision(path, ADMIN_HEADER, self.admin_token)
        return RoutingDecision(path, INSTANCE_HEADER, token)

    def _is_admin_route(self, path: str) -> bool:
        return any(path.startswith(prefix) for prefix in self.admin_routes)
