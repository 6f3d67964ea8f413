"""Custom exception hierarchy for the Uazapi proxy.

Every error maps to one HTTP status and one stable machine-readable code,
which the handlers render as ``{"error": code, "details": detail}``.
"""


class ProxyError(Exception):
    """Base exception for all proxy errors.

    Attributes:
        detail: Free-text diagnostic for operators
        status_code: HTTP status returned to the client
        code: Stable error code returned to the client
    """

    status_code: int = 500
    code: str = "proxy-error"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.code)
        self.detail = detail


class ConfigurationError(ProxyError):
    """Raised when configuration is missing or invalid."""


class NoAuthHeader(ProxyError):
    """Request carried no Authorization header."""

    status_code = 401
    code = "no-auth-header"


class InvalidSession(ProxyError):
    """Identity provider rejected the bearer token or could not be reached."""

    status_code = 401
    code = "invalid-session"


class MissingAdminConfig(ConfigurationError):
    """The process-wide admin token is not configured."""

    status_code = 500
    code = "missing-admin-token"


class InternalProxyError(ProxyError):
    """Unexpected failure while resolving or forwarding a request."""

    status_code = 500
    code = "internal-proxy-error"


class UpstreamTimeoutError(InternalProxyError):
    """Raised when the upstream request times out."""


class UpstreamConnectionError(InternalProxyError):
    """Raised when unable to connect to the upstream service."""


class RouteError(ProxyError):
    """Request matched no proxy route, e.g. an unsupported method."""

    code = "route-error"

    def __init__(self, status_code: int, detail: str | None = None) -> None:
        super().__init__(detail)
        self.status_code = status_code
