"""Header construction for upstream requests and client responses."""

from collections.abc import Mapping

from core.router import RoutingDecision

CORS_ALLOW_HEADERS = "authorization, x-client-info, apikey, content-type"
CORS_ALLOW_METHODS = "GET, POST, DELETE, OPTIONS"


class HeaderBuilder:
    """Build upstream and CORS headers."""

    def __init__(self, instance_header: str = "x-instance-token") -> None:
        self.instance_header = instance_header

    def build_upstream_headers(
        self,
        headers: Mapping[str, str],
        decision: RoutingDecision,
    ) -> dict[str, str]:
        """Attach the selected credential; only content-type is passed through."""
        return {
            "Content-Type": headers.get("content-type", "application/json"),
            decision.header_name: decision.header_value,
        }

    def build_cors_headers(self) -> dict[str, str]:
        return {
            "Access-Control-Allow-Origin": "*",
            "Access-Control-Allow-Headers": f"{CORS_ALLOW_HEADERS}, {self.instance_header}",
            "Access-Control-Allow-Methods": CORS_ALLOW_METHODS,
        }
