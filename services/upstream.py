"""HTTP forwarding to the Uazapi upstream."""

import httpx

from core.exceptions import UpstreamConnectionError, UpstreamTimeoutError
from core.request_types import PreparedRequest, UpstreamResponse


class UpstreamClient:
    """Forward prepared requests and return the raw upstream response."""

    def __init__(self, client: httpx.AsyncClient, base_url: str, timeout: float = 30.0) -> None:
        self._client = client
        self._base_url = base_url
        self._timeout = timeout

    def url_for(self, prepared: PreparedRequest) -> str:
        return f"{self._base_url}{prepared.decision.upstream_path}"

    async def forward(self, prepared: PreparedRequest) -> UpstreamResponse:
        """Send ``prepared`` upstream; status and body come back untouched."""
        try:
            response = await self._client.request(
                prepared.method,
                self.url_for(prepared),
                headers=prepared.headers,
                content=prepared.body,
                timeout=self._timeout,
            )
        except httpx.TimeoutException as e:
            raise UpstreamTimeoutError(f"Upstream timeout: {e}") from e
        except httpx.RequestError as e:
            raise UpstreamConnectionError(f"Upstream connection error: {e}") from e

        return UpstreamResponse(status_code=response.status_code, body=response.content)
