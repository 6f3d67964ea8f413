"""Bearer token verification against the Supabase auth server."""

import json
from typing import Any

import httpx
from rich.console import Console

from core.config import CONFIG_FILE, Config
from core.exceptions import InvalidSession
from core.request_types import Principal

console = Console()

USER_ENDPOINT = "/auth/v1/user"

# Keys the auth server uses for error text, in order of preference
_ERROR_KEYS = ("msg", "message", "error_description", "error")


class IdentityVerifier:
    """Resolve a bearer token to the user it was issued for."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str,
        service_key: str,
        timeout: float = 10.0,
    ) -> None:
        self._client = client
        self._base_url = base_url
        self._service_key = service_key
        self._timeout = timeout

    async def verify(self, bearer_token: str) -> Principal:
        """Return the principal for ``bearer_token`` or raise InvalidSession.

        Provider rejections and an unreachable provider are reported the same
        way; the reason text is kept for diagnostics.
        """
        try:
            response = await self._client.get(
                f"{self._base_url}{USER_ENDPOINT}",
                headers={
                    "apikey": self._service_key,
                    "Authorization": f"Bearer {bearer_token}",
                },
                timeout=self._timeout,
            )
        except httpx.RequestError as e:
            raise InvalidSession(f"Identity provider unreachable: {e}") from e

        try:
            data = response.json()
        except (json.JSONDecodeError, ValueError):
            data = None

        if response.status_code >= 400:
            raise InvalidSession(_error_reason(data) or f"Identity provider returned {response.status_code}")

        if not isinstance(data, dict) or not data.get("id"):
            raise InvalidSession("User not found")

        return Principal(id=str(data["id"]), email=data.get("email"))


def _error_reason(data: Any) -> str | None:
    if not isinstance(data, dict):
        return None
    for key in _ERROR_KEYS:
        value = data.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def check_identity(config: Config) -> bool:
    """Report whether identity verification and the admin token are configured."""
    ok = True
    if config.identity.base_url and config.identity.service_key:
        console.print(f"[green]Identity provider[/green] {config.identity.base_url}")
    else:
        console.print("[yellow]Identity provider not configured[/yellow]")
        console.print("[dim]Set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY[/dim]")
        ok = False

    if config.upstream.admin_token:
        console.print(f"[green]Admin token[/green] configured for {config.upstream.base_url}")
    else:
        console.print("[yellow]Admin token not configured[/yellow]")
        console.print(f"[dim]Set UAZAPI_ADMIN_TOKEN or upstream.admin_token in {CONFIG_FILE}[/dim]")
        ok = False
    return ok
