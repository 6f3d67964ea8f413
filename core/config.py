"""Configuration models and loading."""

import json
import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

CONFIG_DIR = Path.home() / ".config" / "uazapi-proxy"
CONFIG_FILE = CONFIG_DIR / "config.json"

DEFAULT_ADMIN_ROUTES = [
    "/instance/all",
    "/instance/init",
    "/instance/create",
    "/instance/delete",
    "/instance/restore",
]

# env var -> (section, field)
ENV_OVERRIDES = {
    "UAZAPI_BASE_URL": ("upstream", "base_url"),
    "UAZAPI_ADMIN_TOKEN": ("upstream", "admin_token"),
    "SUPABASE_URL": ("identity", "base_url"),
    "SUPABASE_SERVICE_ROLE_KEY": ("identity", "service_key"),
    "UAZAPI_PROXY_PORT": ("proxy", "port"),
}


class ProxySettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    host: str = "127.0.0.1"
    port: int = 8080
    route_prefix: str = "/uazapi-proxy"
    expose_error_details: bool = True


class IdentitySettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    base_url: str = ""
    service_key: str = ""
    timeout: float = 10.0

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class UpstreamSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    base_url: str = "https://optus.uazapi.com"
    admin_token: str = ""
    timeout: float = 30.0

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("admin_token")
    @classmethod
    def _strip_token(cls, v: str) -> str:
        return v.strip()


class RoutingSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    admin_routes: list[str] = Field(default_factory=lambda: list(DEFAULT_ADMIN_ROUTES))
    instance_header: str = "x-instance-token"


class Config(BaseModel):
    model_config = ConfigDict(frozen=True)

    proxy: ProxySettings = Field(default_factory=ProxySettings)
    identity: IdentitySettings = Field(default_factory=IdentitySettings)
    upstream: UpstreamSettings = Field(default_factory=UpstreamSettings)
    routing: RoutingSettings = Field(default_factory=RoutingSettings)


def apply_env_overrides(data: dict, environ: dict[str, str] | None = None) -> dict:
    """Overlay environment variables on raw config data."""
    environ = os.environ if environ is None else environ
    merged = {section: dict(values) for section, values in data.items() if isinstance(values, dict)}
    for env_name, (section, field) in ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if value:
            merged.setdefault(section, {})[field] = value
    return merged


def load_config(environ: dict[str, str] | None = None) -> Config:
    """Load configuration from JSON file, creating default if needed."""
    if not CONFIG_FILE.exists():
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        CONFIG_FILE.write_text(Config().model_dump_json(indent=2))
        data = {}
    else:
        try:
            data = json.loads(CONFIG_FILE.read_text())
            Config.model_validate(data)
        except (json.JSONDecodeError, ValidationError):
            # Backup corrupted config and recreate default
            backup = CONFIG_FILE.with_suffix(".json.bak")
            CONFIG_FILE.rename(backup)
            CONFIG_FILE.write_text(Config().model_dump_json(indent=2))
            data = {}

    return Config.model_validate(apply_env_overrides(data, environ))
