"""
auth_proxy.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hide secrets from repr/logging (token table, API key blob).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CORS_ORIGINS = [
    "https://apps.simplesalt.company",
    "https://studio.plasmic.app",
    "https://host.plasmicdev.com",
    "http://localhost:3000",
    "http://localhost:54423",
    "http://localhost:55753",
]


class Settings(BaseSettings):
    """
    Every knob is read from `AUTHPROXY_*` environment variables.
    Mapping/list values (token table, API keys, origins) are JSON encoded.
    """

    model_config = SettingsConfigDict(env_prefix="AUTHPROXY_", case_sensitive=False)

    # Environment controls toggle behavior like auto-init DB tables.
    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "auth-proxy"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Routing
    routing_mode: Literal["domain", "path"] = "domain"
    routing_config_url: str = "https://apps.simplesalt.company/routing.json"
    route_match_policy: Literal["loose", "suffix"] = "loose"

    # Auth
    authorized_email_suffix: str = "@simplesalt.company"
    # Setting a JWKS url switches the signed-assertion path to real signature checks.
    access_jwks_url: str | None = None
    access_audience: str | None = None
    oauth2_tokens: dict[str, Any] | None = Field(default=None, repr=False)

    # Credentials
    api_keys: dict[str, str] = Field(default_factory=dict, repr=False)
    secret_env_prefix: str = "AUTHPROXY_SECRET_"

    # Fallback key/value store; empty string disables it.
    kv_database_url: str = "sqlite+aiosqlite:///./auth_proxy.db"

    # CORS; the first origin is the primary (fallback) origin.
    cors_allowed_origins: list[str] = Field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))

    # Outbound identification
    user_agent: str = "SimpleSalt-API-Proxy/1.0"
    proxied_by: str = "SimpleSalt-Auth-Proxy"

    # Deadlines (seconds) for every outbound call.
    config_fetch_timeout: float = 10.0
    upstream_timeout: float = 60.0
    store_timeout: float = 5.0


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Secret values themselves are not settings fields: they are resolved per request
# through `credentials.bindings.SecretBindings` so rotation needs no restart.
