"""
auth_proxy.routing.models

Routing document schema.

Responsibilities:
- Define `RouteRule` and the credential injection modes.
- Accept the legacy numeric `authType` alongside `authInjectionMode`.
"""

from __future__ import annotations

import enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class AuthInjectionMode(enum.StrEnum):
    none = "none"
    bearer = "bearer"
    bearer_headers = "bearer+headers"

    @property
    def injects_credentials(self) -> bool:
        return self is not AuthInjectionMode.none


# Numeric auth types used by older routing documents.
_LEGACY_AUTH_TYPES: dict[int, AuthInjectionMode] = {
    2: AuthInjectionMode.bearer,
    3: AuthInjectionMode.bearer_headers,
}


class RouteRule(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    domain: str | None = None
    pattern: str | None = None
    target: str | None = None
    secret_name: str | None = Field(default=None, alias="secretName")
    auth_injection_mode: AuthInjectionMode = Field(
        default=AuthInjectionMode.none, alias="authInjectionMode"
    )

    @model_validator(mode="before")
    @classmethod
    def _legacy_auth_type(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        if "authInjectionMode" in data or "auth_injection_mode" in data:
            return data
        auth_type = data.get("authType")
        if auth_type is None:
            return data
        try:
            mode = _LEGACY_AUTH_TYPES.get(int(auth_type), AuthInjectionMode.none)
        except (TypeError, ValueError):
            mode = AuthInjectionMode.none
        return {**data, "authInjectionMode": mode}

    @model_validator(mode="after")
    def _require_match_key(self) -> RouteRule:
        if not self.domain and not self.pattern:
            raise ValueError("route rule needs a domain or a pattern")
        return self

    @property
    def match_key(self) -> str:
        return self.domain or self.pattern or ""
