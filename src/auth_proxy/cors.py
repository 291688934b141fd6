"""
auth_proxy.cors

CORS policy applied to every response the proxy produces.

Responsibilities:
- Echo an allow-listed `Origin`, otherwise fall back to the primary admin origin.
- Emit the fixed method/header/max-age/credentials policy.
"""

from __future__ import annotations

from collections.abc import Sequence

ALLOWED_METHODS = "GET, POST, PUT, DELETE, OPTIONS, PATCH"
ALLOWED_HEADERS = (
    "Content-Type, Authorization, X-Original-URL, X-Auth-Type, X-Secret-Name, "
    "CF-Access-Jwt-Assertion"
)
MAX_AGE_SECONDS = 86400


class CorsPolicy:
    """
    Never answers with a wildcard: unknown origins get the primary origin,
    which the browser will then refuse for the foreign page.
    """

    def __init__(self, allowed_origins: Sequence[str]) -> None:
        if not allowed_origins:
            raise ValueError("CORS allow-list must contain at least the primary origin")
        self._allowed = tuple(allowed_origins)
        self._primary = self._allowed[0]

    @property
    def primary_origin(self) -> str:
        return self._primary

    def allow_origin(self, origin: str | None) -> str:
        if origin and origin in self._allowed:
            return origin
        return self._primary

    def headers_for(self, origin: str | None) -> dict[str, str]:
        return {
            "Access-Control-Allow-Origin": self.allow_origin(origin),
            "Access-Control-Allow-Methods": ALLOWED_METHODS,
            "Access-Control-Allow-Headers": ALLOWED_HEADERS,
            "Access-Control-Max-Age": str(MAX_AGE_SECONDS),
            "Access-Control-Allow-Credentials": "true",
        }
