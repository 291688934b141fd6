"""
auth_proxy.errors

Error taxonomy for the proxy pipeline.

Responsibilities:
- Give each failure stage a typed exception with an HTTP status and JSON body.
- Keep the mapping to responses in one place (`ProxyError.body`).
"""

from __future__ import annotations

from typing import Any


class ProxyError(Exception):
    """
    Base class for failures recovered at the pipeline boundary.
    """

    status_code: int = 500
    error: str = "Internal proxy error"

    def body(self) -> dict[str, Any]:
        return {"error": self.error}


class AuthFailure(ProxyError):
    status_code = 401
    error = "Authentication required"

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason

    def body(self) -> dict[str, Any]:
        return {"error": self.error, "message": self.reason}


class MissingInput(ProxyError):
    status_code = 400

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.error = message

    def body(self) -> dict[str, Any]:
        return {"error": self.error, "field": self.field}


class RouteNotFound(ProxyError):
    status_code = 404

    def __init__(self, key: str, *, mode: str = "domain") -> None:
        super().__init__(key)
        self.key = key
        self.mode = mode

    def body(self) -> dict[str, Any]:
        if self.mode == "path":
            return {"error": "Route not found", "path": self.key}
        return {"error": "No routing rule found for domain", "domain": self.key}


class CredentialsNotFound(ProxyError):
    status_code = 500
    error = "API credentials not found"

    def __init__(self, secret_name: str | None) -> None:
        super().__init__(secret_name or "")
        self.secret_name = secret_name

    def body(self) -> dict[str, Any]:
        return {"error": self.error, "secretName": self.secret_name}


class UpstreamError(ProxyError):
    """
    Transport failure talking to the upstream. Reported like any other internal
    failure; the message names the cause.
    """

    status_code = 500
    error = "Internal proxy error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def body(self) -> dict[str, Any]:
        return {"error": self.error, "message": self.message}


class UpstreamTimeout(UpstreamError):
    pass


class InternalError(ProxyError):
    status_code = 500
    error = "Internal proxy error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def body(self) -> dict[str, Any]:
        return {"error": self.error, "message": self.message}


# --- Module Notes -----------------------------------------------------------
# Routing-config fetch failures are deliberately absent: they degrade to an empty
# rule set inside `routing.config_client` instead of producing an error response.
