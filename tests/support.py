"""
tests.support

Helpers shared by test modules: assertion minting and a fake network.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any

import httpx
import jwt

ROUTING_URL = "https://config.test/routing.json"
SIGNING_KEY = "test-signing-key-0123456789abcdef0123456789"
AUTHORIZED_EMAIL = "alice@simplesalt.company"


def make_assertion(**claims: Any) -> str:
    return jwt.encode(claims, SIGNING_KEY, algorithm="HS256")


def valid_assertion(email: str = AUTHORIZED_EMAIL, ttl: int = 300) -> str:
    return make_assertion(email=email, aud="proxy-app", exp=int(time.time()) + ttl)


def default_upstream(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"ok": True, "path": request.url.path})


class FakeNetwork:
    """
    Serves the routing document at ROUTING_URL and records every other request
    as an upstream call.
    """

    def __init__(
        self,
        routes: Any = None,
        *,
        upstream: Callable[[httpx.Request], httpx.Response] = default_upstream,
        routing_error: Exception | None = None,
    ) -> None:
        self.routes = routes if routes is not None else []
        self.upstream = upstream
        self.routing_error = routing_error
        self.config_fetches = 0
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        if str(request.url) == ROUTING_URL:
            self.config_fetches += 1
            if self.routing_error is not None:
                raise self.routing_error
            return httpx.Response(200, json=self.routes)
        self.requests.append(request)
        return self.upstream(request)
