"""
auth_proxy.pipeline.nodes

Pipeline stages. Each node returns a partial state update; a stage that cannot
continue raises a `ProxyError`, which ends the run.
"""

from __future__ import annotations

import re
from urllib.parse import urlsplit

from starlette.responses import Response

from auth_proxy.auth.verifier import AuthVerifier
from auth_proxy.credentials.store import CredentialStore
from auth_proxy.errors import AuthFailure, CredentialsNotFound, MissingInput, RouteNotFound
from auth_proxy.observability.logging import get_logger
from auth_proxy.pipeline.state import ProxyState
from auth_proxy.proxy.forwarder import RequestProxy
from auth_proxy.routing.config_client import RoutingConfigClient
from auth_proxy.routing.models import RouteRule
from auth_proxy.routing.resolver import RouteResolver, RoutingMode

log = get_logger(__name__)

ORIGINAL_URL_HEADER = "x-original-url"


def route_on_method(state: ProxyState) -> str:
    if state["request"].method.upper() == "OPTIONS":
        return "preflight"
    return "authenticate"


async def preflight_node(state: ProxyState) -> ProxyState:
    # Preflight never touches auth or routing: bare 200 with CORS headers only.
    return {"response": Response(status_code=200, headers=state["cors_headers"])}


async def authenticate_node(state: ProxyState, *, verifier: AuthVerifier) -> ProxyState:
    result = await verifier.verify(state["request"].headers)
    if not result.valid:
        log.info("auth_rejected", reason=result.rejection_reason)
        raise AuthFailure(result.rejection_reason or "authentication failed")
    identity = result.identity
    log.info(
        "auth_ok",
        user=identity.user if identity else None,
        auth_method=identity.method if identity else None,
    )
    return {"auth": result}


async def resolve_route_node(
    state: ProxyState,
    *,
    routing: RoutingConfigClient,
    resolver: RouteResolver,
) -> ProxyState:
    request = state["request"]

    if resolver.mode is RoutingMode.domain:
        original_url = request.headers.get(ORIGINAL_URL_HEADER)
        if not original_url:
            raise MissingInput("X-Original-URL", "Missing original URL header")
        hostname = _hostname(original_url)
        if not hostname:
            raise MissingInput("X-Original-URL", "Invalid original URL header")

        rules = await routing.fetch_rules()
        route = resolver.resolve(rules, hostname)
        if route is None:
            raise RouteNotFound(hostname, mode="domain")
        target_url = original_url
    else:
        path = request.url.path
        rules = await routing.fetch_rules()
        route = resolver.resolve(rules, path)
        if route is None:
            raise RouteNotFound(path, mode="path")
        target_url = _path_target(route, path, request.url.query)

    log.info("route_resolved", match_key=route.match_key, secret_name=route.secret_name)
    return {"route": route, "target_url": target_url}


async def load_credentials_node(state: ProxyState, *, credentials: CredentialStore) -> ProxyState:
    route = state["route"]
    creds = await credentials.get_credentials(route)
    if creds is None:
        raise CredentialsNotFound(route.secret_name)
    return {"credentials": creds}


async def forward_node(state: ProxyState, *, proxy: RequestProxy) -> ProxyState:
    response = await proxy.proxy(
        state["request"],
        target_url=state["target_url"],
        credentials=state["credentials"],
        route=state["route"],
        cors_headers=state["cors_headers"],
    )
    return {"response": response}


def _hostname(url: str) -> str:
    try:
        parts = urlsplit(url)
    except ValueError:
        return ""
    if parts.scheme not in ("http", "https"):
        return ""
    return (parts.hostname or "").lower()


def _path_target(route: RouteRule, path: str, query: str) -> str:
    # Strip the first match of the route pattern, forward the remainder.
    remainder = re.sub(route.pattern or "", "", path, count=1)
    base = route.target or ""
    url = base.rstrip("/") + "/" + remainder.lstrip("/") if remainder else base
    return f"{url}?{query}" if query else url
