from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

from langgraph.graph import END, StateGraph

from auth_proxy.auth.verifier import AuthVerifier
from auth_proxy.credentials.store import CredentialStore
from auth_proxy.pipeline.nodes import (
    authenticate_node,
    forward_node,
    load_credentials_node,
    preflight_node,
    resolve_route_node,
    route_on_method,
)
from auth_proxy.pipeline.state import ProxyState
from auth_proxy.proxy.forwarder import RequestProxy
from auth_proxy.routing.config_client import RoutingConfigClient
from auth_proxy.routing.resolver import RouteResolver


def build_graph(
    *,
    verifier: AuthVerifier,
    routing: RoutingConfigClient,
    resolver: RouteResolver,
    credentials: CredentialStore,
    proxy: RequestProxy,
):
    """
    Returns a compiled LangGraph runnable:

        START -(OPTIONS)-> preflight -> END
        START -> authenticate -> resolve_route -> load_credentials -> forward -> END

    Rejections are raised from the nodes, so the only branch is the preflight one.
    """

    graph = StateGraph(ProxyState)

    graph.add_node("preflight", preflight_node)
    graph.add_node("authenticate", _bind(authenticate_node, verifier=verifier))
    graph.add_node(
        "resolve_route", _bind(resolve_route_node, routing=routing, resolver=resolver)
    )
    graph.add_node("load_credentials", _bind(load_credentials_node, credentials=credentials))
    graph.add_node("forward", _bind(forward_node, proxy=proxy))

    graph.set_conditional_entry_point(
        route_on_method,
        {"preflight": "preflight", "authenticate": "authenticate"},
    )
    graph.add_edge("preflight", END)
    graph.add_edge("authenticate", "resolve_route")
    graph.add_edge("resolve_route", "load_credentials")
    graph.add_edge("load_credentials", "forward")
    graph.add_edge("forward", END)

    return graph.compile()


def _bind(
    fn: Callable[..., Awaitable[ProxyState]],
    **deps: Any,
) -> Callable[[ProxyState], Awaitable[ProxyState]]:
    async def _wrapped(state: ProxyState) -> ProxyState:
        return await fn(state, **deps)

    return _wrapped
