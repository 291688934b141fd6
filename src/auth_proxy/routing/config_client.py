"""
auth_proxy.routing.config_client

HTTP client boundary for the remote routing document.

Responsibilities:
- Fetch the routing document once per request (no caching; staleness accepted).
- Degrade every failure (transport, status, JSON, schema) to an empty rule set.
"""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import ValidationError

from auth_proxy.observability.logging import get_logger
from auth_proxy.routing.models import AuthInjectionMode, RouteRule
from auth_proxy.routing.resolver import RoutingMode

log = get_logger(__name__)


def parse_routing_document(
    payload: Any, *, mode: RoutingMode = RoutingMode.domain
) -> list[RouteRule]:
    """
    Accepts either a bare JSON array of rules or `{"routes": [...]}`.
    Invalid entries are skipped; document order is preserved.
    """

    if isinstance(payload, dict):
        payload = payload.get("routes", [])
    if not isinstance(payload, list):
        log.warning("routing_document_not_a_list", kind=type(payload).__name__)
        return []

    rules: list[RouteRule] = []
    for index, entry in enumerate(payload):
        if not isinstance(entry, dict):
            log.warning("routing_rule_skipped", index=index, error="not an object")
            continue
        if mode is RoutingMode.path and not _declares_auth(entry):
            # Path-flavored documents always injected a bearer key.
            entry = {**entry, "authInjectionMode": AuthInjectionMode.bearer}
        try:
            rule = RouteRule.model_validate(entry)
        except ValidationError as e:
            log.warning("routing_rule_skipped", index=index, error=str(e))
            continue
        if mode is RoutingMode.path and not rule.target:
            # Path routing builds the upstream URL from `target`; domain routing does not.
            log.warning("routing_rule_skipped", index=index, error="path rule without target")
            continue
        rules.append(rule)
    return rules


def _declares_auth(entry: dict[str, Any]) -> bool:
    return any(k in entry for k in ("authInjectionMode", "auth_injection_mode", "authType"))


class RoutingConfigClient:
    def __init__(
        self,
        *,
        http: httpx.AsyncClient,
        url: str,
        mode: RoutingMode = RoutingMode.domain,
        timeout: float = 10.0,
    ) -> None:
        self._http = http
        self._url = url
        self._mode = mode
        self._timeout = timeout

    async def fetch_rules(self) -> list[RouteRule]:
        try:
            r = await self._http.get(self._url, timeout=self._timeout)
            r.raise_for_status()
            payload = r.json()
        except (httpx.HTTPError, ValueError) as e:
            # Routing outage degrades to "no rules" (404s) rather than 500s.
            log.warning("routing_config_unavailable", url=self._url, error=str(e))
            return []
        return parse_routing_document(payload, mode=self._mode)
