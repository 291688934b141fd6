"""
auth_proxy.routing.resolver

First-match route resolution.

Responsibilities:
- Domain matching with a configurable policy (loose substring vs. suffix only).
- Path matching with regular expressions.
"""

from __future__ import annotations

import enum
import re
from collections.abc import Sequence

from auth_proxy.observability.logging import get_logger
from auth_proxy.routing.models import RouteRule

log = get_logger(__name__)


class RoutingMode(enum.StrEnum):
    domain = "domain"
    path = "path"


class RouteMatchPolicy(enum.StrEnum):
    # `loose` also accepts any hostname that merely contains the rule's domain,
    # e.g. `api.example.com.attacker.net`. `suffix` stops at exact/subdomain.
    loose = "loose"
    suffix = "suffix"


def hostname_matches(hostname: str, domain: str, *, policy: RouteMatchPolicy) -> bool:
    host = hostname.lower().rstrip(".")
    key = domain.lower().strip()
    if not host or not key:
        return False
    if host == key or host.endswith("." + key):
        return True
    return policy is RouteMatchPolicy.loose and key in host


def path_matches(path: str, pattern: str) -> bool:
    try:
        return re.search(pattern, path) is not None
    except re.error as e:
        log.warning("invalid_route_pattern", pattern=pattern, error=str(e))
        return False


class RouteResolver:
    def __init__(
        self,
        *,
        mode: RoutingMode = RoutingMode.domain,
        policy: RouteMatchPolicy = RouteMatchPolicy.loose,
    ) -> None:
        self.mode = mode
        self.policy = policy

    def resolve(self, rules: Sequence[RouteRule], key: str) -> RouteRule | None:
        """
        Returns the first rule (in document order) matching `key`, a hostname in
        domain mode or a request path in path mode. No longest-match preference.
        """

        for rule in rules:
            if self._matches(rule, key):
                return rule
        return None

    def _matches(self, rule: RouteRule, key: str) -> bool:
        if self.mode is RoutingMode.path:
            return bool(rule.pattern) and path_matches(key, rule.pattern or "")
        return bool(rule.domain) and hostname_matches(key, rule.domain or "", policy=self.policy)
