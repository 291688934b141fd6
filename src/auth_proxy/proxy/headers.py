"""
auth_proxy.proxy.headers

Header rules for upstream-bound requests and caller-bound responses.

Headers are handled as ordered `(name, value)` pairs, never dicts, so repeated
headers (several `Vary` or `Link` entries) keep both their multiplicity and
their order.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from auth_proxy.credentials.models import Credentials
from auth_proxy.routing.models import RouteRule

HeaderPairs = list[tuple[str, str]]

# Caller -> upstream: proxy/transport-internal headers never leave the proxy.
# Framing and hop-by-hop headers describe the inbound connection only; httpx
# recomputes content-length from the body it actually sends.
_REQUEST_DROP_PREFIXES = ("cf-", "x-")
_REQUEST_DROP_NAMES = frozenset(
    {
        "host",
        "content-length",
        "transfer-encoding",
        "connection",
        "keep-alive",
        "te",
        "trailer",
        "upgrade",
    }
)

# Upstream -> caller: no cookies or server fingerprinting from the upstream.
_RESPONSE_DROP_PREFIXES = ("cf-",)
_RESPONSE_DROP_NAMES = frozenset({"server", "set-cookie"})

PROXIED_BY_HEADER = "X-Proxied-By"
ORIGINAL_HOST_HEADER = "X-Original-Host"


def _keep(name: str, *, prefixes: tuple[str, ...], names: frozenset[str]) -> bool:
    lowered = name.lower()
    return not lowered.startswith(prefixes) and lowered not in names


def filter_request_headers(pairs: Iterable[tuple[str, str]]) -> HeaderPairs:
    return [
        (k, v)
        for k, v in pairs
        if _keep(k, prefixes=_REQUEST_DROP_PREFIXES, names=_REQUEST_DROP_NAMES)
    ]


def filter_response_headers(pairs: Iterable[tuple[str, str]]) -> HeaderPairs:
    return [
        (k, v)
        for k, v in pairs
        if _keep(k, prefixes=_RESPONSE_DROP_PREFIXES, names=_RESPONSE_DROP_NAMES)
    ]


def set_header(pairs: HeaderPairs, name: str, value: str) -> HeaderPairs:
    """
    Replace every existing occurrence of `name` (case-insensitive) by one entry,
    appended at the end.
    """

    lowered = name.lower()
    out = [(k, v) for k, v in pairs if k.lower() != lowered]
    out.append((name, value))
    return out


def overlay_headers(pairs: HeaderPairs, overrides: Mapping[str, str]) -> HeaderPairs:
    for name, value in overrides.items():
        pairs = set_header(pairs, name, value)
    return pairs


def build_upstream_headers(
    inbound: Iterable[tuple[str, str]],
    *,
    credentials: Credentials,
    route: RouteRule,
    upstream_host: str,
    user_agent: str,
) -> HeaderPairs:
    """
    Rules applied, in order:
      1. Drop `cf-*`, `x-*`, `host`, framing and hop-by-hop headers from the
         caller's headers.
      2. If the route injects credentials: `Authorization: Bearer <apiKey>`
         (overwriting the caller's) and every extra credential header.
      3. `Host` = upstream hostname, `User-Agent` = proxy identifier.
    """

    pairs = filter_request_headers(inbound)

    if route.auth_injection_mode.injects_credentials:
        if credentials.api_key:
            pairs = set_header(pairs, "Authorization", f"Bearer {credentials.api_key}")
        pairs = overlay_headers(pairs, credentials.extra_headers)

    pairs = set_header(pairs, "Host", upstream_host)
    pairs = set_header(pairs, "User-Agent", user_agent)
    return pairs


def build_caller_headers(
    upstream: Iterable[tuple[str, str]],
    *,
    cors_headers: Mapping[str, str],
    proxied_by: str,
    upstream_host: str,
) -> HeaderPairs:
    pairs = filter_response_headers(upstream)
    pairs = overlay_headers(pairs, cors_headers)
    pairs = set_header(pairs, PROXIED_BY_HEADER, proxied_by)
    pairs = set_header(pairs, ORIGINAL_HOST_HEADER, upstream_host)
    return pairs
