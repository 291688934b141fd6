"""
auth_proxy.proxy.forwarder

Request proxy: build, send and relay one upstream exchange.

Responsibilities:
- Turn the inbound request + credentials into a `ProxyRequestSpec`.
- Send it with a deadline; map transport failures to typed errors.
- Relay status and raw body as a streaming response with filtered headers.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Mapping
from dataclasses import dataclass

import httpx
from starlette.background import BackgroundTask
from starlette.requests import Request
from starlette.responses import StreamingResponse

from auth_proxy.credentials.models import Credentials
from auth_proxy.errors import UpstreamError, UpstreamTimeout
from auth_proxy.observability.logging import get_logger
from auth_proxy.proxy.headers import HeaderPairs, build_caller_headers, build_upstream_headers
from auth_proxy.routing.models import RouteRule

log = get_logger(__name__)

BODYLESS_METHODS = frozenset({"GET", "HEAD"})


@dataclass(frozen=True, slots=True)
class ProxyRequestSpec:
    method: str
    url: str
    headers: HeaderPairs
    body: bytes | None


@dataclass(frozen=True, slots=True)
class ProxyResponseSpec:
    status_code: int
    reason_phrase: str
    headers: HeaderPairs


async def _relay_body(upstream: httpx.Response) -> AsyncIterator[bytes]:
    if upstream.is_stream_consumed:
        # In-process transports may hand back a response whose body is already read.
        yield upstream.content
        return
    async for chunk in upstream.aiter_raw():
        yield chunk


def upstream_hostname(target_url: str) -> str:
    return httpx.URL(target_url).host


def inbound_header_pairs(request: Request) -> HeaderPairs:
    return [(k.decode("latin-1"), v.decode("latin-1")) for k, v in request.headers.raw]


class RequestProxy:
    def __init__(
        self,
        *,
        http: httpx.AsyncClient,
        user_agent: str,
        proxied_by: str,
        timeout: float = 60.0,
    ) -> None:
        self._http = http
        self._user_agent = user_agent
        self._proxied_by = proxied_by
        self._timeout = timeout

    async def build_request(
        self,
        request: Request,
        *,
        target_url: str,
        credentials: Credentials,
        route: RouteRule,
    ) -> ProxyRequestSpec:
        method = request.method.upper()
        headers = build_upstream_headers(
            inbound_header_pairs(request),
            credentials=credentials,
            route=route,
            upstream_host=upstream_hostname(target_url),
            user_agent=self._user_agent,
        )
        # Bodies are never forwarded on GET/HEAD, even if the caller sent one.
        body = None if method in BODYLESS_METHODS else await request.body()
        return ProxyRequestSpec(method=method, url=target_url, headers=headers, body=body)

    async def send(self, spec: ProxyRequestSpec) -> httpx.Response:
        upstream_req = self._http.build_request(
            spec.method,
            spec.url,
            headers=spec.headers,
            content=spec.body,
            timeout=self._timeout,
        )
        try:
            return await self._http.send(upstream_req, stream=True, follow_redirects=False)
        except httpx.TimeoutException as e:
            raise UpstreamTimeout(
                f"Upstream request timed out ({type(e).__name__}) contacting {upstream_req.url.host}"
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamError(f"Upstream request failed ({type(e).__name__}): {e}") from e

    def describe_response(
        self,
        upstream: httpx.Response,
        *,
        cors_headers: Mapping[str, str],
        upstream_host: str,
    ) -> ProxyResponseSpec:
        return ProxyResponseSpec(
            status_code=upstream.status_code,
            reason_phrase=upstream.reason_phrase,
            headers=build_caller_headers(
                upstream.headers.multi_items(),
                cors_headers=cors_headers,
                proxied_by=self._proxied_by,
                upstream_host=upstream_host,
            ),
        )

    async def proxy(
        self,
        request: Request,
        *,
        target_url: str,
        credentials: Credentials,
        route: RouteRule,
        cors_headers: Mapping[str, str],
    ) -> StreamingResponse:
        spec = await self.build_request(
            request, target_url=target_url, credentials=credentials, route=route
        )
        upstream = await self.send(spec)
        host = upstream_hostname(target_url)
        try:
            described = self.describe_response(
                upstream, cors_headers=cors_headers, upstream_host=host
            )
            raw_headers = [
                (k.lower().encode("latin-1"), v.encode("latin-1")) for k, v in described.headers
            ]
        except Exception:
            await upstream.aclose()
            raise
        log.info(
            "upstream_response",
            upstream_host=host,
            method=spec.method,
            status=described.status_code,
        )

        # Raw bytes: content-encoding/content-length stay consistent with the body.
        response = StreamingResponse(
            _relay_body(upstream),
            status_code=described.status_code,
            background=BackgroundTask(upstream.aclose),
        )
        response.raw_headers = raw_headers
        return response


# --- Module Notes -----------------------------------------------------------
# ASGI has no way to set a custom reason phrase; the server derives it from the
# status code, so `ProxyResponseSpec.reason_phrase` is informational only.
