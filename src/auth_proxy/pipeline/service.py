"""
auth_proxy.pipeline.service

Pipeline entry point used by the HTTP layer.

Responsibilities:
- Run one request through the compiled graph.
- Map every failure to a JSON response; every response carries CORS headers.
"""

from __future__ import annotations

import httpx
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from auth_proxy.auth.assertions import build_decoder
from auth_proxy.auth.verifier import AuthVerifier
from auth_proxy.cors import CorsPolicy
from auth_proxy.credentials.bindings import SecretBindings
from auth_proxy.credentials.store import CredentialStore
from auth_proxy.db.kv_store import KeyValueStore
from auth_proxy.errors import InternalError, ProxyError
from auth_proxy.observability.logging import get_logger
from auth_proxy.pipeline.graph import build_graph
from auth_proxy.proxy.forwarder import RequestProxy
from auth_proxy.routing.config_client import RoutingConfigClient
from auth_proxy.routing.resolver import RouteMatchPolicy, RouteResolver, RoutingMode
from auth_proxy.settings import Settings

log = get_logger(__name__)


class ProxyPipeline:
    def __init__(
        self,
        *,
        cors: CorsPolicy,
        verifier: AuthVerifier,
        routing: RoutingConfigClient,
        resolver: RouteResolver,
        credentials: CredentialStore,
        proxy: RequestProxy,
    ) -> None:
        self._cors = cors
        self._graph = build_graph(
            verifier=verifier,
            routing=routing,
            resolver=resolver,
            credentials=credentials,
            proxy=proxy,
        )

    async def handle(self, request: Request) -> Response:
        cors_headers = self._cors.headers_for(request.headers.get("origin"))
        try:
            final = await self._graph.ainvoke({"request": request, "cors_headers": cors_headers})
        except ProxyError as e:
            log.info("request_rejected", status=e.status_code, error=e.error)
            return self._error_response(e, cors_headers)
        except Exception as e:
            log.exception("proxy_error", exception_type=type(e).__name__)
            return self._error_response(InternalError(str(e)), cors_headers)

        response = final.get("response")
        if response is None:
            return self._error_response(InternalError("pipeline produced no response"), cors_headers)
        return response

    @staticmethod
    def _error_response(error: ProxyError, cors_headers: dict[str, str]) -> JSONResponse:
        return JSONResponse(error.body(), status_code=error.status_code, headers=cors_headers)


def build_pipeline(
    *,
    settings: Settings,
    http: httpx.AsyncClient,
    store: KeyValueStore | None,
) -> ProxyPipeline:
    mode = RoutingMode(settings.routing_mode)
    return ProxyPipeline(
        cors=CorsPolicy(settings.cors_allowed_origins),
        verifier=AuthVerifier(
            email_suffix=settings.authorized_email_suffix,
            token_table=settings.oauth2_tokens,
            store=store,
            decoder=build_decoder(
                jwks_url=settings.access_jwks_url, audience=settings.access_audience
            ),
            store_timeout=settings.store_timeout,
        ),
        routing=RoutingConfigClient(
            http=http,
            url=settings.routing_config_url,
            mode=mode,
            timeout=settings.config_fetch_timeout,
        ),
        resolver=RouteResolver(mode=mode, policy=RouteMatchPolicy(settings.route_match_policy)),
        credentials=CredentialStore(
            bindings=SecretBindings.from_settings(settings),
            store=store,
            timeout=settings.store_timeout,
        ),
        proxy=RequestProxy(
            http=http,
            user_agent=settings.user_agent,
            proxied_by=settings.proxied_by,
            timeout=settings.upstream_timeout,
        ),
    )


# --- Module Notes -----------------------------------------------------------
# The graph is compiled once per application; per-request data lives only in
# the state passed to `ainvoke`.
