"""
auth_proxy.api.app

FastAPI app factory for the auth proxy.

Responsibilities:
- Build the FastAPI application and register routers/middleware.
- Create and dispose shared infrastructure (HTTP client, fallback store engine).
- Provide a single composition root where cross-cutting concerns live.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine

from auth_proxy import __version__
from auth_proxy.api.routers.health import router as health_router
from auth_proxy.api.routers.proxy import router as proxy_router
from auth_proxy.db.init_db import init_db
from auth_proxy.db.kv_store import KeyValueStore, SqlKeyValueStore
from auth_proxy.db.session import create_engine, create_sessionmaker
from auth_proxy.observability.logging import configure_logging, get_logger
from auth_proxy.observability.middleware import RequestContextMiddleware
from auth_proxy.pipeline.service import build_pipeline
from auth_proxy.settings import Settings

log = get_logger(__name__)


def create_app(
    *,
    settings: Settings,
    http: httpx.AsyncClient | None = None,
    store: KeyValueStore | None = None,
) -> FastAPI:
    """
    `http` and `store` are injectable for tests; when omitted the app owns them
    and closes them on shutdown.
    """

    configure_logging(service_name=settings.service_name, level=settings.log_level)

    engine: AsyncEngine | None = None
    if store is None and settings.kv_database_url:
        engine = create_engine(settings)
        store = SqlKeyValueStore(create_sessionmaker(engine))

    owns_http = http is None
    if http is None:
        http = httpx.AsyncClient(follow_redirects=False)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env, routing_mode=settings.routing_mode)
        if engine is not None and settings.env in ("dev", "test"):
            # Dev/test convenience: create tables automatically. Prod uses Alembic.
            await init_db(engine)
        try:
            yield
        finally:
            if owns_http:
                await http.aclose()
            if engine is not None:
                await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="Auth Proxy",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.pipeline = build_pipeline(settings=settings, http=http, store=store)

    app.add_middleware(RequestContextMiddleware)
    # Health routes first: the proxy route matches every path.
    app.include_router(health_router, tags=["health"])
    app.include_router(proxy_router)

    return app


# --- Module Notes -----------------------------------------------------------
# Docs endpoints are disabled: in path routing mode every path belongs to upstreams.
