"""
tests.test_smoke

Minimal smoke tests to validate the service can boot and serve core endpoints.

Responsibilities:
- Ensure the FastAPI app starts, creates the fallback store and reports ready.
"""

from __future__ import annotations

import httpx
import pytest

from auth_proxy.api.app import create_app
from auth_proxy.db.kv_store import KeyValueStoreError
from auth_proxy.settings import Settings


@pytest.mark.asyncio
async def test_health_endpoints(tmp_path) -> None:
    settings = Settings(
        env="test", kv_database_url=f"sqlite+aiosqlite:///{tmp_path / 'kv.db'}"
    )
    app = create_app(settings=settings)

    # httpx ASGITransport does not manage lifespan automatically; do it explicitly.
    async with app.router.lifespan_context(app):
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            r = await client.get("/healthz")
            assert r.status_code == 200
            assert r.json()["status"] == "ok"
            assert r.headers["x-request-id"]

            r = await client.get("/readyz")
            assert r.status_code == 200
            assert r.json() == {"status": "ready"}


class _UnreachableStore:
    async def get(self, key: str) -> str | None:
        raise KeyValueStoreError("no route to store")

    async def put(self, key: str, value: str) -> None:
        raise KeyValueStoreError("no route to store")

    async def ping(self) -> None:
        raise KeyValueStoreError("no route to store")


@pytest.mark.asyncio
async def test_readyz_reports_unreachable_store() -> None:
    app = create_app(
        settings=Settings(env="test", kv_database_url=""),
        http=httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(500))),
        store=_UnreachableStore(),
    )
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        r = await client.get("/readyz")

    assert r.status_code == 503
    assert r.json()["status"] == "unavailable"


@pytest.mark.asyncio
async def test_caller_request_id_is_echoed() -> None:
    app = create_app(settings=Settings(env="test", kv_database_url=""))
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        r = await client.get("/healthz", headers={"X-Request-ID": "req-42"})

    assert r.headers["x-request-id"] == "req-42"


# --- Module Notes -----------------------------------------------------------
# Pipeline behavior is covered end to end in `test_pipeline.py`.
