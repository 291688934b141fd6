"""
auth_proxy.api.routers.health

Health and readiness endpoints.

Responsibilities:
- Provide liveness probe (`/healthz`).
- Provide readiness probe (`/readyz`) with fallback-store connectivity validation.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from starlette.status import HTTP_503_SERVICE_UNAVAILABLE

from auth_proxy.api.deps import store_dep
from auth_proxy.db.kv_store import KeyValueStore, KeyValueStoreError

router = APIRouter()


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz", response_model=None)
async def readyz(store: KeyValueStore | None = Depends(store_dep)) -> dict[str, str] | JSONResponse:
    if store is None:
        return {"status": "ready", "store": "disabled"}
    try:
        await store.ping()
    except KeyValueStoreError as e:
        return JSONResponse(
            {"status": "unavailable", "error": str(e)},
            status_code=HTTP_503_SERVICE_UNAVAILABLE,
        )
    return {"status": "ready"}
