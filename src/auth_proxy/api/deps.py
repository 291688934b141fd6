"""
auth_proxy.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Encapsulate app.state access patterns (pipeline, fallback store).
"""

from __future__ import annotations

from fastapi import Request

from auth_proxy.db.kv_store import KeyValueStore
from auth_proxy.pipeline.service import ProxyPipeline


def pipeline_dep(request: Request) -> ProxyPipeline:
    # Built once in `auth_proxy.api.app.create_app`.
    return request.app.state.pipeline  # type: ignore[attr-defined]


def store_dep(request: Request) -> KeyValueStore | None:
    return request.app.state.store  # type: ignore[attr-defined]
