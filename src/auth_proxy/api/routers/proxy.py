"""
auth_proxy.api.routers.proxy

Catch-all proxy route.

Responsibilities:
- Accept every proxied method on every path not claimed by the health router.
- Hand the request to the pipeline unchanged.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from starlette.responses import Response

from auth_proxy.api.deps import pipeline_dep
from auth_proxy.pipeline.service import ProxyPipeline

router = APIRouter(tags=["proxy"])

PROXIED_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


@router.api_route("/{path:path}", methods=PROXIED_METHODS, include_in_schema=False)
async def proxy_request(
    request: Request,
    path: str,
    pipeline: ProxyPipeline = Depends(pipeline_dep),
) -> Response:
    # `path` only matters in path routing mode; the pipeline reads it from the request.
    return await pipeline.handle(request)
