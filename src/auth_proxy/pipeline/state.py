"""
auth_proxy.pipeline.state

Typed state schema for one request travelling through the pipeline.

Responsibilities:
- Define the contract between nodes (inputs/outputs).
"""

from __future__ import annotations

from typing import TypedDict

from starlette.requests import Request
from starlette.responses import Response

from auth_proxy.auth.models import AuthResult
from auth_proxy.credentials.models import Credentials
from auth_proxy.routing.models import RouteRule


class ProxyState(TypedDict, total=False):
    # Inputs
    request: Request
    cors_headers: dict[str, str]

    # Stage outputs
    auth: AuthResult
    target_url: str
    route: RouteRule
    credentials: Credentials

    # Terminal output
    response: Response


# --- Module Notes -----------------------------------------------------------
# State lives for a single request and is never checkpointed, so it may hold
# live objects (the Starlette request, a streaming response).
