"""
tests.conftest

Shared fixtures: settings and in-process clients wired to a `FakeNetwork`.
"""

from __future__ import annotations

import httpx
import pytest
from support import ROUTING_URL, FakeNetwork

from auth_proxy.api.app import create_app
from auth_proxy.db.kv_store import KeyValueStore
from auth_proxy.settings import Settings


@pytest.fixture
def settings() -> Settings:
    return Settings(
        env="test",
        routing_config_url=ROUTING_URL,
        kv_database_url="",
        api_keys={"S1": "sk-live-s1"},
    )


@pytest.fixture
def build_client(settings: Settings):
    default_settings = settings

    def _build(
        network: FakeNetwork,
        *,
        settings: Settings | None = None,
        store: KeyValueStore | None = None,
    ) -> httpx.AsyncClient:
        upstream_http = httpx.AsyncClient(transport=httpx.MockTransport(network.handler))
        app = create_app(settings=settings or default_settings, http=upstream_http, store=store)
        return httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app), base_url="http://proxy.test"
        )

    return _build
