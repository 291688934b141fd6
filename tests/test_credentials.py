from __future__ import annotations

import asyncio
import json

import pytest

from auth_proxy.credentials.bindings import SecretBindings
from auth_proxy.credentials.models import Credentials
from auth_proxy.credentials.store import CredentialStore
from auth_proxy.db.kv_store import InMemoryKeyValueStore, KeyValueStoreError
from auth_proxy.routing.models import RouteRule


def _route(secret_name: str | None) -> RouteRule:
    return RouteRule(domain="api.example.com", secret_name=secret_name)


def test_from_document_accepts_both_spellings() -> None:
    a = Credentials.from_document({"apiKey": "k", "headers": {"X-Org": "1"}})
    b = Credentials.from_document({"api_key": "k", "extraHeaders": {"X-Org": 1}})
    assert a == b
    assert a.extra_headers == {"X-Org": "1"}


@pytest.mark.parametrize(
    "data",
    [["k"], "k", {"apiKey": 123}, {"apiKey": "k", "headers": ["X-Org"]}],
)
def test_from_document_rejects_malformed(data) -> None:
    with pytest.raises(ValueError):
        Credentials.from_document(data)


def test_repr_hides_secrets() -> None:
    assert "sk-secret" not in repr(Credentials(api_key="sk-secret"))


@pytest.mark.asyncio
async def test_binding_from_environment_is_read_per_call(monkeypatch) -> None:
    store = CredentialStore(bindings=SecretBindings(), store=None)

    monkeypatch.setenv("AUTHPROXY_SECRET_VENDOR", "key-v1")
    first = await store.get_credentials(_route("VENDOR"))
    monkeypatch.setenv("AUTHPROXY_SECRET_VENDOR", "key-v2")
    second = await store.get_credentials(_route("VENDOR"))

    assert first.api_key == "key-v1"
    assert second.api_key == "key-v2"


@pytest.mark.asyncio
async def test_environment_binding_wins_over_static_table() -> None:
    bindings = SecretBindings(
        static={"VENDOR": "static-key"}, environ={"AUTHPROXY_SECRET_VENDOR": "env-key"}
    )
    creds = await CredentialStore(bindings=bindings, store=None).get_credentials(_route("VENDOR"))
    assert creds.api_key == "env-key"


def test_unprefixed_environment_is_invisible() -> None:
    bindings = SecretBindings(environ={"HOME": "/root"})
    assert bindings.get("HOME") is None


@pytest.mark.asyncio
async def test_json_binding_carries_extra_headers() -> None:
    bindings = SecretBindings(
        static={"VENDOR": json.dumps({"apiKey": "k", "headers": {"X-Org": "o"}})}
    )
    creds = await CredentialStore(bindings=bindings, store=None).get_credentials(_route("VENDOR"))
    assert creds.api_key == "k"
    assert creds.extra_headers == {"X-Org": "o"}


@pytest.mark.asyncio
async def test_store_fallback_and_rotation() -> None:
    kv = InMemoryKeyValueStore({"secret_VENDOR": json.dumps({"apiKey": "old"})})
    store = CredentialStore(bindings=SecretBindings(environ={}), store=kv)

    assert (await store.get_credentials(_route("VENDOR"))).api_key == "old"
    await kv.put("secret_VENDOR", json.dumps({"apiKey": "new"}))
    assert (await store.get_credentials(_route("VENDOR"))).api_key == "new"


@pytest.mark.asyncio
async def test_missing_or_malformed_entries_are_not_found() -> None:
    kv = InMemoryKeyValueStore({"secret_BROKEN": "{not json", "secret_LIST": "[1, 2]"})
    store = CredentialStore(bindings=SecretBindings(environ={}), store=kv)

    assert await store.get_credentials(_route("ABSENT")) is None
    assert await store.get_credentials(_route("BROKEN")) is None
    assert await store.get_credentials(_route("LIST")) is None
    assert await store.get_credentials(_route(None)) is None


class _FailingStore:
    async def get(self, key: str) -> str | None:
        raise KeyValueStoreError("boom")

    async def put(self, key: str, value: str) -> None:
        raise KeyValueStoreError("boom")

    async def ping(self) -> None:
        raise KeyValueStoreError("boom")


class _HangingStore(_FailingStore):
    async def get(self, key: str) -> str | None:
        await asyncio.sleep(10)
        return None


@pytest.mark.asyncio
async def test_unreachable_store_is_not_found() -> None:
    store = CredentialStore(bindings=SecretBindings(environ={}), store=_FailingStore())
    assert await store.get_credentials(_route("VENDOR")) is None


@pytest.mark.asyncio
async def test_slow_store_times_out_as_not_found() -> None:
    store = CredentialStore(
        bindings=SecretBindings(environ={}), store=_HangingStore(), timeout=0.01
    )
    assert await store.get_credentials(_route("VENDOR")) is None
