from __future__ import annotations

import json
import time
from datetime import UTC, datetime, timedelta

import pytest
from support import AUTHORIZED_EMAIL, make_assertion, valid_assertion

from auth_proxy.auth.assertions import JwksAssertionDecoder, UnverifiedAssertionDecoder, build_decoder
from auth_proxy.auth.models import METHOD_OAUTH2, METHOD_SIGNED_ASSERTION
from auth_proxy.auth.verifier import AuthVerifier
from auth_proxy.db.kv_store import InMemoryKeyValueStore

SUFFIX = "@simplesalt.company"


def _verifier(**kwargs) -> AuthVerifier:
    return AuthVerifier(email_suffix=SUFFIX, **kwargs)


@pytest.mark.asyncio
async def test_valid_assertion_yields_identity() -> None:
    result = await _verifier().verify({"CF-Access-Jwt-Assertion": valid_assertion()})
    assert result.valid
    assert result.identity.user == AUTHORIZED_EMAIL
    assert result.identity.method == METHOD_SIGNED_ASSERTION
    assert result.identity.audience == "proxy-app"
    assert result.rejection_reason is None


@pytest.mark.asyncio
async def test_missing_token() -> None:
    result = await _verifier().verify({})
    assert not result.valid
    assert result.rejection_reason == "missing authentication token"


@pytest.mark.asyncio
async def test_expired_assertion() -> None:
    token = make_assertion(email=AUTHORIZED_EMAIL, exp=int(time.time()) - 1)
    result = await _verifier().verify({"cf-access-jwt-assertion": token})
    assert result.rejection_reason == "token expired"


@pytest.mark.asyncio
async def test_wrong_email_domain() -> None:
    # Suffix check, not substring: the trusted domain appearing mid-address is not enough.
    token = valid_assertion(email="eve@simplesalt.company.evil.example")
    result = await _verifier().verify({"cf-access-jwt-assertion": token})
    assert result.rejection_reason == "unauthorized domain"


@pytest.mark.asyncio
async def test_assertion_without_exp_or_email_is_accepted() -> None:
    result = await _verifier().verify({"cf-access-jwt-assertion": make_assertion(sub="svc")})
    assert result.valid


@pytest.mark.asyncio
@pytest.mark.parametrize("token", ["not-a-jwt", "a.b.c", ""])
async def test_undecodable_assertion(token: str) -> None:
    result = await _verifier().verify({"cf-access-jwt-assertion": token})
    assert not result.valid
    expected = "missing authentication token" if not token else "invalid token format"
    assert result.rejection_reason == expected


@pytest.mark.asyncio
async def test_non_numeric_exp_is_invalid_format() -> None:
    token = make_assertion(email=AUTHORIZED_EMAIL, exp="tomorrow")
    result = await _verifier().verify({"cf-access-jwt-assertion": token})
    assert result.rejection_reason == "invalid token format"


@pytest.mark.asyncio
async def test_bearer_token_table_from_settings() -> None:
    verifier = _verifier(token_table={"tok-1": {"user": "bot@partner", "scope": "read"}})
    result = await verifier.verify({"Authorization": "bearer tok-1"})
    assert result.valid
    assert result.identity.user == "bot@partner"
    assert result.identity.method == METHOD_OAUTH2
    assert result.identity.scope == "read"


@pytest.mark.asyncio
async def test_bearer_identity_falls_back_to_client_id_then_placeholder() -> None:
    verifier = _verifier(token_table={"a": {"clientId": "ci"}, "b": {}})
    assert (await verifier.verify({"Authorization": "Bearer a"})).identity.user == "ci"
    assert (await verifier.verify({"Authorization": "Bearer b"})).identity.user == "oauth2-client"


@pytest.mark.asyncio
async def test_expired_bearer_token_falls_through() -> None:
    past = (datetime.now(tz=UTC) - timedelta(minutes=1)).isoformat()
    verifier = _verifier(token_table={"old": {"user": "u", "expiresAt": past}})

    alone = await verifier.verify({"Authorization": "Bearer old"})
    with_assertion = await verifier.verify(
        {"Authorization": "Bearer old", "CF-Access-Jwt-Assertion": valid_assertion()}
    )

    assert alone.rejection_reason == "missing authentication token"
    assert with_assertion.valid
    assert with_assertion.identity.method == METHOD_SIGNED_ASSERTION


@pytest.mark.asyncio
async def test_bearer_token_table_from_store_is_reread() -> None:
    kv = InMemoryKeyValueStore({"oauth2_tokens": json.dumps({"tok-1": {"user": "u1"}})})
    verifier = _verifier(store=kv)

    assert (await verifier.verify({"Authorization": "Bearer tok-1"})).valid
    await kv.put("oauth2_tokens", json.dumps({}))
    revoked = await verifier.verify({"Authorization": "Bearer tok-1"})
    assert revoked.rejection_reason == "missing authentication token"


@pytest.mark.asyncio
async def test_unparsable_store_table_is_empty() -> None:
    verifier = _verifier(store=InMemoryKeyValueStore({"oauth2_tokens": "{oops"}))
    result = await verifier.verify({"Authorization": "Bearer tok-1"})
    assert not result.valid


def test_decoder_selection() -> None:
    assert isinstance(build_decoder(jwks_url=None, audience=None), UnverifiedAssertionDecoder)
    decoder = build_decoder(jwks_url="https://team.example/cdn-cgi/access/certs", audience="aud")
    assert isinstance(decoder, JwksAssertionDecoder)
