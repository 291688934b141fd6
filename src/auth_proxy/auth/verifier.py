"""
auth_proxy.auth.verifier

Request authentication.

Responsibilities:
- Try `Authorization: Bearer` against the token table first (non-fatal on miss).
- Otherwise inspect the signed access assertion: expiry and email domain.
"""

from __future__ import annotations

import asyncio
import json
import time
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError
from starlette.datastructures import Headers

from auth_proxy.auth.assertions import (
    AssertionDecodeError,
    AssertionDecoder,
    UnverifiedAssertionDecoder,
)
from auth_proxy.auth.models import (
    METHOD_OAUTH2,
    METHOD_SIGNED_ASSERTION,
    AuthResult,
    Identity,
    TokenInfo,
)
from auth_proxy.db.kv_store import OAUTH2_TOKENS_KEY, KeyValueStore, KeyValueStoreError
from auth_proxy.observability.logging import get_logger

log = get_logger(__name__)

ASSERTION_HEADER = "cf-access-jwt-assertion"
PLACEHOLDER_USER = "oauth2-client"

REASON_MISSING = "missing authentication token"
REASON_EXPIRED = "token expired"
REASON_DOMAIN = "unauthorized domain"
REASON_FORMAT = "invalid token format"


class AuthVerifier:
    def __init__(
        self,
        *,
        email_suffix: str,
        token_table: Mapping[str, Any] | None = None,
        store: KeyValueStore | None = None,
        decoder: AssertionDecoder | None = None,
        store_timeout: float = 5.0,
    ) -> None:
        self._email_suffix = email_suffix
        self._token_table = token_table
        self._store = store
        self._decoder = decoder or UnverifiedAssertionDecoder()
        self._store_timeout = store_timeout

    async def verify(self, headers: Mapping[str, str]) -> AuthResult:
        hdrs = headers if isinstance(headers, Headers) else Headers(headers=dict(headers))

        token = _bearer_token(hdrs.get("authorization"))
        if token:
            identity = await self._lookup_bearer(token)
            if identity is not None:
                return AuthResult.accept(identity)
            # Unknown/expired bearer tokens fall through to the assertion check.

        assertion = hdrs.get(ASSERTION_HEADER)
        if not assertion:
            return AuthResult.reject(REASON_MISSING)
        return await self._verify_assertion(assertion)

    async def _lookup_bearer(self, token: str) -> Identity | None:
        table = await self._load_token_table()
        raw = table.get(token)
        if raw is None:
            return None
        try:
            info = TokenInfo.model_validate(raw)
        except ValidationError:
            log.warning("token_entry_invalid")
            return None
        if info.is_expired():
            return None
        return Identity(
            user=info.user or info.client_id or PLACEHOLDER_USER,
            method=METHOD_OAUTH2,
            scope=info.scope,
        )

    async def _load_token_table(self) -> Mapping[str, Any]:
        if self._token_table is not None:
            return self._token_table
        if self._store is None:
            return {}
        try:
            async with asyncio.timeout(self._store_timeout):
                raw = await self._store.get(OAUTH2_TOKENS_KEY)
        except (KeyValueStoreError, TimeoutError) as e:
            log.warning("token_table_unavailable", error=str(e))
            return {}
        if not raw:
            return {}
        try:
            table = json.loads(raw)
        except ValueError:
            log.warning("token_table_unparsable")
            return {}
        return table if isinstance(table, dict) else {}

    async def _verify_assertion(self, assertion: str) -> AuthResult:
        try:
            claims = await self._decoder.decode(assertion)
        except AssertionDecodeError:
            return AuthResult.reject(REASON_FORMAT)

        exp = claims.get("exp")
        if exp is not None:
            if isinstance(exp, bool) or not isinstance(exp, int | float):
                return AuthResult.reject(REASON_FORMAT)
            if exp < time.time():
                return AuthResult.reject(REASON_EXPIRED)

        email = claims.get("email")
        if email:
            if not isinstance(email, str) or not email.endswith(self._email_suffix):
                return AuthResult.reject(REASON_DOMAIN)

        aud = claims.get("aud")
        if isinstance(aud, list):
            aud = ",".join(str(a) for a in aud)
        return AuthResult.accept(
            Identity(
                user=email or "",
                method=METHOD_SIGNED_ASSERTION,
                audience=str(aud) if aud is not None else None,
            )
        )


def _bearer_token(value: str | None) -> str | None:
    if not value:
        return None
    scheme, _, token = value.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


# --- Module Notes -----------------------------------------------------------
# The token table is re-read on every call when it lives in the fallback store,
# so revocations take effect on the next request.
