"""
auth_proxy.auth.assertions

Decoders for the signed access assertion (`CF-Access-Jwt-Assertion`).

Responsibilities:
- `UnverifiedAssertionDecoder`: read claims without checking the signature.
- `JwksAssertionDecoder`: verify RS256 signatures against a JWKS endpoint.

Note:
- The unverified decoder is the default and trusts whatever an upstream access
  layer put in the header. Only deploy it behind such a layer.
"""

from __future__ import annotations

import asyncio
from typing import Any, Protocol

import jwt
from jwt import InvalidTokenError, PyJWKClient, PyJWKClientError


class AssertionDecodeError(Exception):
    pass


class AssertionDecoder(Protocol):
    async def decode(self, token: str) -> dict[str, Any]: ...


class UnverifiedAssertionDecoder:
    async def decode(self, token: str) -> dict[str, Any]:
        try:
            # With verify_signature disabled PyJWT also skips exp/aud checks;
            # the verifier applies its own expiry rule to the claims.
            return jwt.decode(token, options={"verify_signature": False})
        except InvalidTokenError as e:
            raise AssertionDecodeError(str(e)) from e


class JwksAssertionDecoder:
    def __init__(
        self,
        *,
        jwks_url: str,
        audience: str | None = None,
        algorithms: tuple[str, ...] = ("RS256",),
    ) -> None:
        self._client = PyJWKClient(jwks_url)
        self._audience = audience
        self._algorithms = list(algorithms)

    async def decode(self, token: str) -> dict[str, Any]:
        try:
            # PyJWKClient fetches keys with blocking urllib; keep it off the loop.
            signing_key = await asyncio.to_thread(self._client.get_signing_key_from_jwt, token)
            return jwt.decode(
                token,
                signing_key.key,
                algorithms=self._algorithms,
                audience=self._audience,
                options={
                    "verify_exp": False,
                    "verify_aud": self._audience is not None,
                },
            )
        except (InvalidTokenError, PyJWKClientError) as e:
            raise AssertionDecodeError(str(e)) from e


def build_decoder(*, jwks_url: str | None, audience: str | None) -> AssertionDecoder:
    if jwks_url:
        return JwksAssertionDecoder(jwks_url=jwks_url, audience=audience)
    return UnverifiedAssertionDecoder()
