"""
auth_proxy.auth.models

Auth domain models.

Responsibilities:
- `TokenInfo`: one entry of the bearer token table.
- `Identity` / `AuthResult`: the immutable outcome of verification.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field

METHOD_OAUTH2 = "oauth2"
METHOD_SIGNED_ASSERTION = "signed-assertion"


class TokenInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    user: str | None = None
    client_id: str | None = Field(default=None, alias="clientId")
    scope: str | None = None
    # Epoch seconds or ISO-8601; pydantic normalizes both.
    expires_at: datetime | None = Field(default=None, alias="expiresAt")

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.expires_at is None:
            return False
        expires = self.expires_at
        if expires.tzinfo is None:
            expires = expires.replace(tzinfo=UTC)
        return expires <= (now or datetime.now(tz=UTC))


@dataclass(frozen=True, slots=True)
class Identity:
    user: str
    method: str
    audience: str | None = None
    scope: str | None = None


@dataclass(frozen=True, slots=True)
class AuthResult:
    valid: bool
    identity: Identity | None = None
    rejection_reason: str | None = None

    @classmethod
    def accept(cls, identity: Identity) -> AuthResult:
        return cls(valid=True, identity=identity)

    @classmethod
    def reject(cls, reason: str) -> AuthResult:
        return cls(valid=False, rejection_reason=reason)
