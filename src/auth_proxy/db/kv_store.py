"""
auth_proxy.db.kv_store

Fallback key/value store boundary.

Responsibilities:
- Define the `KeyValueStore` protocol consumed by the credential and auth layers.
- Provide a SQLAlchemy-backed adapter and an in-memory adapter.
"""

from __future__ import annotations

from typing import Protocol

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from auth_proxy.db.repositories.kv import KvRepo

SECRET_KEY_PREFIX = "secret_"
OAUTH2_TOKENS_KEY = "oauth2_tokens"


def secret_key(secret_name: str) -> str:
    return f"{SECRET_KEY_PREFIX}{secret_name}"


class KeyValueStoreError(Exception):
    pass


class KeyValueStore(Protocol):
    async def get(self, key: str) -> str | None: ...

    async def put(self, key: str, value: str) -> None: ...

    async def ping(self) -> None: ...


class SqlKeyValueStore:
    """
    One short session per call: every lookup sees the latest committed value,
    which is what makes credential rotation immediate.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get(self, key: str) -> str | None:
        try:
            async with self._session_factory() as session:
                return await KvRepo(session).get_value(key)
        except SQLAlchemyError as e:
            raise KeyValueStoreError(f"lookup failed for {key!r}: {e}") from e

    async def put(self, key: str, value: str) -> None:
        try:
            async with self._session_factory() as session:
                await KvRepo(session).upsert(key=key, value=value)
                await session.commit()
        except SQLAlchemyError as e:
            raise KeyValueStoreError(f"write failed for {key!r}: {e}") from e

    async def ping(self) -> None:
        try:
            async with self._session_factory() as session:
                await session.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            raise KeyValueStoreError(f"store unreachable: {e}") from e


class InMemoryKeyValueStore:
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def put(self, key: str, value: str) -> None:
        self._data[key] = value

    async def ping(self) -> None:
        return None


# --- Module Notes -----------------------------------------------------------
# Keys in use: `secret_<secretName>` (JSON credentials) and `oauth2_tokens`
# (JSON token table). Values are stored verbatim; parsing belongs to callers.
