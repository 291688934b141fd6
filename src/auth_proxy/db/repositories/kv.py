"""
auth_proxy.db.repositories.kv

Repository for `kv_entries` rows.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from auth_proxy.db.models import KvEntry


class KvRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_value(self, key: str) -> str | None:
        entry = await self._session.get(KvEntry, key)
        return entry.value if entry is not None else None

    async def upsert(self, *, key: str, value: str) -> KvEntry:
        existing = await self._session.get(KvEntry, key)
        if existing is not None:
            existing.value = value
            await self._session.flush()
            return existing

        entry = KvEntry(key=key, value=value)
        self._session.add(entry)
        await self._session.flush()
        return entry

