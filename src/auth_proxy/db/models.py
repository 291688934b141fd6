"""
auth_proxy.db.models

Schema for the fallback key/value store.

Responsibilities:
- Define `KvEntry`, one row per key (`secret_<name>`, `oauth2_tokens`, ...).
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from auth_proxy.db.base import Base


def _utcnow() -> datetime:
    # Persist naive UTC timestamps; sqlite has no tz-aware column type.
    return datetime.now(tz=UTC).replace(tzinfo=None)


class KvEntry(Base):
    __tablename__ = "kv_entries"

    key: Mapped[str] = mapped_column(String(256), primary_key=True)
    # Values are opaque text; JSON documents are parsed by callers.
    value: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)
