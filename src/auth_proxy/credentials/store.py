"""
auth_proxy.credentials.store

Credential store accessor.

Responsibilities:
- Resolve `route.secret_name` to `Credentials` on every request (no cache).
- Treat unreadable or malformed entries as "not found".
"""

from __future__ import annotations

import asyncio
import json

from auth_proxy.credentials.bindings import SecretBindings
from auth_proxy.credentials.models import Credentials
from auth_proxy.db.kv_store import KeyValueStore, KeyValueStoreError, secret_key
from auth_proxy.observability.logging import get_logger
from auth_proxy.routing.models import RouteRule

log = get_logger(__name__)


class CredentialStore:
    def __init__(
        self,
        *,
        bindings: SecretBindings,
        store: KeyValueStore | None,
        timeout: float = 5.0,
    ) -> None:
        self._bindings = bindings
        self._store = store
        self._timeout = timeout

    async def get_credentials(self, route: RouteRule) -> Credentials | None:
        name = route.secret_name
        if not name:
            log.warning("route_without_secret", match_key=route.match_key)
            return None

        bound = self._bindings.get(name)
        if bound:
            return _from_binding(bound)

        if self._store is None:
            return None

        try:
            async with asyncio.timeout(self._timeout):
                raw = await self._store.get(secret_key(name))
        except (KeyValueStoreError, TimeoutError) as e:
            log.warning("credential_store_unavailable", secret_name=name, error=str(e))
            return None
        if not raw:
            return None

        try:
            return Credentials.from_document(json.loads(raw))
        except ValueError as e:
            # json.JSONDecodeError is a ValueError too.
            log.warning("credential_parse_failed", secret_name=name, error=str(e))
            return None


def _from_binding(value: str) -> Credentials:
    # A binding is normally the bare key; a JSON object carries extra headers too.
    if value.lstrip().startswith("{"):
        try:
            return Credentials.from_document(json.loads(value))
        except ValueError:
            pass
    return Credentials(api_key=value)
