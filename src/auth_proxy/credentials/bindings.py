"""
auth_proxy.credentials.bindings

Named secret bindings (the "environment" a secretName is looked up in).

Responsibilities:
- Resolve `AUTHPROXY_SECRET_<name>` from the process environment at call time.
- Fall back to the static `AUTHPROXY_API_KEYS` table captured at construction.
"""

from __future__ import annotations

import os
from collections.abc import Mapping

from auth_proxy.settings import Settings


class SecretBindings:
    def __init__(
        self,
        *,
        static: Mapping[str, str] | None = None,
        env_prefix: str = "AUTHPROXY_SECRET_",
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._static = dict(static or {})
        self._env_prefix = env_prefix
        # `None` means "read os.environ on every lookup".
        self._environ = environ

    @classmethod
    def from_settings(cls, settings: Settings) -> SecretBindings:
        return cls(static=settings.api_keys, env_prefix=settings.secret_env_prefix)

    def get(self, name: str) -> str | None:
        environ = os.environ if self._environ is None else self._environ
        value = environ.get(f"{self._env_prefix}{name}")
        if value:
            return value
        return self._static.get(name) or None


# --- Module Notes -----------------------------------------------------------
# Only prefixed variables are visible: a routing document naming `PATH` or
# `HOME` as a secret must not be able to read arbitrary process environment.
