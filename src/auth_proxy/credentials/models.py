"""
auth_proxy.credentials.models

Credential value types.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class Credentials:
    """
    Secrets are excluded from repr so an accidental log line cannot leak them.
    """

    api_key: str | None = field(default=None, repr=False)
    extra_headers: Mapping[str, str] = field(default_factory=dict, repr=False)

    @classmethod
    def from_document(cls, data: Any) -> Credentials:
        """
        Build from a stored JSON object: `{"apiKey": "...", "headers": {...}}`.

        Raises ValueError for anything that is not a JSON object of strings.
        """

        if not isinstance(data, dict):
            raise ValueError("credentials document must be a JSON object")

        api_key = data.get("apiKey", data.get("api_key"))
        if api_key is not None and not isinstance(api_key, str):
            raise ValueError("apiKey must be a string")

        headers = data.get("headers", data.get("extraHeaders")) or {}
        if not isinstance(headers, dict):
            raise ValueError("headers must be a JSON object")
        extra = {str(k): str(v) for k, v in headers.items()}

        return cls(api_key=api_key or None, extra_headers=extra)
