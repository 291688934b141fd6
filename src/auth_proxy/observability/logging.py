"""
auth_proxy.observability.logging

Structured logging configuration for the service.

Responsibilities:
- Configure `structlog` for JSON logs.
- Mask credential-bearing fields before rendering.
- Provide a small wrapper for obtaining bound loggers.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

REDACTED = "[redacted]"
SENSITIVE_FIELDS = frozenset(
    {
        "authorization",
        "api_key",
        "apikey",
        "token",
        "assertion",
        "cf-access-jwt-assertion",
        "credentials",
    }
)


def configure_logging(*, service_name: str, level: str) -> None:
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            _add_service_name(service_name),
            redact_sensitive_fields,
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def _add_service_name(service_name: str):
    def processor(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        event_dict.setdefault("service", service_name)
        return event_dict

    return processor


def redact_sensitive_fields(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    for key in event_dict:
        if key.lower() in SENSITIVE_FIELDS and event_dict[key] is not None:
            event_dict[key] = REDACTED
    return event_dict


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


# --- Module Notes -----------------------------------------------------------
# Redaction is a backstop; call sites still log secret names, never secret values.
