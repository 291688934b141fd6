"""
auth_proxy.db

Persistence package (SQLAlchemy async) backing the fallback key/value store.

Responsibilities:
- Provide the ORM model, engine/session setup, repository and store adapters.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Pipeline code depends on `kv_store.KeyValueStore` only, never on SQLAlchemy.
