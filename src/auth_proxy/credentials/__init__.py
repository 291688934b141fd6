"""
auth_proxy.credentials

Upstream credential resolution.

Responsibilities:
- Model credentials injected into proxied requests.
- Resolve a route's named secret from bindings, then the fallback store.
"""

# Package marker.
