"""
auth_proxy.proxy

Upstream forwarding.

Responsibilities:
- Filter headers in both directions as ordered (name, value) pairs.
- Inject route credentials and send the request to the upstream.
- Relay the upstream response body unmodified.
"""

# Package marker.
