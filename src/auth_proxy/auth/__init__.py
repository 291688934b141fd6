"""
auth_proxy.auth

Caller authentication.

Responsibilities:
- Bearer token lookup against a token table.
- Signed access assertion inspection (pluggable decoder).
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The verifier never raises for bad credentials; it returns an `AuthResult`.
