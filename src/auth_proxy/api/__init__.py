"""
auth_proxy.api

HTTP API package (FastAPI).

Responsibilities:
- Compose the application and mount routers.
"""

# Package marker.
