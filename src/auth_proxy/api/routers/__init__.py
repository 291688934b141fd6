"""
auth_proxy.api.routers

Routers: local health probes and the catch-all proxy route.
"""

# Package marker.
