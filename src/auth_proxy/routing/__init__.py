"""
auth_proxy.routing

Routing rules and resolution.

Responsibilities:
- Parse the remotely hosted routing document into ordered `RouteRule`s.
- Match a target hostname (or request path) to the first applicable rule.
"""

# Package marker.
