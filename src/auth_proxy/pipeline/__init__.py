"""
auth_proxy.pipeline

Request pipeline (LangGraph state machine).

Responsibilities:
- Typed per-request state, stage nodes, graph compilation.
- Error mapping at the pipeline boundary.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Call sites should use `service.ProxyPipeline`; nodes are an implementation detail.
