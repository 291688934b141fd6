"""
auth_proxy.api.__main__

Entrypoint for running the proxy via `python -m auth_proxy.api`.
"""

from __future__ import annotations

import uvicorn

from auth_proxy.api.app import create_app
from auth_proxy.settings import get_settings


def main() -> None:
    settings = get_settings()
    app = create_app(settings=settings)

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,  # structlog
    )


if __name__ == "__main__":
    main()
