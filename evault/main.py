"""Uvicorn entry point for the E-Vault server.

Run directly:        python -m evault.main
Run via uvicorn:     uvicorn evault.main:create_app --factory --reload
"""

import uvicorn

from evault.api.app import create_app
from evault.api.dependencies import get_settings

__all__ = ["create_app", "main"]


def main() -> None:
    """Start the server with uvicorn; the listen port honours PORT."""
    settings = get_settings()
    uvicorn.run(
        "evault.main:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
