"""FastAPI dependency injection providers.

Every service the API layer needs is accessed through a Depends()
callable defined here. Services are resolved from app.state, which the
lifespan populates at startup.
"""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends, Header, Request

from evault.core.config import Settings
from evault.models.domain import Session
from evault.services.chain import ChainBridge
from evault.services.seeding import MockDataStore
from evault.services.session import SessionManager
from evault.services.storage import DocumentUploadBridge


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached application settings singleton."""
    return Settings()


def get_settings_from_app(request: Request) -> Settings:
    """Retrieve settings stored on the running app instance.

    Preferred over the cached version inside route handlers since it
    respects the settings the app was actually started with.
    """
    settings: Settings = request.app.state.settings
    return settings


def get_data_store(request: Request) -> MockDataStore:
    store: MockDataStore = request.app.state.data_store
    return store


def get_chain_bridge(request: Request) -> ChainBridge:
    bridge: ChainBridge = request.app.state.chain_bridge
    return bridge


def get_session_manager(request: Request) -> SessionManager:
    manager: SessionManager = request.app.state.session_manager
    return manager


def get_upload_bridge(request: Request) -> DocumentUploadBridge:
    bridge: DocumentUploadBridge = request.app.state.upload_bridge
    return bridge


def get_current_session(
    x_session_id: str | None = Header(default=None),
    manager: SessionManager = Depends(get_session_manager),
) -> Session | None:
    """The session named by the X-Session-ID header, if it is still live."""
    return manager.current(x_session_id)
