"""FastAPI application factory and lifespan management.

create_app() builds the fully configured application: logging,
middleware, exception handlers, services, API routes, and the static
frontend mounted on "/". The lifespan seeds the mock data snapshots on
startup.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from evault import __version__
from evault.api.dependencies import get_settings
from evault.api.middleware import (
    RequestTracingMiddleware,
    UploadSizeLimitMiddleware,
    register_exception_handlers,
)
from evault.api.routes import api_router
from evault.core.config import Settings
from evault.core.exceptions import NotFoundError
from evault.core.logging import setup_logging
from evault.services.chain import ChainBridge, TransactionLog
from evault.services.seeding import MockDataStore
from evault.services.session import SessionManager, SessionStore
from evault.services.storage import DocumentUploadBridge, FilebaseStorage

logger: structlog.stdlib.BoundLogger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application startup and shutdown."""
    settings: Settings = app.state.settings
    logger.info("application_starting", version=__version__, debug=settings.debug)

    settings.upload_dir.mkdir(parents=True, exist_ok=True)
    if settings.seed_on_startup:
        try:
            result = app.state.data_store.ensure_seeded()
        except NotFoundError as exc:
            logger.warning("mock_data_unusable", error=exc.message, **exc.details)
        else:
            logger.info(
                "mock_data_ready",
                users_created=result.users_created,
                cases_created=result.cases_created,
            )

    yield
    logger.info("application_shutting_down", sessions=len(app.state.session_manager.store))


def _wire_services(app: FastAPI, settings: Settings) -> None:
    """Construct every service once and hang it off app.state."""
    bridge = ChainBridge.from_settings(settings, ledger=TransactionLog())
    storage = FilebaseStorage.from_settings(settings)

    app.state.data_store = MockDataStore.from_settings(settings)
    app.state.chain_bridge = bridge
    app.state.storage = storage
    app.state.session_manager = SessionManager(
        bridge,
        SessionStore(),
        admin_address=settings.admin_address,
    )
    app.state.upload_bridge = DocumentUploadBridge(
        storage,
        bridge,
        upload_dir=settings.upload_dir,
        max_bytes=settings.max_upload_bytes,
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build and return a fully configured FastAPI application."""
    if settings is None:
        settings = get_settings()

    setup_logging(settings)

    app = FastAPI(
        title="E-Vault",
        description="Law-management backend: mock roster, document uploads, and contract bridge",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    app.state.settings = settings
    _wire_services(app, settings)

    app.add_middleware(UploadSizeLimitMiddleware, max_bytes=settings.max_upload_bytes)
    app.add_middleware(RequestTracingMiddleware)

    register_exception_handlers(app)

    app.include_router(api_router, prefix=settings.api_prefix)

    # Mounted last so it never shadows the API routes.
    settings.frontend_dir.mkdir(parents=True, exist_ok=True)
    app.mount("/", StaticFiles(directory=settings.frontend_dir, html=True), name="frontend")

    return app
