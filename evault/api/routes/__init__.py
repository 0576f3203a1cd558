"""API route aggregation.

All sub-routers are collected into a single api_router that the
app factory mounts under the configured prefix.
"""

from fastapi import APIRouter

from evault.api.routes import chain, data, files, health, identity, session, transactions

api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(data.router)
api_router.include_router(files.router)
api_router.include_router(session.router)
api_router.include_router(identity.router)
api_router.include_router(chain.router)
api_router.include_router(transactions.router)
