"""Health check and Prometheus metrics endpoints.

/health probes the mock data snapshots, the Ethereum JSON-RPC node, and
the Filebase bucket, measures per-probe latency, and reports aggregate
status. Probes run concurrently to minimise total latency.
"""

from __future__ import annotations

import asyncio
import time

import httpx
import structlog
from fastapi import APIRouter, Depends, Request
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from evault import __version__
from evault.api.dependencies import get_settings_from_app
from evault.core.config import Settings
from evault.core.exceptions import StorageError
from evault.models.responses import DependencyHealth, HealthResponse
from evault.services.storage import FilebaseStorage

router = APIRouter(tags=["observability"])
logger: structlog.stdlib.BoundLogger = structlog.get_logger()

_start_time: float = time.time()


# ---------------------------------------------------------------------------
# Dependency probes
# ---------------------------------------------------------------------------


async def _probe_snapshots(settings: Settings) -> DependencyHealth:
    missing = [p.name for p in (settings.users_path, settings.cases_path) if not p.is_file()]
    if missing:
        return DependencyHealth(
            name="mock_data",
            status="unhealthy",
            details=f"missing snapshots: {', '.join(missing)}",
        )
    return DependencyHealth(name="mock_data", status="healthy")


async def _probe_rpc(rpc_url: str) -> DependencyHealth:
    """Ask the node for its client version over raw JSON-RPC."""
    if not rpc_url:
        return DependencyHealth(name="ethereum", status="not_configured")
    start = time.perf_counter()
    try:
        async with httpx.AsyncClient(timeout=3.0) as client:
            resp = await client.post(
                rpc_url,
                json={"jsonrpc": "2.0", "method": "web3_clientVersion", "params": [], "id": 1},
            )
            resp.raise_for_status()
            payload = resp.json()
        if "error" in payload:
            raise ValueError(payload["error"])
        latency = (time.perf_counter() - start) * 1000
        return DependencyHealth(
            name="ethereum",
            status="healthy",
            latency_ms=round(latency, 2),
            details=str(payload.get("result", ""))[:200],
        )
    except (httpx.HTTPError, ValueError) as exc:
        latency = (time.perf_counter() - start) * 1000
        return DependencyHealth(
            name="ethereum",
            status="unhealthy",
            latency_ms=round(latency, 2),
            details=str(exc)[:200],
        )


async def _probe_bucket(storage: FilebaseStorage) -> DependencyHealth:
    if not storage.bucket:
        return DependencyHealth(name="filebase", status="not_configured")
    start = time.perf_counter()
    try:
        await asyncio.wait_for(storage.head_bucket(), timeout=5.0)
    except (StorageError, TimeoutError) as exc:
        latency = (time.perf_counter() - start) * 1000
        return DependencyHealth(
            name="filebase",
            status="unhealthy",
            latency_ms=round(latency, 2),
            details=str(exc)[:200],
        )
    latency = (time.perf_counter() - start) * 1000
    return DependencyHealth(name="filebase", status="healthy", latency_ms=round(latency, 2))


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get("/health", response_model=HealthResponse)
async def health_check(
    request: Request,
    settings: Settings = Depends(get_settings_from_app),
) -> HealthResponse:
    """Check API and upstream dependency health."""
    dependencies = list(
        await asyncio.gather(
            _probe_snapshots(settings),
            _probe_rpc(settings.eth_rpc_url),
            _probe_bucket(request.app.state.storage),
        )
    )

    has_unhealthy = any(d.status == "unhealthy" for d in dependencies)
    all_healthy = all(d.status == "healthy" for d in dependencies)

    if all_healthy:
        status = "healthy"
    elif has_unhealthy:
        status = "unhealthy"
    else:
        status = "degraded"

    return HealthResponse(
        status=status,
        version=__version__,
        uptime_seconds=round(time.time() - _start_time, 2),
        dependencies=dependencies,
    )


@router.get("/metrics")
async def metrics() -> Response:
    """Expose Prometheus metrics for scraping."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )
