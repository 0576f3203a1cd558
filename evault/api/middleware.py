"""Request tracing middleware and structured exception handlers.

Every request gets a unique ID (from X-Request-ID header or generated),
which is bound to structlog contextvars so all log lines within a
request are correlated. Prometheus counters and histograms are recorded.
EVaultError subclasses are translated into ErrorResponse JSON through a
single status table; the API never leaks stack traces.
"""

from __future__ import annotations

import time
import uuid
from typing import Any

import structlog
from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from prometheus_client import Counter, Histogram
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from evault.core.exceptions import (
    AlreadyRegistered,
    ChainError,
    DuplicateId,
    EVaultError,
    InvalidIdentity,
    LookupFailed,
    MissingFile,
    MissingOwner,
    NotConnected,
    NotFoundError,
    OperationInProgress,
    StorageError,
    TooLarge,
    Unregistered,
    UserRejected,
    WalletUnavailable,
)
from evault.models.responses import ErrorResponse

logger: structlog.stdlib.BoundLogger = structlog.get_logger()

REQUEST_COUNT = Counter(
    "evault_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)
REQUEST_LATENCY = Histogram(
    "evault_http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
)
ERROR_COUNT = Counter(
    "evault_errors_total",
    "Domain errors returned to clients",
    ["error_type"],
)

STATUS_BY_ERROR: tuple[tuple[type[EVaultError], int], ...] = (
    (NotFoundError, 404),
    (NotConnected, 401),
    (Unregistered, 401),
    (WalletUnavailable, 503),
    (LookupFailed, 503),
    (UserRejected, 403),
    (AlreadyRegistered, 409),
    (DuplicateId, 409),
    (OperationInProgress, 409),
    (MissingOwner, 400),
    (MissingFile, 400),
    (InvalidIdentity, 400),
    (TooLarge, 413),
    (ChainError, 502),
    (StorageError, 500),
)


class RequestTracingMiddleware(BaseHTTPMiddleware):
    """Assign a request ID, bind structured log context, and record metrics."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        # Static assets would swamp the per-path labels; group them.
        is_api = request.url.path.startswith(request.app.state.settings.api_prefix)
        endpoint = request.url.path if is_api else "static"

        start = time.perf_counter()
        if is_api:
            logger.info("request_started", method=request.method, path=request.url.path)

        try:
            response = await call_next(request)
        except Exception:
            logger.exception("request_failed", method=request.method, path=request.url.path)
            response = _error_response(
                500,
                "An unexpected error occurred.",
                "InternalServerError",
                {},
                request_id,
            )

        duration = time.perf_counter() - start
        REQUEST_COUNT.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=response.status_code,
        ).inc()
        REQUEST_LATENCY.labels(method=request.method, endpoint=endpoint).observe(duration)

        response.headers["X-Request-ID"] = request_id

        if is_api:
            logger.info(
                "request_completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_seconds=round(duration, 4),
            )
        return response



# Room for multipart boundaries and part headers around the file itself.
MULTIPART_ALLOWANCE_BYTES = 64 * 1024


class UploadSizeLimitMiddleware(BaseHTTPMiddleware):
    """Refuse multipart bodies whose declared length is already over the limit.

    Runs before the form is parsed, so oversized uploads are rejected
    without being buffered. Bodies without a Content-Length are still
    bounded by the byte count in DocumentUploadBridge.
    """

    def __init__(self, app: Any, *, max_bytes: int) -> None:
        super().__init__(app)
        self.max_bytes = max_bytes

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        content_type = request.headers.get("content-type", "")
        declared = request.headers.get("content-length", "")
        if (
            content_type.startswith("multipart/form-data")
            and declared.isdigit()
            and int(declared) > self.max_bytes + MULTIPART_ALLOWANCE_BYTES
        ):
            ERROR_COUNT.labels(error_type=TooLarge.__name__).inc()
            logger.info("upload_rejected", content_length=int(declared), limit_bytes=self.max_bytes)
            return _error_response(
                413,
                f"File exceeds the upload limit of {self.max_bytes} bytes",
                TooLarge.__name__,
                {"limitBytes": self.max_bytes},
                _request_id(),
            )
        return await call_next(request)

# ---------------------------------------------------------------------------
# Exception → JSON response handlers
# ---------------------------------------------------------------------------


def _request_id() -> str | None:
    """Pull the current request ID from structlog context, if bound."""
    ctx: dict[str, Any] = structlog.contextvars.get_contextvars()
    return ctx.get("request_id")


def status_for(exc: EVaultError) -> int:
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 500


def _error_response(
    status_code: int,
    message: str,
    error_type: str,
    details: dict[str, Any],
    request_id: str | None,
) -> JSONResponse:
    body = ErrorResponse(
        error=message,
        error_type=error_type,
        details=details,
        request_id=request_id,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json", by_alias=True))


def register_exception_handlers(app: FastAPI) -> None:
    """Attach structured error handlers to the app."""

    @app.exception_handler(EVaultError)
    async def _evault(request: Request, exc: EVaultError) -> JSONResponse:
        status_code = status_for(exc)
        error_type = type(exc).__name__
        ERROR_COUNT.labels(error_type=error_type).inc()
        details = dict(exc.details)
        if isinstance(exc, TooLarge):
            details.setdefault("limitBytes", exc.limit_bytes)

        log = logger.error if status_code >= 500 else logger.info
        log("evault_error", error_type=error_type, message=exc.message, status_code=status_code)
        return _error_response(status_code, exc.message, error_type, details, _request_id())

    @app.exception_handler(RequestValidationError)
    async def _validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error_response(
            422,
            "Request validation failed",
            "RequestValidationError",
            {"errors": jsonable_encoder(exc.errors())},
            _request_id(),
        )

    @app.exception_handler(StarletteHTTPException)
    async def _http(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _error_response(
            exc.status_code,
            str(exc.detail),
            "HTTPException",
            {},
            _request_id(),
        )

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unhandled_error", error_type=type(exc).__name__)
        return _error_response(
            500,
            "An unexpected error occurred.",
            "InternalServerError",
            {},
            _request_id(),
        )
