"""API response schemas.

Every outbound response is serialized through one of these models or the
domain models they embed. Structured error responses are included; the
API never leaks raw stack traces.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from evault.models.domain import (
    AuthDecision,
    CamelModel,
    Role,
    Session,
    SessionState,
    TransactionRecord,
)

# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


class DependencyHealth(BaseModel):
    """Health status of a single upstream dependency."""

    model_config = ConfigDict(frozen=True)

    name: str
    status: str = Field(..., description="'healthy', 'unhealthy', or 'not_configured'")
    latency_ms: float | None = None
    details: str | None = None


class HealthResponse(BaseModel):
    """Aggregate health check response."""

    model_config = ConfigDict(frozen=True)

    status: str = Field(..., description="'healthy', 'degraded', or 'unhealthy'")
    version: str
    uptime_seconds: float
    dependencies: list[DependencyHealth]


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class ErrorResponse(CamelModel):
    """Body of every non-2xx JSON response."""

    error: str
    error_type: str
    details: dict[str, Any] = Field(default_factory=dict)
    request_id: str | None = None


# ---------------------------------------------------------------------------
# Uploads
# ---------------------------------------------------------------------------


class UploadResponse(CamelModel):
    """Result of pinning a file; ``metadata`` keys are the S3 metadata names."""

    success: bool = True
    cid: str
    url: str
    key: str
    metadata: dict[str, str]


class DocumentRecordedResponse(CamelModel):
    upload: UploadResponse
    transaction: TransactionRecord


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


class RouteResponse(CamelModel):
    """Dashboard for a role, or a message when the role is not recognised."""

    role: str | None
    path: str | None
    unknown_role: bool
    message: str | None = None


class SessionResponse(CamelModel):
    session: Session
    state: SessionState
    route: RouteResponse


class AuthorizationResponse(CamelModel):
    path: str
    decision: AuthDecision
    expected_role: Role | None


# ---------------------------------------------------------------------------
# Chain
# ---------------------------------------------------------------------------


class AccountsResponse(CamelModel):
    accounts: list[str]
    active_account: str | None


class CaseSubmittedResponse(CamelModel):
    case_id: int


class CaseListResponse(CamelModel):
    case_ids: list[int]
