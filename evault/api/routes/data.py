"""Mock roster endpoints.

GET /users: the seeded user roster, optionally filtered by role
GET /cases: the seeded case list, filtered by status or party
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from evault.api.dependencies import get_data_store
from evault.models.domain import Case, CaseStatus, Role, User
from evault.services.seeding import MockDataStore

router = APIRouter(tags=["data"])


@router.get(
    "/users",
    response_model=list[User],
    response_model_exclude_none=True,
    summary="List seeded users",
)
async def list_users(
    role: Role | None = Query(default=None),
    store: MockDataStore = Depends(get_data_store),
) -> list[User]:
    return store.list_users(role=role)


@router.get("/cases", response_model=list[Case], summary="List seeded cases")
async def list_cases(
    status: CaseStatus | None = Query(default=None),
    submitted_by: str | None = Query(default=None, alias="submittedBy"),
    assigned_to: str | None = Query(default=None, alias="assignedTo"),
    judge: str | None = Query(default=None),
    store: MockDataStore = Depends(get_data_store),
) -> list[Case]:
    """Cases from the snapshot; every filter given must match exactly."""
    return store.list_cases(
        status=status,
        submitted_by=submitted_by,
        assigned_to=assigned_to,
        judge=judge,
    )
