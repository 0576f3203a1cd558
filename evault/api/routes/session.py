"""Session endpoints.

POST   /session: authenticate the X-User-Address wallet and open a session
GET    /session: the session named by X-Session-ID
DELETE /session: log out; always succeeds
GET    /session/authorize?path=: may the current session view ``path``
GET    /session/route?role=: dashboard for a role
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header, Query, Response

from evault.api.dependencies import get_current_session, get_session_manager
from evault.core.exceptions import NotConnected
from evault.models.domain import Session, SessionState
from evault.models.responses import AuthorizationResponse, RouteResponse, SessionResponse
from evault.services.session import (
    SessionContext,
    SessionManager,
    authorize_page,
    expected_role_for_path,
    route_for_role,
)

router = APIRouter(prefix="/session", tags=["session"])


def _route_response(role: str | None) -> RouteResponse:
    route = route_for_role(role)
    return RouteResponse(
        role=route.role,
        path=route.path,
        unknown_role=route.unknown_role,
        message=route.message,
    )


@router.post("", response_model=SessionResponse, summary="Authenticate a wallet address")
async def create_session(
    x_user_address: str | None = Header(default=None),
    x_session_id: str | None = Header(default=None),
    manager: SessionManager = Depends(get_session_manager),
) -> SessionResponse:
    """Replace any session this tab held with a fresh one for the address."""
    manager.logout(x_session_id)
    context = SessionContext()
    session = await manager.authenticate(x_user_address, context)
    return SessionResponse(
        session=session,
        state=context.state,
        route=_route_response(session.role),
    )


@router.get("", response_model=SessionResponse, summary="Current session")
async def read_session(
    session: Session | None = Depends(get_current_session),
) -> SessionResponse:
    if session is None:
        raise NotConnected("No active session")
    state = SessionState.APPROVED if session.is_approved else SessionState.PENDING
    return SessionResponse(session=session, state=state, route=_route_response(session.role))


@router.delete("", status_code=204, summary="Log out")
async def delete_session(
    x_session_id: str | None = Header(default=None),
    manager: SessionManager = Depends(get_session_manager),
) -> Response:
    manager.logout(x_session_id)
    return Response(status_code=204)


@router.get("/authorize", response_model=AuthorizationResponse, summary="Authorize a page")
async def authorize(
    path: str = Query(..., min_length=1),
    session: Session | None = Depends(get_current_session),
) -> AuthorizationResponse:
    return AuthorizationResponse(
        path=path,
        decision=authorize_page(path, session),
        expected_role=expected_role_for_path(path),
    )


@router.get("/route", response_model=RouteResponse, summary="Dashboard for a role")
async def route(role: str | None = Query(default=None)) -> RouteResponse:
    return _route_response(role)
