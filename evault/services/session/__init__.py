"""Session lifecycle, role routing, and page authorization."""

from evault.services.session.manager import (
    DASHBOARD_ROUTES,
    RouteResult,
    SessionContext,
    SessionManager,
    SessionStore,
    authorize_page,
    expected_role_for_path,
    route_for_role,
)

__all__ = [
    "DASHBOARD_ROUTES",
    "RouteResult",
    "SessionContext",
    "SessionManager",
    "SessionStore",
    "authorize_page",
    "expected_role_for_path",
    "route_for_role",
]
