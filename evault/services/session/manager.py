"""Per-tab session lifecycle and page authorization.

The browser used to keep the logged-in identity in sessionStorage and
decide on every page load whether the visitor may see it. Here the same
decisions are made server-side against an explicit session store:
``authenticate`` creates a session, ``logout`` destroys it, and
``authorize_page`` / ``route_for_role`` are pure functions of their inputs.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol

import structlog

from evault.core.exceptions import EVaultError, LookupFailed, NotConnected, Unregistered
from evault.models.domain import AuthDecision, IdentityStatus, Role, Session, SessionState

logger: structlog.stdlib.BoundLogger = structlog.get_logger()

DASHBOARD_ROUTES: dict[str, str] = {
    Role.CLIENT: "/client-dashboard.html",
    Role.LAWYER: "/lawyer-dashboard.html",
    Role.JUDGE: "/judge-dashboard.html",
    Role.ADMIN: "/admin-dashboard.html",
}

# Checked in this order; "admin-dashboard" must not be read as a client page.
ROLE_TOKENS: tuple[Role, ...] = (Role.ADMIN, Role.LAWYER, Role.JUDGE, Role.CLIENT)


class IdentityLookup(Protocol):
    async def fetch_identity(self, address: str) -> IdentityStatus: ...


# ---------------------------------------------------------------------------
# Pure decisions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RouteResult:
    """Where a role lands after login; ``path`` is None for an unknown role."""

    role: str | None
    path: str | None
    message: str | None = None

    @property
    def unknown_role(self) -> bool:
        return self.path is None


def route_for_role(role: str | None) -> RouteResult:
    """Map a role to its dashboard. Unknown roles yield a message, never an exception."""
    path = DASHBOARD_ROUTES.get((role or "").lower())
    if path is None:
        return RouteResult(
            role=role,
            path=None,
            message="Unknown user role. Please contact the administrator.",
        )
    return RouteResult(role=role, path=path)


def expected_role_for_path(path: str) -> Role | None:
    lowered = path.lower()
    for role in ROLE_TOKENS:
        if role.value in lowered:
            return role
    return None


def authorize_page(path: str, session: Session | None) -> AuthDecision:
    """Allowed iff the path names a role, the session holds that role, and it is approved."""
    expected = expected_role_for_path(path)
    if session is None or expected is None or not session.is_approved:
        return AuthDecision.DENIED
    if session.role.lower() != expected.value:
        return AuthDecision.DENIED
    return AuthDecision.ALLOWED


# ---------------------------------------------------------------------------
# Session storage
# ---------------------------------------------------------------------------


class SessionStore:
    """In-process session table keyed by an opaque session id."""

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}

    def create(self, *, address: str, role: str, is_approved: bool) -> Session:
        session = Session(
            session_id=secrets.token_urlsafe(24),
            address=address,
            role=role,
            is_approved=is_approved,
            created_at=datetime.now(UTC),
        )
        self._sessions[session.session_id] = session
        return session

    def get(self, session_id: str | None) -> Session | None:
        if not session_id:
            return None
        return self._sessions.get(session_id)

    def destroy(self, session_id: str | None) -> bool:
        if not session_id:
            return False
        return self._sessions.pop(session_id, None) is not None

    def __len__(self) -> int:
        return len(self._sessions)


@dataclass
class SessionContext:
    """Authentication state of one browser tab."""

    state: SessionState = SessionState.ANONYMOUS
    session: Session | None = None
    error: str | None = field(default=None, repr=False)


# ---------------------------------------------------------------------------
# Manager
# ---------------------------------------------------------------------------


class SessionManager:
    """Authenticates wallet addresses against the registry and tracks sessions."""

    def __init__(
        self,
        lookup: IdentityLookup,
        store: SessionStore | None = None,
        *,
        admin_address: str = "",
    ) -> None:
        self._lookup = lookup
        self._store = store if store is not None else SessionStore()
        self._admin_address = admin_address.lower()

    @property
    def store(self) -> SessionStore:
        return self._store

    def current(self, session_id: str | None) -> Session | None:
        return self._store.get(session_id)

    async def authenticate(
        self,
        address: str | None,
        context: SessionContext | None = None,
    ) -> Session:
        """Resolve ``address`` to a session, moving ``context`` through its states.

        A registered but unapproved identity still gets a session (state
        PENDING); page authorization denies it until approval. Failures
        leave the context DENIED; nothing is retried.
        """
        ctx = context if context is not None else SessionContext()
        ctx.state = SessionState.AUTHENTICATING
        ctx.session = None
        ctx.error = None

        try:
            session = await self._resolve(address)
        except EVaultError as exc:
            ctx.state = SessionState.DENIED
            ctx.error = exc.message
            logger.info("authentication_denied", reason=type(exc).__name__, address=address)
            raise

        ctx.session = session
        ctx.state = SessionState.APPROVED if session.is_approved else SessionState.PENDING
        logger.info(
            "authenticated",
            address=session.address,
            role=session.role,
            state=ctx.state.value,
        )
        return session

    def logout(self, session_id: str | None, context: SessionContext | None = None) -> None:
        """Destroy the session; unknown or missing ids are ignored."""
        if self._store.destroy(session_id):
            logger.info("logged_out")
        if context is not None:
            context.state = SessionState.ANONYMOUS
            context.session = None
            context.error = None

    async def _resolve(self, address: str | None) -> Session:
        address = (address or "").strip()
        if not address:
            raise NotConnected("Please connect your wallet first")

        if self._admin_address and address.lower() == self._admin_address:
            return self._store.create(address=address, role=Role.ADMIN.value, is_approved=True)

        try:
            identity = await self._lookup.fetch_identity(address)
        except EVaultError as exc:
            raise LookupFailed(
                f"Could not look up the wallet identity: {exc.message}",
                details={"address": address, "cause": type(exc).__name__},
            ) from exc

        if not identity.is_registered or not identity.role:
            raise Unregistered(
                "This wallet address is not registered. Please register first.",
                details={"address": address},
            )

        return self._store.create(
            address=address,
            role=identity.role,
            is_approved=identity.is_approved,
        )
