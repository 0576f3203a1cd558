"""Integration tests for the session endpoints.

The registry lookup is the in-memory FakeUserRegistry behind a real
ChainBridge; the session manager is swapped in through dependency
overrides.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from evault.api.dependencies import get_session_manager
from evault.services.session import SessionManager
from tests.conftest import (
    ADMIN_ADDRESS,
    CLIENT_ADDRESS,
    JUDGE_ADDRESS,
    LAWYER_ADDRESS,
    STRANGER_ADDRESS,
    FakeUserRegistry,
)

if TYPE_CHECKING:
    from fastapi import FastAPI
    from httpx import AsyncClient

    from evault.services.chain import ChainBridge

pytestmark = pytest.mark.integration


@pytest.fixture(autouse=True)
def _override_sessions(app: FastAPI, bridge: ChainBridge, registry: FakeUserRegistry) -> None:
    registry.add(CLIENT_ADDRESS, "client", approved=True)
    registry.add(LAWYER_ADDRESS, "lawyer", approved=False, id_number="BAR099")
    registry.add(JUDGE_ADDRESS, "judge", approved=True, id_number="JID099")
    manager = SessionManager(bridge, admin_address=ADMIN_ADDRESS)
    app.dependency_overrides[get_session_manager] = lambda: manager


async def _login(client: AsyncClient, address: str) -> dict:
    resp = await client.post("/api/session", headers={"X-User-Address": address})
    assert resp.status_code == 200, resp.text
    return resp.json()


class TestLogin:
    async def test_approved_client(self, client: AsyncClient):
        body = await _login(client, CLIENT_ADDRESS)
        assert body["state"] == "approved"
        assert body["session"]["role"] == "client"
        assert body["session"]["sessionId"]
        assert body["route"] == {
            "role": "client",
            "path": "/client-dashboard.html",
            "unknownRole": False,
            "message": None,
        }

    async def test_pending_lawyer(self, client: AsyncClient):
        body = await _login(client, LAWYER_ADDRESS)
        assert body["state"] == "pending"
        assert body["session"]["isApproved"] is False

    async def test_admin(self, client: AsyncClient):
        body = await _login(client, ADMIN_ADDRESS)
        assert body["session"]["role"] == "admin"
        assert body["route"]["path"] == "/admin-dashboard.html"

    async def test_no_address(self, client: AsyncClient):
        resp = await client.post("/api/session")
        assert resp.status_code == 401
        assert resp.json()["errorType"] == "NotConnected"

    async def test_unregistered(self, client: AsyncClient):
        resp = await client.post("/api/session", headers={"X-User-Address": STRANGER_ADDRESS})
        assert resp.status_code == 401
        assert resp.json()["errorType"] == "Unregistered"

    async def test_lookup_failure(self, client: AsyncClient, registry: FakeUserRegistry):
        def broken(address: str) -> bool:
            raise OSError("node unreachable")

        registry.call_isUserRegistered = broken  # type: ignore[method-assign]
        resp = await client.post("/api/session", headers={"X-User-Address": CLIENT_ADDRESS})
        assert resp.status_code == 503
        assert resp.json()["errorType"] == "LookupFailed"


class TestSessionLifecycle:
    async def test_read_current_session(self, client: AsyncClient):
        session_id = (await _login(client, JUDGE_ADDRESS))["session"]["sessionId"]

        resp = await client.get("/api/session", headers={"X-Session-ID": session_id})

        assert resp.status_code == 200
        assert resp.json()["session"]["role"] == "judge"

    async def test_no_session(self, client: AsyncClient):
        resp = await client.get("/api/session", headers={"X-Session-ID": "bogus"})
        assert resp.status_code == 401

    async def test_logout(self, client: AsyncClient):
        session_id = (await _login(client, CLIENT_ADDRESS))["session"]["sessionId"]

        resp = await client.delete("/api/session", headers={"X-Session-ID": session_id})
        assert resp.status_code == 204

        resp = await client.get("/api/session", headers={"X-Session-ID": session_id})
        assert resp.status_code == 401

    async def test_logout_without_session_always_succeeds(self, client: AsyncClient):
        assert (await client.delete("/api/session")).status_code == 204
        assert (await client.delete("/api/session", headers={"X-Session-ID": "x"})).status_code == 204

    async def test_relogin_replaces_session(self, client: AsyncClient):
        first = (await _login(client, CLIENT_ADDRESS))["session"]["sessionId"]
        resp = await client.post(
            "/api/session",
            headers={"X-User-Address": JUDGE_ADDRESS, "X-Session-ID": first},
        )
        assert resp.json()["session"]["role"] == "judge"
        assert (await client.get("/api/session", headers={"X-Session-ID": first})).status_code == 401


class TestAuthorize:
    async def _decision(self, client: AsyncClient, path: str, session_id: str | None) -> dict:
        headers = {"X-Session-ID": session_id} if session_id else {}
        resp = await client.get("/api/session/authorize", params={"path": path}, headers=headers)
        assert resp.status_code == 200
        return resp.json()

    async def test_allowed_for_own_dashboard(self, client: AsyncClient):
        session_id = (await _login(client, CLIENT_ADDRESS))["session"]["sessionId"]
        body = await self._decision(client, "/client-dashboard.html", session_id)
        assert body == {"path": "/client-dashboard.html", "decision": "allowed", "expectedRole": "client"}

    async def test_denied_for_other_dashboard(self, client: AsyncClient):
        session_id = (await _login(client, CLIENT_ADDRESS))["session"]["sessionId"]
        body = await self._decision(client, "/judge-dashboard.html", session_id)
        assert body["decision"] == "denied"

    async def test_denied_while_pending(self, client: AsyncClient):
        session_id = (await _login(client, LAWYER_ADDRESS))["session"]["sessionId"]
        body = await self._decision(client, "/lawyer-dashboard.html", session_id)
        assert body["decision"] == "denied"

    async def test_denied_without_session(self, client: AsyncClient):
        body = await self._decision(client, "/client-dashboard.html", None)
        assert body["decision"] == "denied"

    async def test_page_without_role(self, client: AsyncClient):
        session_id = (await _login(client, CLIENT_ADDRESS))["session"]["sessionId"]
        body = await self._decision(client, "/index.html", session_id)
        assert body["decision"] == "denied"
        assert body["expectedRole"] is None


class TestRoute:
    async def test_known_role(self, client: AsyncClient):
        resp = await client.get("/api/session/route", params={"role": "judge"})
        assert resp.json()["path"] == "/judge-dashboard.html"

    async def test_unknown_role(self, client: AsyncClient):
        resp = await client.get("/api/session/route", params={"role": "bailiff"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["unknownRole"] is True
        assert body["path"] is None
        assert "Unknown user role" in body["message"]
