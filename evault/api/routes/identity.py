"""Identity registry endpoints.

POST /identity: register the signing wallet as client, lawyer, or judge
GET  /identity/{address}: registration, approval, and role of an address
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header

from evault.api.dependencies import get_chain_bridge
from evault.models.domain import IdentityStatus, TransactionRecord
from evault.models.requests import RegisterIdentityRequest
from evault.services.chain import ChainBridge

router = APIRouter(prefix="/identity", tags=["identity"])


@router.post(
    "",
    response_model=TransactionRecord,
    status_code=201,
    summary="Register an identity",
)
async def register_identity(
    body: RegisterIdentityRequest,
    x_user_address: str | None = Header(default=None),
    bridge: ChainBridge = Depends(get_chain_bridge),
) -> TransactionRecord:
    return await bridge.register_identity(
        body.name,
        body.role,
        body.id_number,
        email=body.email,
        account=body.account or x_user_address,
    )


@router.get("/{address}", response_model=IdentityStatus, summary="Identity of an address")
async def read_identity(
    address: str,
    bridge: ChainBridge = Depends(get_chain_bridge),
) -> IdentityStatus:
    return await bridge.fetch_identity(address)
