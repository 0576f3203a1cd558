"""GET /transactions: confirmed chain writes, newest first."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from evault.api.dependencies import get_chain_bridge
from evault.models.domain import TransactionRecord
from evault.services.chain import ChainBridge

router = APIRouter(tags=["transactions"])


@router.get("/transactions", response_model=list[TransactionRecord], summary="Transaction log")
async def list_transactions(
    address: str | None = Query(default=None),
    bridge: ChainBridge = Depends(get_chain_bridge),
) -> list[TransactionRecord]:
    return bridge.ledger.entries(address=address)
