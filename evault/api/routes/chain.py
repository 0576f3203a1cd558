"""Case-manager contract endpoints.

GET  /chain/network: chain id, network name, block explorer
GET  /chain/accounts: accounts the provider grants; the first signs
POST /chain/cases: register a case, returns its on-chain id
GET  /chain/cases?address=&role=: case ids linked to a party
GET  /chain/cases/{case_id}: one on-chain case
POST /chain/cases/{case_id}/documents: upload a file and attach it to a case
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, Header, Path, Query, UploadFile

from evault.api.dependencies import get_chain_bridge, get_upload_bridge
from evault.models.domain import ChainCase, NetworkInfo
from evault.models.requests import SubmitCaseRequest
from evault.models.responses import (
    AccountsResponse,
    CaseListResponse,
    CaseSubmittedResponse,
    DocumentRecordedResponse,
    UploadResponse,
)
from evault.services.chain import ChainBridge
from evault.services.storage import DocumentUploadBridge

router = APIRouter(prefix="/chain", tags=["chain"])


@router.get("/network", response_model=NetworkInfo, summary="Connected network")
async def network(bridge: ChainBridge = Depends(get_chain_bridge)) -> NetworkInfo:
    return await bridge.network_info()


@router.get("/accounts", response_model=AccountsResponse, summary="Provider accounts")
async def accounts(bridge: ChainBridge = Depends(get_chain_bridge)) -> AccountsResponse:
    granted = await bridge.connect()
    return AccountsResponse(accounts=granted, active_account=bridge.active_account)


@router.post(
    "/cases",
    response_model=CaseSubmittedResponse,
    status_code=201,
    summary="Register a case on chain",
)
async def submit_case(
    body: SubmitCaseRequest,
    x_user_address: str | None = Header(default=None),
    bridge: ChainBridge = Depends(get_chain_bridge),
) -> CaseSubmittedResponse:
    case_id = await bridge.submit_case(
        body.title,
        body.description,
        body.case_type,
        body.client,
        body.lawyer,
        body.judge,
        account=body.account or x_user_address,
    )
    return CaseSubmittedResponse(case_id=case_id)


@router.get("/cases", response_model=CaseListResponse, summary="Case ids for a party")
async def list_case_ids(
    address: str = Query(..., min_length=1),
    role: str = Query(..., min_length=1),
    bridge: ChainBridge = Depends(get_chain_bridge),
) -> CaseListResponse:
    return CaseListResponse(case_ids=await bridge.fetch_case_ids(address, role.lower()))


@router.get("/cases/{case_id}", response_model=ChainCase, summary="On-chain case")
async def read_case(
    case_id: int = Path(..., ge=1),
    bridge: ChainBridge = Depends(get_chain_bridge),
) -> ChainCase:
    return await bridge.get_case(case_id)


@router.post(
    "/cases/{case_id}/documents",
    response_model=DocumentRecordedResponse,
    status_code=201,
    summary="Upload a document and attach it to a case",
)
async def add_document(
    case_id: int = Path(..., ge=1),
    file: UploadFile | None = File(default=None),
    document_type: str | None = Form(default=None, alias="documentType"),
    is_public: bool = Form(default=False, alias="isPublic"),
    x_user_address: str | None = Header(default=None),
    uploads: DocumentUploadBridge = Depends(get_upload_bridge),
) -> DocumentRecordedResponse:
    """Two-phase: the file is removed from the bucket if the chain write fails."""
    recorded = await uploads.upload_and_record(
        file,
        x_user_address,
        case_id,
        document_type=document_type,
        is_public=is_public,
    )
    stored = recorded.stored
    return DocumentRecordedResponse(
        upload=UploadResponse(cid=stored.cid, url=stored.url, key=stored.key, metadata=stored.metadata),
        transaction=recorded.transaction,
    )
