"""Document upload proxy.

POST /upload: pin a file in the Filebase bucket under the caller's address
GET  /file/{cid}: redirect to the public IPFS gateway
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, File, Header, UploadFile
from fastapi.responses import RedirectResponse

from evault.api.dependencies import get_upload_bridge
from evault.models.responses import UploadResponse
from evault.services.storage import DocumentUploadBridge

logger: structlog.stdlib.BoundLogger = structlog.get_logger()

router = APIRouter(tags=["files"])


@router.post("/upload", response_model=UploadResponse, summary="Upload a file to Filebase")
async def upload_file(
    file: UploadFile | None = File(default=None),
    x_user_address: str | None = Header(default=None),
    uploads: DocumentUploadBridge = Depends(get_upload_bridge),
) -> UploadResponse:
    stored = await uploads.upload_file(file, x_user_address)
    logger.info("file_uploaded", cid=stored.cid, key=stored.key)
    return UploadResponse(cid=stored.cid, url=stored.url, key=stored.key, metadata=stored.metadata)


@router.get("/file/{cid}", status_code=302, summary="Redirect to the IPFS gateway")
async def get_file(
    cid: str,
    uploads: DocumentUploadBridge = Depends(get_upload_bridge),
) -> RedirectResponse:
    return RedirectResponse(uploads.gateway_url(cid), status_code=302)
