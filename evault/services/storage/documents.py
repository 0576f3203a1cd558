"""Document upload bridge: browser file → temp file → Filebase → chain.

Uploads are spooled to a temporary file under the upload directory while
the byte count is checked against the ceiling, then put to the bucket.
Recording a stored document on a case is a second, separate step; when it
fails the stored object is deleted again so the bucket holds no orphans.
"""

from __future__ import annotations

import os
import tempfile
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Protocol

import structlog

from evault.core.exceptions import EVaultError, MissingFile, MissingOwner, TooLarge
from evault.models.domain import DocumentMetadata, StoredObject, TransactionRecord
from evault.services.chain.bridge import ChainBridge
from evault.services.storage.filebase import FilebaseStorage

logger: structlog.stdlib.BoundLogger = structlog.get_logger()

CHUNK_SIZE = 1024 * 1024


class UploadSource(Protocol):
    """The parts of ``fastapi.UploadFile`` the bridge relies on."""

    filename: str | None
    content_type: str | None

    async def read(self, size: int = -1) -> bytes: ...


@dataclass(frozen=True)
class RecordedUpload:
    stored: StoredObject
    transaction: TransactionRecord


class DocumentUploadBridge:
    """Moves uploaded files into the pinning bucket and onto case records."""

    def __init__(
        self,
        storage: FilebaseStorage,
        chain: ChainBridge,
        *,
        upload_dir: Path,
        max_bytes: int,
    ) -> None:
        self._storage = storage
        self._chain = chain
        self._upload_dir = upload_dir
        self._max_bytes = max_bytes

    def gateway_url(self, cid: str) -> str:
        return self._storage.public_url(cid)

    async def upload_file(self, file: UploadSource | None, owner: str | None) -> StoredObject:
        """Store ``file`` under the owner's prefix and return its CID and gateway URL."""
        if file is None or not file.filename:
            raise MissingFile("No file uploaded")
        owner = (owner or "").strip()
        if not owner:
            raise MissingOwner("User address is required")

        original_name = Path(file.filename).name
        key = f"{owner}/{uuid.uuid4()}-{original_name}"
        metadata = {
            "user-address": owner,
            "original-name": original_name,
            "upload-date": _iso_now(),
        }
        log = logger.bind(owner=owner, key=key)

        self._upload_dir.mkdir(parents=True, exist_ok=True)
        fd, spool_name = tempfile.mkstemp(prefix="upload-", dir=self._upload_dir)
        os.close(fd)
        spool = Path(spool_name)
        try:
            size = await self._spool(file, spool)
            log.info("upload_spooled", size_bytes=size)
            cid = await self._storage.put_object(
                key,
                spool,
                content_type=file.content_type,
                metadata=metadata,
            )
        finally:
            spool.unlink(missing_ok=True)

        return StoredObject(cid=cid, url=self.gateway_url(cid), key=key, metadata=metadata)

    async def record_document(
        self,
        case_id: int,
        cid: str,
        metadata: DocumentMetadata,
        *,
        account: str | None = None,
    ) -> TransactionRecord:
        return await self._chain.record_document(case_id, cid, metadata, account=account)

    async def upload_and_record(
        self,
        file: UploadSource | None,
        owner: str | None,
        case_id: int,
        *,
        document_type: str | None = None,
        is_public: bool = False,
    ) -> RecordedUpload:
        """Upload, then attach to ``case_id``; a failed attach deletes the upload."""
        stored = await self.upload_file(file, owner)
        name = stored.metadata["original-name"]
        metadata = DocumentMetadata(
            name=name,
            document_type=document_type or _document_type(name),
            is_public=is_public,
        )
        try:
            transaction = await self.record_document(case_id, stored.cid, metadata, account=owner)
        except EVaultError as exc:
            logger.warning(
                "document_record_failed_compensating",
                case_id=case_id,
                key=stored.key,
                error=exc.message,
            )
            try:
                await self._storage.delete_object(stored.key)
            except EVaultError as cleanup_exc:
                logger.error("compensating_delete_failed", key=stored.key, error=cleanup_exc.message)
            raise
        return RecordedUpload(stored=stored, transaction=transaction)

    async def _spool(self, file: UploadSource, target: Path) -> int:
        size = 0
        with target.open("wb") as out:
            while chunk := await file.read(CHUNK_SIZE):
                size += len(chunk)
                if size > self._max_bytes:
                    logger.warning("upload_rejected_too_large", limit_bytes=self._max_bytes)
                    raise TooLarge(
                        f"File exceeds the upload limit of {self._max_bytes} bytes",
                        limit_bytes=self._max_bytes,
                    )
                out.write(chunk)
        return size


def _iso_now() -> str:
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _document_type(name: str) -> str:
    suffix = Path(name).suffix.lstrip(".").lower()
    return suffix or "file"
