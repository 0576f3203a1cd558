"""S3-compatible client for the Filebase IPFS pinning bucket.

boto3 is synchronous, so every call is pushed onto a worker thread with
``asyncio.to_thread``. Filebase pins each object on IPFS and reports the
content identifier in the ``x-amz-meta-cid`` response header; older buckets
only expose it as the ETag.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING, Any

import boto3
import structlog
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from evault.core.exceptions import StorageError

if TYPE_CHECKING:
    from evault.core.config import Settings

logger: structlog.stdlib.BoundLogger = structlog.get_logger()

_CID_HEADER = "x-amz-meta-cid"


class FilebaseStorage:
    """Thin async wrapper over a boto3 S3 client bound to one bucket."""

    def __init__(self, client: Any, *, bucket: str, gateway_url: str) -> None:
        self._client = client
        self._bucket = bucket
        self._gateway_url = gateway_url.rstrip("/")

    @classmethod
    def from_settings(cls, settings: Settings) -> FilebaseStorage:
        client = boto3.client(
            "s3",
            endpoint_url=settings.filebase_endpoint_url,
            region_name=settings.filebase_region,
            aws_access_key_id=settings.filebase_api_key or None,
            aws_secret_access_key=settings.filebase_secret_key or None,
            config=Config(signature_version="s3v4"),
        )
        return cls(client, bucket=settings.filebase_bucket, gateway_url=settings.ipfs_gateway_url)

    @property
    def bucket(self) -> str:
        return self._bucket

    def public_url(self, cid: str) -> str:
        return f"{self._gateway_url}/{cid}"

    async def put_object(
        self,
        key: str,
        source: Path,
        *,
        content_type: str | None,
        metadata: dict[str, str],
    ) -> str:
        """Upload ``source`` under ``key`` and return its content identifier."""
        self._require_bucket()
        response = await asyncio.to_thread(self._put, key, source, content_type, metadata)
        cid = _extract_cid(response)
        if not cid:
            raise StorageError("Filebase did not return a content identifier", details={"key": key})
        logger.info("object_stored", bucket=self._bucket, key=key, cid=cid)
        return cid

    async def delete_object(self, key: str) -> None:
        self._require_bucket()
        try:
            await asyncio.to_thread(self._client.delete_object, Bucket=self._bucket, Key=key)
        except (ClientError, BotoCoreError) as exc:
            raise StorageError(f"Failed to delete {key}: {exc}", details={"key": key}) from exc
        logger.info("object_deleted", bucket=self._bucket, key=key)

    async def head_bucket(self) -> None:
        """Raise StorageError unless the bucket is reachable with our credentials."""
        self._require_bucket()
        try:
            await asyncio.to_thread(self._client.head_bucket, Bucket=self._bucket)
        except (ClientError, BotoCoreError) as exc:
            raise StorageError(f"Bucket {self._bucket} is not reachable: {exc}") from exc

    def _put(
        self,
        key: str,
        source: Path,
        content_type: str | None,
        metadata: dict[str, str],
    ) -> dict[str, Any]:
        params: dict[str, Any] = {"Bucket": self._bucket, "Key": key, "Metadata": metadata}
        if content_type:
            params["ContentType"] = content_type
        try:
            with source.open("rb") as body:
                return self._client.put_object(Body=body, **params)
        except (ClientError, BotoCoreError) as exc:
            logger.error("object_store_failed", bucket=self._bucket, key=key, error=str(exc))
            raise StorageError("Failed to upload file to Filebase", details={"key": key}) from exc

    def _require_bucket(self) -> None:
        if not self._bucket:
            raise StorageError("No Filebase bucket is configured")


def _extract_cid(response: dict[str, Any]) -> str:
    headers = response.get("ResponseMetadata", {}).get("HTTPHeaders", {})
    cid = headers.get(_CID_HEADER)
    if cid:
        return str(cid)
    return str(response.get("ETag", "")).replace('"', "")
