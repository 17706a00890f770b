"""Blob storage for trust artifact files (S3-compatible, via boto3).

A "container" maps to an S3 bucket. Blob names are
``<tenant-id>/<uuid4><ext>`` so one bucket can hold every tenant's files
without collisions.
"""

import asyncio
import logging
import os
import uuid
from dataclasses import dataclass
from functools import lru_cache
from typing import Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from app.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

MB = 1024 * 1024


class StorageError(Exception):
    """A blob storage operation failed."""


@dataclass
class StoredBlob:
    blob_name: str
    url: str
    size: int
    content_type: str


class BlobStorage(Protocol):
    async def upload(
        self,
        container: str,
        data: bytes,
        filename: str,
        content_type: str,
        tenant_id: uuid.UUID | str,
    ) -> StoredBlob: ...

    async def delete(self, container: str, blob_name: str) -> None: ...

    async def metadata(self, container: str, blob_name: str) -> StoredBlob: ...

    def url(self, container: str, blob_name: str) -> str: ...


def make_blob_name(tenant_id: uuid.UUID | str, filename: str) -> str:
    _, ext = os.path.splitext(filename or "")
    return f"{tenant_id}/{uuid.uuid4()}{ext.lower()}"


def validate_file_type(content_type: str, allowed_types: list[str]) -> bool:
    return any(content_type.startswith(t) for t in allowed_types)


def validate_file_size(size: int, max_size_mb: int) -> bool:
    return size <= max_size_mb * MB


class S3BlobStorage:
    """BlobStorage on AWS S3 or any S3-compatible service (MinIO, Azurite gateways)."""

    def __init__(
        self,
        endpoint_url: str | None,
        access_key: str,
        secret_key: str,
        region: str = "us-east-1",
    ) -> None:
        self.endpoint_url = endpoint_url
        self.region = region
        self.client = boto3.client(
            "s3",
            endpoint_url=endpoint_url,
            aws_access_key_id=access_key or None,
            aws_secret_access_key=secret_key or None,
            region_name=region,
        )
        self._ready_buckets: set[str] = set()
        logger.info("Initialized S3 blob storage (endpoint=%s)", endpoint_url or "AWS S3")

    @classmethod
    def from_settings(cls, settings: Settings) -> "S3BlobStorage":
        return cls(
            endpoint_url=settings.storage_endpoint_url,
            access_key=settings.storage_access_key,
            secret_key=settings.storage_secret_key,
            region=settings.storage_region,
        )

    def url(self, container: str, blob_name: str) -> str:
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{container}/{blob_name}"
        return f"https://{container}.s3.{self.region}.amazonaws.com/{blob_name}"

    def _ensure_bucket(self, container: str) -> None:
        if container in self._ready_buckets:
            return
        try:
            self.client.head_bucket(Bucket=container)
        except ClientError:
            self.client.create_bucket(Bucket=container)
            logger.info("Created storage bucket %s", container)
        self._ready_buckets.add(container)

    async def upload(
        self,
        container: str,
        data: bytes,
        filename: str,
        content_type: str,
        tenant_id: uuid.UUID | str,
    ) -> StoredBlob:
        blob_name = make_blob_name(tenant_id, filename)

        def _put() -> None:
            self._ensure_bucket(container)
            self.client.put_object(
                Bucket=container, Key=blob_name, Body=data, ContentType=content_type
            )

        try:
            await asyncio.to_thread(_put)
        except (BotoCoreError, ClientError) as exc:
            logger.error("Blob upload failed for %s/%s: %s", container, filename, exc)
            raise StorageError("Failed to upload file to blob storage") from exc

        logger.info(
            "Blob uploaded: %s/%s (%d bytes)",
            container,
            blob_name,
            len(data),
            extra={"tenant_id": str(tenant_id)},
        )
        return StoredBlob(
            blob_name=blob_name,
            url=self.url(container, blob_name),
            size=len(data),
            content_type=content_type,
        )

    async def delete(self, container: str, blob_name: str) -> None:
        try:
            await asyncio.to_thread(self.client.delete_object, Bucket=container, Key=blob_name)
        except (BotoCoreError, ClientError) as exc:
            logger.error("Blob delete failed for %s/%s: %s", container, blob_name, exc)
            raise StorageError("Failed to delete file from blob storage") from exc
        logger.info("Blob deleted: %s/%s", container, blob_name)

    async def metadata(self, container: str, blob_name: str) -> StoredBlob:
        try:
            head = await asyncio.to_thread(self.client.head_object, Bucket=container, Key=blob_name)
        except (BotoCoreError, ClientError) as exc:
            logger.error("Blob metadata lookup failed for %s/%s: %s", container, blob_name, exc)
            raise StorageError("Failed to get file metadata") from exc
        return StoredBlob(
            blob_name=blob_name,
            url=self.url(container, blob_name),
            size=head.get("ContentLength", 0),
            content_type=head.get("ContentType", "application/octet-stream"),
        )


@lru_cache
def get_blob_storage() -> BlobStorage:
    """FastAPI dependency: process-wide storage client built from settings."""
    return S3BlobStorage.from_settings(get_settings())
