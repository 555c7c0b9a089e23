"""Blob storage for rendered cards: upload bytes, then mint a signed URL."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable
from urllib.parse import quote

import boto3

from medcard.exceptions import BlobStoreError

if TYPE_CHECKING:
    from medcard.core.config import StorageConfig

log = logging.getLogger(__name__)


@runtime_checkable
class IBlobStore(Protocol):
    """Path-addressed object storage with time-limited read URLs."""

    def upload(self, path: str, data: bytes, content_type: str) -> None:
        """Write ``data`` at ``path``, replacing any existing object."""
        ...

    def signed_url(self, path: str, ttl_seconds: int) -> str:
        """Return a URL granting read access to ``path`` for ``ttl_seconds``."""
        ...


class S3BlobStore:
    """Stores blobs in an S3 bucket and signs ``get_object`` URLs."""

    def __init__(self, bucket: str, region: str = "ap-northeast-2", client: Any = None) -> None:
        self._bucket = bucket
        self._s3 = client or boto3.client("s3", region_name=region)

    def upload(self, path: str, data: bytes, content_type: str) -> None:
        try:
            self._s3.put_object(Bucket=self._bucket, Key=path, Body=data, ContentType=content_type)
        except Exception as e:
            log.error("Blob upload failed", extra={"bucket": self._bucket, "path": path})
            raise BlobStoreError(f"Upload of {path} failed: {e}") from e
        log.debug("Uploaded %d bytes to s3://%s/%s", len(data), self._bucket, path)

    def signed_url(self, path: str, ttl_seconds: int) -> str:
        try:
            return self._s3.generate_presigned_url(
                "get_object",
                Params={"Bucket": self._bucket, "Key": path},
                ExpiresIn=ttl_seconds,
            )
        except Exception as e:
            log.error("Signed URL issuance failed", extra={"bucket": self._bucket, "path": path})
            raise BlobStoreError(f"Signing {path} failed: {e}") from e


class MemoryBlobStore:
    """Dict-backed blob store for tests and local development."""

    def __init__(self, bucket: str = "medical-records") -> None:
        self._bucket = bucket
        self.objects: dict[str, tuple[bytes, str]] = {}

    def upload(self, path: str, data: bytes, content_type: str) -> None:
        self.objects[path] = (data, content_type)

    def signed_url(self, path: str, ttl_seconds: int) -> str:
        if path not in self.objects:
            raise BlobStoreError(f"Cannot sign missing object: {path}")
        expires = int(time.time()) + ttl_seconds
        return f"memory://{self._bucket}/{quote(path)}?expires={expires}"


def create_blob_store(config: StorageConfig) -> IBlobStore:
    """Build the blob store named by ``config.backend``."""
    if config.backend == "memory":
        return MemoryBlobStore(bucket=config.bucket)
    return S3BlobStore(bucket=config.bucket, region=config.aws_region)
