"""S3 persistence backend: stores records as JSON objects in AWS S3."""

from __future__ import annotations

import logging
from typing import Any

import boto3

log = logging.getLogger(__name__)


class S3PersistenceBackend:
    """Stores each intake document as ``<prefix><key>.json`` in an S3 bucket."""

    def __init__(
        self,
        bucket: str,
        prefix: str = "records/",
        region: str = "ap-northeast-2",
        client: Any = None,
    ) -> None:
        self._bucket = bucket
        self._prefix = prefix
        self._s3 = client or boto3.client("s3", region_name=region)

    def _full_key(self, key: str) -> str:
        return f"{self._prefix}{key}.json"

    def save(self, key: str, data: str) -> None:
        self._s3.put_object(
            Bucket=self._bucket,
            Key=self._full_key(key),
            Body=data.encode("utf-8"),
            ContentType="application/json",
        )
        log.debug("Saved %s to s3://%s/%s", key, self._bucket, self._full_key(key))

    def load(self, key: str) -> str:
        try:
            response = self._s3.get_object(
                Bucket=self._bucket,
                Key=self._full_key(key),
            )
        except self._s3.exceptions.NoSuchKey:
            raise KeyError(f"Not found in S3: {key}") from None
        return response["Body"].read().decode("utf-8")

    def list_keys(self, prefix: str = "") -> list[str]:
        full_prefix = f"{self._prefix}{prefix}"
        paginator = self._s3.get_paginator("list_objects_v2")
        keys = []
        for page in paginator.paginate(Bucket=self._bucket, Prefix=full_prefix):
            for obj in page.get("Contents", []):
                key = obj["Key"]
                if key.startswith(self._prefix):
                    key = key[len(self._prefix):]
                if key.endswith(".json"):
                    key = key[:-5]
                keys.append(key)
        return sorted(keys)
