"""Blob storage writer for the sync output (S3, R2 or any S3-compatible store)."""

from __future__ import annotations

import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from scripts.groupsync.config import StorageConfig

logger = logging.getLogger("groupsync.storage")


class StorageError(Exception):
    """The put-object call failed."""


class BlobStore:
    """Thin wrapper around a boto3 S3 client bound to one bucket."""

    def __init__(self, config: StorageConfig, client=None) -> None:
        if not config.bucket:
            raise ValueError("STORAGE_BUCKET must be set to persist sync output")
        self.bucket = config.bucket
        self._client = client or boto3.client(
            "s3",
            region_name=config.region,
            endpoint_url=config.endpoint_url,
        )

    def put_json(self, object_name: str, payload: str) -> None:
        """Write payload under object_name, replacing any previous object."""
        try:
            self._client.put_object(
                Bucket=self.bucket,
                Key=object_name,
                Body=payload.encode("utf-8"),
                ContentType="application/json",
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(
                f"Failed to write s3://{self.bucket}/{object_name}: {exc}"
            ) from exc
        logger.info(
            "Stored sync output",
            extra={"object_name": object_name},
        )
