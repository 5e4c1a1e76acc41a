"""Object storage adapters for S3-compatible buckets and the local filesystem."""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from x12_exchange.domain.errors import ObjectStorageError

from .interfaces import ObjectStoragePort

logger = logging.getLogger(__name__)


class S3ObjectStorageAdapter(ObjectStoragePort):
    """Object storage backed by an S3-compatible API through boto3."""

    def __init__(self, region_name: str, endpoint_url: str | None = None, client: Any | None = None):
        """Initialize S3 object storage adapter.

        Args:
            region_name: AWS region of the client.
            endpoint_url: Optional S3-compatible endpoint override.
            client: Optional preconfigured boto3 S3 client.

        Returns:
            None: Initializer does not return a value.
        """

        self._client = client or boto3.client("s3", region_name=region_name, endpoint_url=endpoint_url)

    def storage_put_object(self, bucket_name: str, key: str, body: bytes) -> None:
        """Write one object with `put_object`.

        Args:
            bucket_name: Target bucket.
            key: Object key.
            body: Object bytes.

        Returns:
            None: Object is written as a side effect.

        Raises:
            ObjectStorageError: Raised when the S3 call fails.
        """

        normalized_key = key.lstrip("/")
        try:
            self._client.put_object(Bucket=bucket_name, Key=normalized_key, Body=body)
        except (BotoCoreError, ClientError) as error:
            raise ObjectStorageError(f"failed to write s3://{bucket_name}/{normalized_key}: {error}") from error
        logger.info("wrote s3://%s/%s (%d bytes)", bucket_name, normalized_key, len(body))


class LocalObjectStorageAdapter(ObjectStoragePort):
    """Object storage emulated on the local filesystem as `<root>/<bucket>/<key>`."""

    def __init__(self, root_directory: str):
        if not root_directory.strip():
            raise ValueError("root_directory must not be blank")
        self._root_directory = Path(root_directory)

    def storage_put_object(self, bucket_name: str, key: str, body: bytes) -> None:
        """Write one object below the bucket directory.

        Raises:
            ObjectStorageError: Raised for keys escaping the bucket or filesystem failures.
        """

        key_parts = [part for part in PurePosixPath(key).parts if part not in {"/", ""}]
        if not key_parts or ".." in key_parts:
            raise ObjectStorageError(f"invalid object key: {key!r}")

        target_path = self._root_directory.joinpath(bucket_name, *key_parts)
        try:
            target_path.parent.mkdir(parents=True, exist_ok=True)
            target_path.write_bytes(body)
        except OSError as error:
            raise ObjectStorageError(f"failed to write {target_path}: {error}") from error
        logger.info("wrote %s (%d bytes)", target_path, len(body))


def adapter_build_object_storage(
    backend: str,
    region_name: str,
    endpoint_url: str | None,
    local_root_directory: str,
) -> ObjectStoragePort:
    """Build the configured object storage adapter.

    Args:
        backend: `s3` or `local`.
        region_name: AWS region for the `s3` backend.
        endpoint_url: Optional S3 endpoint override.
        local_root_directory: Root directory for the `local` backend.

    Returns:
        ObjectStoragePort: Storage adapter.

    Raises:
        ValueError: Raised for unknown backends.
    """

    if backend == "s3":
        return S3ObjectStorageAdapter(region_name=region_name, endpoint_url=endpoint_url)
    if backend == "local":
        return LocalObjectStorageAdapter(root_directory=local_root_directory)
    raise ValueError(f"unsupported object storage backend: {backend}")
