"""Regression tests for destination delivery and object storage adapters."""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest
from botocore.exceptions import ClientError

from x12_exchange.adapters import (
    DestinationDeliveryAdapter,
    LocalObjectStorageAdapter,
    S3ObjectStorageAdapter,
    adapter_build_object_storage,
)
from x12_exchange.domain import BucketDestination, WebhookDestination
from x12_exchange.domain.errors import DeliveryError, ObjectStorageError


class _S3ClientStub:
    """boto3 S3 client stub capturing `put_object` calls."""

    def __init__(self, error: Exception | None = None):
        self.error = error
        self.put_calls: list[dict[str, object]] = []

    def put_object(self, **kwargs) -> dict[str, object]:
        """Capture call arguments.

        Raises:
            Exception: Raised when configured with an error.
        """

        self.put_calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return {"ETag": '"etag"'}


class _ObjectStorageStub:
    def __init__(self, error: Exception | None = None):
        self.error = error
        self.put_calls: list[tuple[str, str, bytes]] = []

    def storage_put_object(self, bucket_name: str, key: str, body: bytes) -> None:
        self.put_calls.append((bucket_name, key, body))
        if self.error is not None:
            raise self.error


def test_adapters_s3_storage_strips_leading_slash() -> None:
    client = _S3ClientStub()
    storage = S3ObjectStorageAdapter(region_name="us-east-1", client=client)

    storage.storage_put_object("edi-bucket", "/trading_partners/a.edi", b"ISA~")

    assert client.put_calls == [{"Bucket": "edi-bucket", "Key": "trading_partners/a.edi", "Body": b"ISA~"}]


def test_adapters_s3_storage_maps_client_errors() -> None:
    client = _S3ClientStub(
        error=ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutObject")
    )
    storage = S3ObjectStorageAdapter(region_name="us-east-1", client=client)

    with pytest.raises(ObjectStorageError, match="s3://edi-bucket/a.edi"):
        storage.storage_put_object("edi-bucket", "a.edi", b"ISA~")


def test_adapters_local_storage_writes_below_bucket_directory(tmp_path: Path) -> None:
    storage = LocalObjectStorageAdapter(root_directory=str(tmp_path))

    storage.storage_put_object("edi-bucket", "trading_partners/R/outbound/42-850.edi", b"ISA~")

    assert (tmp_path / "edi-bucket" / "trading_partners" / "R" / "outbound" / "42-850.edi").read_bytes() == b"ISA~"


@pytest.mark.parametrize("key", ["", "/", "../escape.edi", "a/../../b.edi"])
def test_adapters_local_storage_rejects_escaping_keys(tmp_path: Path, key: str) -> None:
    storage = LocalObjectStorageAdapter(root_directory=str(tmp_path))

    with pytest.raises(ObjectStorageError, match="invalid object key"):
        storage.storage_put_object("edi-bucket", key, b"ISA~")


def test_adapters_build_object_storage_selects_backend(tmp_path: Path) -> None:
    storage = adapter_build_object_storage(
        backend="local",
        region_name="us-east-1",
        endpoint_url=None,
        local_root_directory=str(tmp_path),
    )

    assert isinstance(storage, LocalObjectStorageAdapter)
    with pytest.raises(ValueError, match="unsupported object storage backend"):
        adapter_build_object_storage("gcs", "us-east-1", None, str(tmp_path))


def test_adapters_deliver_bucket_writes_encoded_document() -> None:
    storage = _ObjectStorageStub()
    adapter = DestinationDeliveryAdapter(object_storage=storage)

    result = adapter.adapter_deliver(
        BucketDestination(type="bucket", bucket_name="edi-bucket", path="out/1-850.edi"),
        "ISA*00~",
    )

    assert storage.put_calls == [("edi-bucket", "out/1-850.edi", b"ISA*00~")]
    assert result == {"type": "bucket", "bucketName": "edi-bucket", "path": "out/1-850.edi"}


def test_adapters_deliver_bucket_maps_storage_error() -> None:
    adapter = DestinationDeliveryAdapter(object_storage=_ObjectStorageStub(error=ObjectStorageError("disk full")))

    with pytest.raises(DeliveryError, match="disk full"):
        adapter.adapter_deliver(BucketDestination(type="bucket", bucket_name="b", path="p"), "ISA~")


def test_adapters_deliver_webhook_posts_edi_body() -> None:
    """POST the EDI text with the X12 content type and report the status code.

    Returns:
        None: Assertions validate request body and result.

    Raises:
        AssertionError: Raised when webhook delivery regresses.
    """

    captured: dict[str, object] = {}

    def _handler(request: httpx.Request) -> httpx.Response:
        captured["method"] = request.method
        captured["url"] = str(request.url)
        captured["content_type"] = request.headers["Content-Type"]
        captured["body"] = request.content
        return httpx.Response(202)

    adapter = DestinationDeliveryAdapter(object_storage=_ObjectStorageStub(), transport=httpx.MockTransport(_handler))

    result = adapter.adapter_deliver(WebhookDestination(type="webhook", url="https://partner.test/edi"), "ISA*00~")

    assert captured == {
        "method": "POST",
        "url": "https://partner.test/edi",
        "content_type": "application/edi-x12",
        "body": b"ISA*00~",
    }
    assert result == {"type": "webhook", "url": "https://partner.test/edi", "statusCode": 202}


@pytest.mark.parametrize("failure", ["status", "transport"])
def test_adapters_deliver_webhook_failures_raise_delivery_error(failure: str) -> None:
    def _handler(request: httpx.Request) -> httpx.Response:
        if failure == "transport":
            raise httpx.ReadTimeout("timed out", request=request)
        return httpx.Response(500, text="boom")

    adapter = DestinationDeliveryAdapter(object_storage=_ObjectStorageStub(), transport=httpx.MockTransport(_handler))

    with pytest.raises(DeliveryError, match="webhook delivery to https://partner.test/edi failed"):
        adapter.adapter_deliver(WebhookDestination(type="webhook", url="https://partner.test/edi"), "ISA~")
