"""Destination delivery adapter for bucket and webhook destinations."""

from __future__ import annotations

import logging
from typing import Final

import httpx

from x12_exchange.domain import BucketDestination, Destination, WebhookDestination
from x12_exchange.domain.errors import DeliveryError, ObjectStorageError

from .interfaces import DeliveryPort, ObjectStoragePort

logger = logging.getLogger(__name__)


class DestinationDeliveryAdapter(DeliveryPort):
    """Deliver translated EDI to buckets through object storage and to webhooks through httpx."""

    _EDI_CONTENT_TYPE: Final[str] = "application/edi-x12"

    def __init__(
        self,
        object_storage: ObjectStoragePort,
        webhook_timeout_seconds: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize destination delivery adapter.

        Args:
            object_storage: Storage used for bucket destinations.
            webhook_timeout_seconds: HTTP timeout for webhook calls.
            transport: Optional httpx transport override.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies are invalid.
        """

        if object_storage is None:
            raise ValueError("object_storage must not be None")
        if webhook_timeout_seconds <= 0:
            raise ValueError("webhook_timeout_seconds must be > 0")

        self._object_storage = object_storage
        self._webhook_timeout_seconds = webhook_timeout_seconds
        self._transport = transport

    def adapter_deliver(self, destination: Destination, edi_text: str) -> dict[str, object]:
        """Deliver one translated document.

        Args:
            destination: Bucket or webhook destination.
            edi_text: Serialized EDI document.

        Returns:
            dict[str, object]: Delivery confirmation describing where the document went.

        Raises:
            DeliveryError: Raised when the write or the HTTP call fails.
        """

        if isinstance(destination, BucketDestination):
            return self._adapter_deliver_to_bucket(destination=destination, edi_text=edi_text)
        if isinstance(destination, WebhookDestination):
            return self._adapter_deliver_to_webhook(destination=destination, edi_text=edi_text)
        raise DeliveryError(f"unsupported destination type: {type(destination).__name__}")

    def _adapter_deliver_to_bucket(self, destination: BucketDestination, edi_text: str) -> dict[str, object]:
        try:
            self._object_storage.storage_put_object(
                bucket_name=destination.bucket_name,
                key=destination.path,
                body=edi_text.encode("utf-8"),
            )
        except ObjectStorageError as error:
            raise DeliveryError(str(error)) from error
        return {
            "type": "bucket",
            "bucketName": destination.bucket_name,
            "path": destination.path,
        }

    def _adapter_deliver_to_webhook(self, destination: WebhookDestination, edi_text: str) -> dict[str, object]:
        try:
            with httpx.Client(timeout=self._webhook_timeout_seconds, transport=self._transport) as client:
                response = client.post(
                    destination.url,
                    content=edi_text.encode("utf-8"),
                    headers={"Content-Type": self._EDI_CONTENT_TYPE},
                )
        except httpx.HTTPError as error:
            raise DeliveryError(f"webhook delivery to {destination.url} failed: {error}") from error

        if response.is_error:
            raise DeliveryError(f"webhook delivery to {destination.url} failed: HTTP {response.status_code}")
        logger.info("delivered %d bytes to webhook %s", len(edi_text), destination.url)
        return {
            "type": "webhook",
            "url": destination.url,
            "statusCode": response.status_code,
        }
