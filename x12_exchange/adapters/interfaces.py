"""Typed interfaces for adapter-layer responsibilities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from x12_exchange.domain import Destination, Envelope, RemoteEntry


@dataclass(frozen=True)
class GuideSummary:
    """Authoritative guide selected for one translation.

    Attributes:
        guide_id: Guide identifier.
        transaction_set_type: Transaction set code the guide targets.
    """

    guide_id: str
    transaction_set_type: str


class GuideResolverPort(Protocol):
    """Port definition for resolving the guide used to translate one event."""

    def adapter_resolve_guide(self, candidate_guide_ids: list[str], transaction_set_type: str) -> GuideSummary:
        """Resolve exactly one guide among candidates targeting the transaction set type.

        Args:
            candidate_guide_ids: Guide ids configured for the partner pair.
            transaction_set_type: Transaction set code of the event.

        Returns:
            GuideSummary: Selected guide.

        Raises:
            GuideResolutionError: Raised when zero or several candidates match.
        """


class MappingInvokerPort(Protocol):
    """Port definition for running a named mapping over an input document."""

    def adapter_invoke_mapping(self, mapping_id: str, input_payload: Any) -> Any:
        """Transform arbitrary input JSON into guide-schema JSON.

        Args:
            mapping_id: Mapping identifier.
            input_payload: Mapping input document.

        Returns:
            Any: Guide-schema JSON.

        Raises:
            MappingInvocationError: Raised when the mapping call fails.
        """


class TranslatorPort(Protocol):
    """Port definition for translating guide JSON into X12 EDI text."""

    def adapter_translate_json_to_edi(self, guide_json: Any, guide_id: str, envelope: Envelope) -> str:
        """Translate guide-schema JSON plus envelope into serialized EDI.

        Args:
            guide_json: Guide-schema JSON.
            guide_id: Guide used for translation.
            envelope: Shared interchange and group envelope.

        Returns:
            str: Serialized X12 EDI document.

        Raises:
            TranslationError: Raised when translation fails.
        """


class DeliveryPort(Protocol):
    """Port definition for delivering translated documents."""

    def adapter_deliver(self, destination: Destination, edi_text: str) -> dict[str, object]:
        """Deliver one translated document to one destination.

        Args:
            destination: Bucket or webhook destination.
            edi_text: Serialized EDI document.

        Returns:
            dict[str, object]: Destination-specific delivery confirmation.

        Raises:
            DeliveryError: Raised when the transport rejects the document.
        """


class ObjectStoragePort(Protocol):
    """Port definition for object writes to a bucket."""

    def storage_put_object(self, bucket_name: str, key: str, body: bytes) -> None:
        """Write one object.

        Args:
            bucket_name: Target bucket.
            key: Object key.
            body: Object bytes.

        Returns:
            None: Object is written as a side effect.

        Raises:
            ObjectStorageError: Raised when the write fails.
        """


class RemoteFileClientPort(Protocol):
    """Port definition for one scoped connection to a remote file server.

    Implementations are context managers: entering connects, exiting always
    disconnects, including when the body raises.
    """

    def __enter__(self) -> RemoteFileClientPort:
        """Connect and return the connected client."""

    def __exit__(self, exc_type, exc, traceback) -> bool:
        """Disconnect unconditionally."""

    def remote_list_directory(self, path: str) -> list[RemoteEntry]:
        """List the children of a remote directory.

        An empty list always means an existing, empty directory.

        Args:
            path: Remote directory path.

        Returns:
            list[RemoteEntry]: Listing entries in server order.

        Raises:
            RemoteFileError: Raised when the path is missing, is not a directory or cannot be listed.
        """

    def remote_list_entries(self, path: str) -> list[RemoteEntry]:
        """List the matches of one remote path.

        A directory path yields its children, a file path yields one entry
        describing the file, and a path the server reports as missing yields
        an empty list.

        Args:
            path: Remote path.

        Returns:
            list[RemoteEntry]: Listing entries in server order.

        Raises:
            RemoteFileError: Raised when listing fails for other reasons.
        """

    def remote_get_file(self, path: str) -> bytes:
        """Download one remote file.

        Raises:
            RemoteFileError: Raised when download fails.
        """

    def remote_delete_file(self, path: str) -> None:
        """Delete one remote file.

        Raises:
            RemoteFileError: Raised when delete fails.
        """
