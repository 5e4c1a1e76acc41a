"""Project-native typed exceptions for outbound delivery and inbound polling failures.

Every exception carries a deterministic `error_code` recorded in the execution
ledger. Fatal errors abort a whole execution; per-destination and per-file
errors are collected and reported next to the successful results.
"""

from __future__ import annotations


class ExchangeError(Exception):
    """Base exception for X12 exchange failures.

    Attributes:
        error_code: Deterministic error code for ledger records and API payloads.
    """

    default_error_code = "EXCHANGE_ERROR"

    def __init__(self, message: str, error_code: str | None = None):
        super().__init__(message)
        self.error_code = error_code or self.default_error_code


class InvalidOutboundEventError(ExchangeError, ValueError):
    """Outbound event failed shape validation at the ingress boundary."""

    default_error_code = "OUTBOUND_INVALID_EVENT"


class PartnerProfileNotFoundError(ExchangeError, LookupError):
    """No partner profile is stored for a partner id."""

    default_error_code = "OUTBOUND_PARTNER_PROFILE_NOT_FOUND"


class PartnershipNotFoundError(ExchangeError, LookupError):
    """No partnership is stored for a sender/receiver pair in either key order."""

    default_error_code = "OUTBOUND_PARTNERSHIP_NOT_FOUND"


class TransactionSetTypeError(ExchangeError, ValueError):
    """Transaction set type is missing from metadata and not derivable from the payload."""

    default_error_code = "OUTBOUND_TRANSACTION_SET_UNDETERMINED"


class GuideResolutionError(ExchangeError, LookupError):
    """Guide resolution returned no guide or more than one guide."""

    default_error_code = "OUTBOUND_GUIDE_RESOLUTION_ERROR"


class TransactionSetConfigError(ExchangeError, LookupError):
    """No single partnership transaction set config matches the resolved guide."""

    default_error_code = "OUTBOUND_TRANSACTION_SET_CONFIG_ERROR"


class FunctionalIdentifierCodeError(ExchangeError, LookupError):
    """Transaction set type has no known functional identifier code."""

    default_error_code = "OUTBOUND_FUNCTIONAL_IDENTIFIER_UNKNOWN"


class ControlNumberIssueError(ExchangeError, RuntimeError):
    """Control number could not be issued for a scope."""

    default_error_code = "OUTBOUND_CONTROL_NUMBER_ERROR"


class TransactionSetControlNumberError(ExchangeError, ValueError):
    """Transaction set control numbers are not the sequence 1..N."""

    default_error_code = "DESTINATION_CONTROL_NUMBER_SEQUENCE_ERROR"


class MappingInvocationError(ExchangeError, RuntimeError):
    """Mapping invocation failed or returned an unusable result."""

    default_error_code = "DESTINATION_MAPPING_ERROR"


class TranslationError(ExchangeError, RuntimeError):
    """Guide JSON could not be translated to X12 EDI."""

    default_error_code = "DESTINATION_TRANSLATION_ERROR"


class DeliveryError(ExchangeError, ConnectionError):
    """Translated document could not be delivered to its destination."""

    default_error_code = "DESTINATION_DELIVERY_ERROR"


class ObjectStorageError(ExchangeError, RuntimeError):
    """Object storage write failed."""

    default_error_code = "OBJECT_STORAGE_ERROR"


class PartialDeliveryError(ExchangeError, RuntimeError):
    """At least one destination of an outbound event was not delivered."""

    default_error_code = "OUTBOUND_PARTIAL_DELIVERY_FAILURE"


class PollerConfigError(ExchangeError, LookupError):
    """FTP poller configuration is missing or invalid."""

    default_error_code = "POLLER_CONFIG_ERROR"


class UnsupportedProtocolError(ExchangeError, ValueError):
    """FTP poller configuration names a protocol with no client implementation."""

    default_error_code = "POLLER_UNSUPPORTED_PROTOCOL"


class RemoteConnectionError(ExchangeError, ConnectionError):
    """Connection to the remote file endpoint could not be established."""

    default_error_code = "POLLER_CONNECTION_ERROR"


class RemoteFileError(ExchangeError, RuntimeError):
    """Remote list, download or delete operation failed."""

    default_error_code = "POLLER_REMOTE_FILE_ERROR"


class PollingProcessingError(ExchangeError, RuntimeError):
    """At least one remote entry failed during a poll run."""

    default_error_code = "POLLER_PROCESSING_ERROR"
