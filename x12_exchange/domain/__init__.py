"""Domain models and pure rules used across application layer boundaries."""

from .envelope import (
	FUNCTIONAL_IDENTIFIER_CODES,
	Envelope,
	GroupHeader,
	InterchangeHeader,
	domain_build_envelope,
	domain_lookup_functional_identifier_code,
)
from .events import (
	OutboundEvent,
	OutboundEventMetadata,
	domain_collect_transaction_set_identifier_codes,
	domain_determine_transaction_set_type,
	domain_normalize_transaction_sets,
	domain_parse_outbound_event,
	domain_validate_transaction_set_control_numbers,
)
from .models import HealthStatus
from .partnership import (
	BucketDestination,
	Destination,
	PartnerProfile,
	Partnership,
	TransactionSetConfig,
	TransactionSetDestination,
	WebhookDestination,
	domain_select_transaction_set_config,
	domain_transaction_set_configs_for_pair,
)
from .polling import (
	EPOCH_UTC,
	ConnectionDetails,
	FtpPollOutcome,
	FtpPollerConfig,
	FtpPollerConfigMap,
	FtpPollingResults,
	ProcessingError,
	RemoteConnectionConfig,
	RemoteEntry,
	RemoteEntryKind,
	SkippedItem,
	domain_as_utc,
	domain_epoch_milliseconds,
)
from .timeline import domain_build_failed_stage_event, domain_build_stage_event

__all__ = [
	"BucketDestination",
	"ConnectionDetails",
	"Destination",
	"EPOCH_UTC",
	"Envelope",
	"FUNCTIONAL_IDENTIFIER_CODES",
	"FtpPollOutcome",
	"FtpPollerConfig",
	"FtpPollerConfigMap",
	"FtpPollingResults",
	"GroupHeader",
	"HealthStatus",
	"InterchangeHeader",
	"OutboundEvent",
	"OutboundEventMetadata",
	"PartnerProfile",
	"Partnership",
	"ProcessingError",
	"RemoteConnectionConfig",
	"RemoteEntry",
	"RemoteEntryKind",
	"SkippedItem",
	"TransactionSetConfig",
	"TransactionSetDestination",
	"WebhookDestination",
	"domain_as_utc",
	"domain_build_envelope",
	"domain_build_failed_stage_event",
	"domain_build_stage_event",
	"domain_collect_transaction_set_identifier_codes",
	"domain_determine_transaction_set_type",
	"domain_epoch_milliseconds",
	"domain_lookup_functional_identifier_code",
	"domain_normalize_transaction_sets",
	"domain_parse_outbound_event",
	"domain_select_transaction_set_config",
	"domain_transaction_set_configs_for_pair",
	"domain_validate_transaction_set_control_numbers",
]
