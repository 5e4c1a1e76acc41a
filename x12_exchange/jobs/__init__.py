"""Job layer package for outbound delivery and inbound polling workflows."""

from .execution import (
	UNEXPECTED_ERROR_CODE,
	job_error_code_for_exception,
	job_error_message,
	job_generate_execution_id,
	job_serialize_error,
)
from .ftp_poll_orchestrator import FTP_POLL_WORKFLOW_NAME, FtpPollOrchestrator
from .ftp_poller import FtpPoller, job_remote_join
from .interfaces import (
	ExecutionFailureResponse,
	FtpPollOrchestratorPort,
	FtpPollSuccessResponse,
	OutboundPipelinePort,
	OutboundSuccessResponse,
)
from .outbound_pipeline import OUTBOUND_WORKFLOW_NAME, OutboundDeliveryPipeline, job_bucket_destination_for_event

__all__ = [
	"ExecutionFailureResponse",
	"FTP_POLL_WORKFLOW_NAME",
	"FtpPollOrchestrator",
	"FtpPollOrchestratorPort",
	"FtpPollSuccessResponse",
	"FtpPoller",
	"OUTBOUND_WORKFLOW_NAME",
	"OutboundDeliveryPipeline",
	"OutboundPipelinePort",
	"OutboundSuccessResponse",
	"UNEXPECTED_ERROR_CODE",
	"job_bucket_destination_for_event",
	"job_error_code_for_exception",
	"job_error_message",
	"job_generate_execution_id",
	"job_remote_join",
	"job_serialize_error",
]
