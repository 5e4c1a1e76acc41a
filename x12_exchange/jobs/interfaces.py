"""Typed result contracts for job-layer workflows."""

from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass(frozen=True)
class OutboundSuccessResponse:
    """Successful outbound execution.

    Attributes:
        execution_id: Ledger execution identifier.
        delivery_results: One delivery confirmation per destination, in destination order.
    """

    execution_id: str
    delivery_results: list[Any] = field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        return {"statusCode": 200, "deliveryResults": list(self.delivery_results)}


@dataclass(frozen=True)
class ExecutionFailureResponse:
    """Failed execution of any workflow.

    Attributes:
        execution_id: Ledger execution identifier.
        error: Human-readable error message.
        error_code: Deterministic error code.
        details: Optional structured details (partial results, processing errors).
    """

    execution_id: str
    error: str
    error_code: str
    details: Any | None = None

    def to_payload(self) -> dict[str, Any]:
        """Render the failure in its camelCase wire shape; `details` only when present."""

        payload: dict[str, Any] = {
            "executionId": self.execution_id,
            "error": self.error,
            "errorCode": self.error_code,
        }
        if self.details is not None:
            payload["details"] = self.details
        return payload


@dataclass(frozen=True)
class FtpPollSuccessResponse:
    """Successful poll execution carrying the classified results payload."""

    execution_id: str
    results: dict[str, list[Any]]

    def to_payload(self) -> dict[str, Any]:
        return dict(self.results)


class OutboundPipelinePort(Protocol):
    """Port definition for running one outbound event end to end."""

    def job_run(self, raw_event: Any) -> OutboundSuccessResponse | ExecutionFailureResponse:
        """Run one outbound event and return its success or failure response."""


class FtpPollOrchestratorPort(Protocol):
    """Port definition for running one configured poll end to end."""

    def job_execute_poll(self, ftp_config_id: str) -> FtpPollSuccessResponse | ExecutionFailureResponse:
        """Poll one configured target and return its success or failure response."""
