"""Typed interfaces for database-layer services.

All SQL access must remain in the db package and its submodules.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol

from x12_exchange.domain import HealthStatus


class DatabaseHealthPort(Protocol):
    """Port definition for database connectivity verification."""

    def db_connection_label(self) -> str:
        """Return a stable label for the active database connection target.

        Returns:
            str: Database target label for diagnostics.
        """

    def db_check_health(self) -> HealthStatus:
        """Check database connectivity and return deterministic health payload.

        Returns:
            HealthStatus: Database health status payload.

        Raises:
            ConnectionError: Raised when database cannot be reached.
        """


@dataclass(frozen=True)
class ExecutionRecord:
    """Persistence model for one execution ledger row.

    Attributes:
        execution_id: Deterministic execution identifier.
        workflow: Workflow name (`outbound`, `ftp_poll`).
        status: Execution status (`started`, `success`, `failed`).
        input_payload: Raw execution input.
        output_payload: Optional success output.
        error_code: Optional deterministic error code.
        error_message: Optional human-readable error message.
        error_details: Optional structured failure details.
        diagnostics: Optional stage timeline.
        started_at_utc: Start timestamp in UTC.
        ended_at_utc: Optional end timestamp in UTC.
        duration_ms: Optional duration in milliseconds.
    """

    execution_id: str
    workflow: str
    status: str
    input_payload: Any
    output_payload: Any | None
    error_code: str | None
    error_message: str | None
    error_details: Any | None
    diagnostics: list[dict[str, Any]] | None
    started_at_utc: datetime
    ended_at_utc: datetime | None
    duration_ms: int | None


class ExecutionLedgerPort(Protocol):
    """Port definition for execution start and outcome recording."""

    def db_execution_record_start(self, execution_id: str, workflow: str, input_payload: Any) -> None:
        """Record the start of one execution together with its input.

        Re-running the same input restarts the existing row.

        Raises:
            RuntimeError: Raised when persistence fails.
        """

    def db_execution_record_success(
        self,
        execution_id: str,
        output_payload: Any,
        diagnostics: list[dict[str, Any]] | None,
    ) -> None:
        """Record a successful execution outcome.

        Raises:
            LookupError: Raised when the execution is unknown.
            RuntimeError: Raised when persistence fails.
        """

    def db_execution_record_failure(
        self,
        execution_id: str,
        error_code: str,
        error_message: str,
        error_details: Any | None,
        diagnostics: list[dict[str, Any]] | None,
    ) -> None:
        """Record a failed execution outcome.

        Raises:
            LookupError: Raised when the execution is unknown.
            RuntimeError: Raised when persistence fails.
        """

    def db_execution_get_by_id(self, execution_id: str) -> ExecutionRecord | None:
        """Fetch one execution by id.

        Raises:
            RuntimeError: Raised when database read fails.
        """


class ControlNumberIssuerPort(Protocol):
    """Port definition for issuing monotonically increasing control numbers."""

    def db_control_number_issue(
        self,
        segment: str,
        usage_indicator_code: str,
        sending_partner_id: str,
        receiving_partner_id: str,
    ) -> int:
        """Atomically issue the next control number for one scope.

        Args:
            segment: Envelope segment (`ISA` or `GS`).
            usage_indicator_code: Interchange usage indicator.
            sending_partner_id: Sending partner identifier.
            receiving_partner_id: Receiving partner identifier.

        Returns:
            int: Issued control number, starting at 1 for a new scope.

        Raises:
            ControlNumberIssueError: Raised when the counter cannot be advanced.
        """


class KeyValueStorePort(Protocol):
    """Port definition for JSON values addressed by keyspace and key."""

    def db_key_value_get(self, keyspace: str, key: str) -> Any | None:
        """Return the stored JSON value or None when the key is absent.

        Raises:
            RuntimeError: Raised when database read fails.
        """

    def db_key_value_set(self, keyspace: str, key: str, value: Any) -> None:
        """Insert or replace one JSON value.

        Raises:
            RuntimeError: Raised when persistence fails.
        """
