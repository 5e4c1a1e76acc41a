"""Poll orchestrator: load a poll target, run the poller and advance its watermark."""

from __future__ import annotations

import copy
import logging
from datetime import datetime, timezone
from typing import Any, Callable

from pydantic import ValidationError

from x12_exchange.adapters import REMOTE_FILE_CLIENT_FACTORIES
from x12_exchange.config import config_bind_execution_id, config_reset_execution_id
from x12_exchange.db import ExecutionLedgerPort, KeyValueStorePort
from x12_exchange.domain import (
    FtpPollerConfigMap,
    domain_as_utc,
    domain_build_failed_stage_event,
    domain_build_stage_event,
)
from x12_exchange.domain.errors import PollerConfigError, PollingProcessingError, UnsupportedProtocolError

from .execution import (
    UNEXPECTED_ERROR_CODE,
    job_error_code_for_exception,
    job_error_message,
    job_generate_execution_id,
    job_serialize_error,
)
from .ftp_poller import FtpPoller
from .interfaces import ExecutionFailureResponse, FtpPollOrchestratorPort, FtpPollSuccessResponse

logger = logging.getLogger(__name__)

FTP_POLL_WORKFLOW_NAME = "ftp_poll"


class FtpPollOrchestrator(FtpPollOrchestratorPort):
    """Runs one configured poll as a ledger-recorded execution.

    The poll target map is stored as one key-value record. Its `lastPollTime`
    entry for the polled target is rewritten only when the poll reports no
    processing errors.
    """

    def __init__(
        self,
        execution_ledger: ExecutionLedgerPort,
        key_value_store: KeyValueStorePort,
        poller: FtpPoller,
        keyspace: str,
        config_key: str,
        supported_protocols: frozenset[str] | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize poll orchestrator.

        Args:
            execution_ledger: Ledger recording start and outcome.
            key_value_store: Store holding the poll target map.
            poller: Poller running one poll.
            keyspace: Keyspace of the poll target map.
            config_key: Key of the poll target map.
            supported_protocols: Protocols accepted before polling; defaults to the registered clients.
            clock: Optional UTC clock for execution input timestamps.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies are invalid.
        """

        if execution_ledger is None:
            raise ValueError("execution_ledger must not be None")
        if key_value_store is None:
            raise ValueError("key_value_store must not be None")
        if poller is None:
            raise ValueError("poller must not be None")
        if not keyspace.strip() or not config_key.strip():
            raise ValueError("keyspace and config_key must not be blank")

        self._execution_ledger = execution_ledger
        self._key_value_store = key_value_store
        self._poller = poller
        self._keyspace = keyspace.strip()
        self._config_key = config_key.strip()
        self._supported_protocols = supported_protocols or frozenset(REMOTE_FILE_CLIENT_FACTORIES)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def job_execute_poll(self, ftp_config_id: str) -> FtpPollSuccessResponse | ExecutionFailureResponse:
        """Poll one configured target.

        Args:
            ftp_config_id: Key of the target in the poll target map.

        Returns:
            FtpPollSuccessResponse | ExecutionFailureResponse: Results payload or recorded failure.

        Raises:
            RuntimeError: Raised when the ledger cannot record the start of the run.
        """

        execution_input = {"ftpConfigId": ftp_config_id, "executionTime": self._clock().isoformat()}
        execution_id = job_generate_execution_id(execution_input)
        log_token = config_bind_execution_id(execution_id)
        try:
            self._execution_ledger.db_execution_record_start(
                execution_id=execution_id,
                workflow=FTP_POLL_WORKFLOW_NAME,
                input_payload=execution_input,
            )
            timeline: list[dict[str, object]] = [domain_build_stage_event(stage="run", status="started")]
            try:
                return self._job_poll_and_persist(
                    execution_id=execution_id,
                    ftp_config_id=ftp_config_id,
                    timeline=timeline,
                )
            except Exception as error:  # pylint: disable=broad-exception-caught
                details = None
                if job_error_code_for_exception(error) == UNEXPECTED_ERROR_CODE:
                    details = job_serialize_error(error)
                return self._job_fail(execution_id=execution_id, error=error, details=details, timeline=timeline)
        finally:
            config_reset_execution_id(log_token)

    def _job_poll_and_persist(
        self,
        execution_id: str,
        ftp_config_id: str,
        timeline: list[dict[str, object]],
    ) -> FtpPollSuccessResponse | ExecutionFailureResponse:
        stored_map, config_map = self._job_load_config_map()
        ftp_config = config_map.root.get(ftp_config_id)
        if ftp_config is None:
            raise PollerConfigError(f"config not found for key: {ftp_config_id}")

        protocol = ftp_config.connection_details.protocol.strip().lower()
        if protocol not in self._supported_protocols:
            raise UnsupportedProtocolError(
                f"unsupported connection protocol: {ftp_config.connection_details.protocol}"
            )

        logger.info(
            "polling %s://%s%s",
            protocol,
            ftp_config.connection_details.config.host,
            ftp_config.remote_path,
        )
        timeline.append(
            domain_build_stage_event(stage="poll", status="started", details={"ftp_config_id": ftp_config_id})
        )
        try:
            outcome = self._poller.job_poll(ftp_config)
        except Exception as error:
            timeline.append(domain_build_failed_stage_event(stage="poll", error=error))
            raise

        results_payload = outcome.results.polling_results_to_payload()
        timeline.append(
            domain_build_stage_event(
                stage="poll",
                status="completed",
                details={
                    "processed": len(outcome.results.processed_files),
                    "skipped": len(outcome.results.skipped_items),
                    "errors": len(outcome.results.processing_errors),
                },
            )
        )

        if outcome.results.processing_errors:
            return self._job_fail(
                execution_id=execution_id,
                error=PollingProcessingError("at least one processing error encountered during polling"),
                details=results_payload["processingErrors"],
                timeline=timeline,
            )

        self._job_persist_last_poll_time(
            stored_map=stored_map,
            ftp_config_id=ftp_config_id,
            last_poll_time=outcome.recommended_last_poll_time,
        )
        timeline.append(domain_build_stage_event(stage="run", status="success"))
        self._execution_ledger.db_execution_record_success(
            execution_id=execution_id,
            output_payload=results_payload,
            diagnostics=timeline,
        )
        return FtpPollSuccessResponse(execution_id=execution_id, results=results_payload)

    def _job_load_config_map(self) -> tuple[dict[str, Any], FtpPollerConfigMap]:
        """Load the stored poll target map and its validated view; an absent record is an empty map."""

        stored_value = self._key_value_store.db_key_value_get(self._keyspace, self._config_key) or {}
        try:
            return stored_value, FtpPollerConfigMap.model_validate(stored_value)
        except ValidationError as error:
            raise PollerConfigError(f"poller config record '{self._config_key}' is invalid: {error}") from error

    def _job_persist_last_poll_time(
        self,
        stored_map: dict[str, Any],
        ftp_config_id: str,
        last_poll_time: datetime,
    ) -> None:
        """Write back the stored map with only the polled target's `lastPollTime` replaced."""

        updated_map = copy.deepcopy(stored_map)
        updated_map[ftp_config_id]["lastPollTime"] = domain_as_utc(last_poll_time).isoformat()
        self._key_value_store.db_key_value_set(self._keyspace, self._config_key, updated_map)

    def _job_fail(
        self,
        execution_id: str,
        error: BaseException,
        details: Any | None,
        timeline: list[dict[str, object]],
    ) -> ExecutionFailureResponse:
        error_code = job_error_code_for_exception(error)
        error_message = job_error_message(error)
        timeline.append(domain_build_failed_stage_event(stage="run", error=error))
        logger.error("poll execution failed: %s (%s)", error_message, error_code)
        self._execution_ledger.db_execution_record_failure(
            execution_id=execution_id,
            error_code=error_code,
            error_message=error_message,
            error_details=details,
            diagnostics=timeline,
        )
        return ExecutionFailureResponse(
            execution_id=execution_id,
            error=error_message,
            error_code=error_code,
            details=details,
        )
