"""Database service for execution ledger persistence."""

from __future__ import annotations

import json
from typing import Any

from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError

from .interfaces import ExecutionLedgerPort, ExecutionRecord

_EXECUTION_SELECT_COLUMNS = (
    "execution_id, workflow, status, input_payload, output_payload, "
    "error_code, error_message, error_details, diagnostics, "
    "started_at_utc, ended_at_utc, duration_ms"
)

_EXECUTION_DURATION_SQL = "GREATEST(0, CAST(EXTRACT(EPOCH FROM (now() - started_at_utc)) * 1000 AS BIGINT))"


class SQLAlchemyExecutionLedgerService(ExecutionLedgerPort):
    """SQLAlchemy-backed execution ledger.

    One row per execution id. Recording a start for an existing id resets the
    row to `started`, so replaying identical input keeps one ledger entry.
    """

    def __init__(self, engine: Engine):
        """Initialize execution ledger service.

        Args:
            engine: SQLAlchemy engine used for all persistence operations.

        Returns:
            None: This initializer does not return a value.

        Raises:
            ValueError: Raised when engine is None.
        """

        if engine is None:
            raise ValueError("engine must not be None")
        self._engine = engine

    def db_execution_record_start(self, execution_id: str, workflow: str, input_payload: Any) -> None:
        """Insert or restart one execution row with its raw input.

        Args:
            execution_id: Deterministic execution identifier.
            workflow: Workflow name.
            input_payload: Raw JSON-serializable input.

        Returns:
            None: Row is written as a side effect.

        Raises:
            ValueError: Raised when identifiers are blank.
            RuntimeError: Raised when persistence fails.
        """

        normalized_execution_id = self._validate_non_empty_text(execution_id, "execution_id")
        normalized_workflow = self._validate_non_empty_text(workflow, "workflow")

        try:
            with self._engine.begin() as connection:
                connection.execute(
                    text(
                        "INSERT INTO execution ("
                        "execution_id, workflow, status, input_payload, started_at_utc"
                        ") VALUES ("
                        ":execution_id, :workflow, 'started', CAST(:input_payload AS jsonb), now()"
                        ") "
                        "ON CONFLICT (execution_id) DO UPDATE SET "
                        "workflow = EXCLUDED.workflow, "
                        "status = 'started', "
                        "input_payload = EXCLUDED.input_payload, "
                        "output_payload = NULL, "
                        "error_code = NULL, "
                        "error_message = NULL, "
                        "error_details = NULL, "
                        "diagnostics = NULL, "
                        "started_at_utc = now(), "
                        "ended_at_utc = NULL, "
                        "duration_ms = NULL"
                    ),
                    {
                        "execution_id": normalized_execution_id,
                        "workflow": normalized_workflow,
                        "input_payload": self._db_dump_json(input_payload),
                    },
                )
        except SQLAlchemyError as error:
            raise RuntimeError("failed to record execution start") from error

    def db_execution_record_success(
        self,
        execution_id: str,
        output_payload: Any,
        diagnostics: list[dict[str, Any]] | None,
    ) -> None:
        """Finalize one execution as successful.

        Raises:
            LookupError: Raised when the execution is unknown.
            RuntimeError: Raised when persistence fails.
        """

        self._db_finalize(
            execution_id=execution_id,
            parameters={
                "status": "success",
                "output_payload": self._db_dump_json(output_payload),
                "error_code": None,
                "error_message": None,
                "error_details": None,
                "diagnostics": self._db_dump_json(diagnostics),
            },
        )

    def db_execution_record_failure(
        self,
        execution_id: str,
        error_code: str,
        error_message: str,
        error_details: Any | None,
        diagnostics: list[dict[str, Any]] | None,
    ) -> None:
        """Finalize one execution as failed.

        Raises:
            LookupError: Raised when the execution is unknown.
            RuntimeError: Raised when persistence fails.
        """

        self._db_finalize(
            execution_id=execution_id,
            parameters={
                "status": "failed",
                "output_payload": None,
                "error_code": self._validate_non_empty_text(error_code, "error_code"),
                "error_message": error_message,
                "error_details": self._db_dump_json(error_details),
                "diagnostics": self._db_dump_json(diagnostics),
            },
        )

    def db_execution_get_by_id(self, execution_id: str) -> ExecutionRecord | None:
        """Fetch one execution by id.

        Args:
            execution_id: Execution identifier.

        Returns:
            ExecutionRecord | None: Matching row or None.

        Raises:
            RuntimeError: Raised when database read fails.
        """

        try:
            with self._engine.connect() as connection:
                row = connection.execute(
                    text(f"SELECT {_EXECUTION_SELECT_COLUMNS} FROM execution WHERE execution_id = :execution_id"),
                    {"execution_id": execution_id},
                ).mappings().first()
        except SQLAlchemyError as error:
            raise RuntimeError("failed to fetch execution by id") from error

        if row is None:
            return None
        return self._map_execution_record(row)

    def _db_finalize(self, execution_id: str, parameters: dict[str, Any]) -> None:
        """Write the terminal state of one execution row."""

        normalized_execution_id = self._validate_non_empty_text(execution_id, "execution_id")
        try:
            with self._engine.begin() as connection:
                updated_row = connection.execute(
                    text(
                        "UPDATE execution SET "
                        "status = :status, "
                        "output_payload = CAST(:output_payload AS jsonb), "
                        "error_code = :error_code, "
                        "error_message = :error_message, "
                        "error_details = CAST(:error_details AS jsonb), "
                        "diagnostics = CAST(:diagnostics AS jsonb), "
                        "ended_at_utc = now(), "
                        f"duration_ms = {_EXECUTION_DURATION_SQL} "
                        "WHERE execution_id = :execution_id "
                        "RETURNING execution_id"
                    ),
                    {**parameters, "execution_id": normalized_execution_id},
                ).mappings().first()
        except SQLAlchemyError as error:
            raise RuntimeError("failed to finalize execution") from error

        if updated_row is None:
            raise LookupError(f"execution not found: {normalized_execution_id}")

    def _map_execution_record(self, row: Any) -> ExecutionRecord:
        """Map SQLAlchemy row mapping to typed execution record.

        Raises:
            TypeError: Raised when diagnostics are not a JSON array.
        """

        diagnostics_value = row["diagnostics"]
        if diagnostics_value is not None and not isinstance(diagnostics_value, list):
            raise TypeError("execution.diagnostics must be a JSON array when present")

        return ExecutionRecord(
            execution_id=row["execution_id"],
            workflow=row["workflow"],
            status=row["status"],
            input_payload=row["input_payload"],
            output_payload=row["output_payload"],
            error_code=row["error_code"],
            error_message=row["error_message"],
            error_details=row["error_details"],
            diagnostics=diagnostics_value,
            started_at_utc=row["started_at_utc"],
            ended_at_utc=row["ended_at_utc"],
            duration_ms=row["duration_ms"],
        )

    def _db_dump_json(self, value: Any) -> str | None:
        if value is None:
            return None
        return json.dumps(value, default=str)

    def _validate_non_empty_text(self, value: str, field_name: str) -> str:
        stripped_value = value.strip()
        if not stripped_value:
            raise ValueError(f"{field_name} must not be blank")
        return stripped_value
