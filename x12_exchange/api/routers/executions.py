"""Execution ledger diagnostics router."""

from __future__ import annotations

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from x12_exchange.db import ExecutionLedgerPort, ExecutionRecord


def api_create_executions_router(execution_ledger: ExecutionLedgerPort) -> APIRouter:
    """Create router exposing execution ledger rows.

    Args:
        execution_ledger: DB-layer execution ledger.

    Returns:
        APIRouter: Router exposing `GET /executions/{execution_id}`.

    Raises:
        ValueError: Raised when execution_ledger is invalid.
    """

    if execution_ledger is None:
        raise ValueError("execution_ledger must not be None")

    router = APIRouter(prefix="/executions", tags=["executions"])

    @router.get("/{execution_id}")
    def api_execution_detail(execution_id: str) -> JSONResponse:
        """Return one execution with its input, outcome and stage timeline."""

        record = execution_ledger.db_execution_get_by_id(execution_id)
        if record is None:
            payload = {"status": "error", "message": "execution not found"}
            return JSONResponse(content=payload, status_code=status.HTTP_404_NOT_FOUND)
        return JSONResponse(content=_api_serialize_execution(record), status_code=status.HTTP_200_OK)

    return router


def _api_serialize_execution(record: ExecutionRecord) -> dict[str, object]:
    return {
        "executionId": record.execution_id,
        "workflow": record.workflow,
        "status": record.status,
        "input": record.input_payload,
        "output": record.output_payload,
        "errorCode": record.error_code,
        "errorMessage": record.error_message,
        "errorDetails": record.error_details,
        "diagnostics": record.diagnostics or [],
        "startedAtUtc": record.started_at_utc.isoformat(),
        "endedAtUtc": record.ended_at_utc.isoformat() if record.ended_at_utc is not None else None,
        "durationMs": record.duration_ms,
    }
