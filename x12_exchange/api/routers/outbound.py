"""Outbound event router."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, status
from fastapi.responses import JSONResponse

from x12_exchange.jobs import ExecutionFailureResponse, OutboundPipelinePort

_CLIENT_ERROR_CODES = frozenset({"OUTBOUND_INVALID_EVENT"})


def api_create_outbound_router(outbound_pipeline: OutboundPipelinePort) -> APIRouter:
    """Create router accepting outbound business events.

    Args:
        outbound_pipeline: Job-layer outbound pipeline.

    Returns:
        APIRouter: Router exposing `POST /outbound/events`.

    Raises:
        ValueError: Raised when outbound_pipeline is invalid.
    """

    if outbound_pipeline is None:
        raise ValueError("outbound_pipeline must not be None")

    router = APIRouter(prefix="/outbound", tags=["outbound"])

    @router.post("/events")
    def api_outbound_event_submit(event: Any = Body(...)) -> JSONResponse:
        """Run one outbound event synchronously.

        Returns:
            JSONResponse: Delivery results with 200, a malformed-event failure
            with 400, or any other recorded failure with 500.
        """

        outcome = outbound_pipeline.job_run(event)
        headers = {"X-Execution-Id": outcome.execution_id}
        if isinstance(outcome, ExecutionFailureResponse):
            status_code = (
                status.HTTP_400_BAD_REQUEST
                if outcome.error_code in _CLIENT_ERROR_CODES
                else status.HTTP_500_INTERNAL_SERVER_ERROR
            )
            return JSONResponse(content=outcome.to_payload(), status_code=status_code, headers=headers)
        return JSONResponse(content=outcome.to_payload(), status_code=status.HTTP_200_OK, headers=headers)

    return router
