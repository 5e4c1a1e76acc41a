"""FTP/SFTP poll trigger router."""

from __future__ import annotations

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from x12_exchange.jobs import ExecutionFailureResponse, FtpPollOrchestratorPort

_NOT_FOUND_ERROR_CODES = frozenset({"POLLER_CONFIG_ERROR"})


def api_create_ftp_poller_router(poll_orchestrator: FtpPollOrchestratorPort) -> APIRouter:
    """Create router triggering configured polls.

    Args:
        poll_orchestrator: Job-layer poll orchestrator.

    Returns:
        APIRouter: Router exposing `POST /ftp-poller/{ftp_config_id}/poll`.

    Raises:
        ValueError: Raised when poll_orchestrator is invalid.
    """

    if poll_orchestrator is None:
        raise ValueError("poll_orchestrator must not be None")

    router = APIRouter(prefix="/ftp-poller", tags=["ftp-poller"])

    @router.post("/{ftp_config_id}/poll")
    def api_ftp_poll_trigger(ftp_config_id: str) -> JSONResponse:
        """Run one poll synchronously and return its results or recorded failure."""

        outcome = poll_orchestrator.job_execute_poll(ftp_config_id)
        headers = {"X-Execution-Id": outcome.execution_id}
        if isinstance(outcome, ExecutionFailureResponse):
            status_code = (
                status.HTTP_404_NOT_FOUND
                if outcome.error_code in _NOT_FOUND_ERROR_CODES
                else status.HTTP_500_INTERNAL_SERVER_ERROR
            )
            return JSONResponse(content=outcome.to_payload(), status_code=status_code, headers=headers)
        return JSONResponse(content=outcome.to_payload(), status_code=status.HTTP_200_OK, headers=headers)

    return router
