"""FastAPI application factory."""

from fastapi import FastAPI

from x12_exchange.config import AppSettings
from x12_exchange.db import DatabaseHealthPort, ExecutionLedgerPort
from x12_exchange.jobs import FtpPollOrchestratorPort, OutboundPipelinePort

from .routers import (
    api_create_executions_router,
    api_create_ftp_poller_router,
    api_create_health_router,
    api_create_outbound_router,
)


def create_api_application(
    settings: AppSettings,
    db_health_service: DatabaseHealthPort,
    execution_ledger: ExecutionLedgerPort,
    outbound_pipeline: OutboundPipelinePort,
    poll_orchestrator: FtpPollOrchestratorPort,
) -> FastAPI:
    """Create the FastAPI application instance for the service.

    Args:
        settings: Validated application settings used for runtime metadata.
        db_health_service: Database health service used by health endpoints.
        execution_ledger: Execution ledger for diagnostics endpoints.
        outbound_pipeline: Job-layer outbound pipeline.
        poll_orchestrator: Job-layer poll orchestrator.

    Returns:
        FastAPI: Application with all routers mounted.
    """

    application = FastAPI(title="X12 Exchange")

    @application.get("/", tags=["foundation"])
    def foundation_index() -> dict[str, str]:
        return {
            "service": "x12-exchange",
            "status": "ready",
            "environment": settings.environment_name,
        }

    application.include_router(api_create_health_router(db_health_service=db_health_service))
    application.include_router(api_create_outbound_router(outbound_pipeline=outbound_pipeline))
    application.include_router(api_create_ftp_poller_router(poll_orchestrator=poll_orchestrator))
    application.include_router(api_create_executions_router(execution_ledger=execution_ledger))

    return application
