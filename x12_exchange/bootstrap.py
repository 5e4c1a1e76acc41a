"""Application bootstrap wiring for startup validation and dependency assembly."""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial

from fastapi import FastAPI

from x12_exchange.adapters import (
    DestinationDeliveryAdapter,
    EdiPlatformAdapter,
    adapter_build_object_storage,
    adapter_build_remote_file_client,
)
from x12_exchange.api import create_api_application
from x12_exchange.config import AppSettings, config_configure_logging, config_load_settings
from x12_exchange.db import (
    SQLAlchemyControlNumberService,
    SQLAlchemyDatabaseHealthService,
    SQLAlchemyExecutionLedgerService,
    SQLAlchemyKeyValueStoreService,
    db_create_engine,
)
from x12_exchange.jobs import FtpPoller, FtpPollOrchestrator, OutboundDeliveryPipeline
from x12_exchange.partners import KeyValuePartnerDirectory


@dataclass(frozen=True)
class RuntimeServices:
    """Wired services shared by the API and CLI surfaces."""

    settings: AppSettings
    db_health_service: SQLAlchemyDatabaseHealthService
    execution_ledger: SQLAlchemyExecutionLedgerService
    key_value_store: SQLAlchemyKeyValueStoreService
    partner_directory: KeyValuePartnerDirectory
    outbound_pipeline: OutboundDeliveryPipeline
    poll_orchestrator: FtpPollOrchestrator


def bootstrap_create_services(settings: AppSettings | None = None) -> RuntimeServices:
    """Validate configuration, configure logging and wire all runtime services.

    Args:
        settings: Optional preloaded settings; loaded from the environment when omitted.

    Returns:
        RuntimeServices: Wired services.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    resolved_settings = settings or config_load_settings()
    config_configure_logging(level=resolved_settings.log_level, json_format=resolved_settings.log_json)

    engine = db_create_engine(
        database_url=resolved_settings.database_url,
        pool_size=resolved_settings.delivery_max_workers,
    )
    execution_ledger = SQLAlchemyExecutionLedgerService(engine=engine)
    key_value_store = SQLAlchemyKeyValueStoreService(engine=engine)
    partner_directory = KeyValuePartnerDirectory(
        key_value_store=key_value_store,
        keyspace=resolved_settings.partners_keyspace_name,
    )
    object_storage = adapter_build_object_storage(
        backend=resolved_settings.object_storage_backend,
        region_name=resolved_settings.aws_region,
        endpoint_url=resolved_settings.s3_endpoint_url,
        local_root_directory=resolved_settings.object_storage_local_root,
    )
    edi_platform = EdiPlatformAdapter(
        base_url=resolved_settings.edi_platform_base_url,
        api_key=resolved_settings.edi_platform_api_key,
        timeout_seconds=resolved_settings.edi_platform_timeout_seconds,
    )

    outbound_pipeline = OutboundDeliveryPipeline(
        execution_ledger=execution_ledger,
        partner_directory=partner_directory,
        control_number_issuer=SQLAlchemyControlNumberService(engine=engine),
        guide_resolver=edi_platform,
        mapping_invoker=edi_platform,
        translator=edi_platform,
        delivery=DestinationDeliveryAdapter(
            object_storage=object_storage,
            webhook_timeout_seconds=resolved_settings.webhook_timeout_seconds,
        ),
        max_workers=resolved_settings.delivery_max_workers,
    )
    poll_orchestrator = FtpPollOrchestrator(
        execution_ledger=execution_ledger,
        key_value_store=key_value_store,
        poller=FtpPoller(
            object_storage=object_storage,
            destination_bucket_name=resolved_settings.ftp_destination_bucket_name,
            connect_timeout_seconds=resolved_settings.remote_connect_timeout_seconds,
            client_factory=partial(
                adapter_build_remote_file_client,
                sftp_host_key_policy=resolved_settings.sftp_host_key_policy,
                sftp_known_hosts_path=resolved_settings.sftp_known_hosts_path,
            ),
        ),
        keyspace=resolved_settings.partners_keyspace_name,
        config_key=resolved_settings.ftp_poller_config_key,
    )
    return RuntimeServices(
        settings=resolved_settings,
        db_health_service=SQLAlchemyDatabaseHealthService(engine=engine),
        execution_ledger=execution_ledger,
        key_value_store=key_value_store,
        partner_directory=partner_directory,
        outbound_pipeline=outbound_pipeline,
        poll_orchestrator=poll_orchestrator,
    )


def bootstrap_create_application(services: RuntimeServices | None = None) -> FastAPI:
    """Assemble the runtime application after validating startup configuration.

    Returns:
        FastAPI: Fully initialized FastAPI application instance.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    resolved_services = services or bootstrap_create_services()
    return create_api_application(
        settings=resolved_services.settings,
        db_health_service=resolved_services.db_health_service,
        execution_ledger=resolved_services.execution_ledger,
        outbound_pipeline=resolved_services.outbound_pipeline,
        poll_orchestrator=resolved_services.poll_orchestrator,
    )
