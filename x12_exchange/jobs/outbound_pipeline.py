"""Outbound delivery pipeline: one business event to N translated deliveries.

The pipeline resolves partners, guide and envelope once per event, then fans
out to every configured destination on a thread pool. Destinations share the
immutable envelope and never see each other's failures; the aggregation step
is the only join point.
"""

from __future__ import annotations

import contextvars
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Callable

from x12_exchange.adapters import DeliveryPort, GuideResolverPort, MappingInvokerPort, TranslatorPort
from x12_exchange.config import config_bind_execution_id, config_reset_execution_id
from x12_exchange.db import ControlNumberIssuerPort, ExecutionLedgerPort
from x12_exchange.domain import (
    BucketDestination,
    Destination,
    Envelope,
    OutboundEvent,
    TransactionSetDestination,
    domain_build_envelope,
    domain_build_failed_stage_event,
    domain_build_stage_event,
    domain_determine_transaction_set_type,
    domain_lookup_functional_identifier_code,
    domain_parse_outbound_event,
    domain_select_transaction_set_config,
    domain_transaction_set_configs_for_pair,
    domain_validate_transaction_set_control_numbers,
)
from x12_exchange.domain.errors import PartialDeliveryError
from x12_exchange.partners import PartnerDirectoryPort

from .execution import (
    UNEXPECTED_ERROR_CODE,
    job_error_code_for_exception,
    job_error_message,
    job_generate_execution_id,
    job_serialize_error,
)
from .interfaces import ExecutionFailureResponse, OutboundPipelinePort, OutboundSuccessResponse

logger = logging.getLogger(__name__)

OUTBOUND_WORKFLOW_NAME = "outbound"


def job_bucket_destination_for_event(
    destination: BucketDestination,
    isa_control_number: int,
    transaction_set_type: str,
) -> BucketDestination:
    """Return a copy of a bucket destination whose path names the delivered object.

    The configured destination is left untouched so that repeated events never
    accumulate path suffixes.

    Args:
        destination: Configured bucket destination.
        isa_control_number: Interchange control number of the event.
        transaction_set_type: Transaction set code of the event.

    Returns:
        BucketDestination: Destination with path `{path}/{isaControlNumber}-{type}.edi`.
    """

    return destination.model_copy(
        update={"path": f"{destination.path}/{isa_control_number}-{transaction_set_type}.edi"}
    )


class OutboundDeliveryPipeline(OutboundPipelinePort):
    """Runs outbound events end to end and records each run in the execution ledger."""

    def __init__(
        self,
        execution_ledger: ExecutionLedgerPort,
        partner_directory: PartnerDirectoryPort,
        control_number_issuer: ControlNumberIssuerPort,
        guide_resolver: GuideResolverPort,
        mapping_invoker: MappingInvokerPort,
        translator: TranslatorPort,
        delivery: DeliveryPort,
        max_workers: int = 4,
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize outbound pipeline dependencies.

        Args:
            execution_ledger: Ledger recording start and outcome.
            partner_directory: Partner profile and partnership resolver.
            control_number_issuer: Atomic ISA/GS control number issuer.
            guide_resolver: Guide resolver.
            mapping_invoker: Mapping invoker for destinations with `mappingId`.
            translator: Guide JSON to EDI translator.
            delivery: Destination delivery adapter.
            max_workers: Upper bound of concurrent destination deliveries.
            clock: Optional UTC clock used for envelope timestamps.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies are invalid.
        """

        dependencies = {
            "execution_ledger": execution_ledger,
            "partner_directory": partner_directory,
            "control_number_issuer": control_number_issuer,
            "guide_resolver": guide_resolver,
            "mapping_invoker": mapping_invoker,
            "translator": translator,
            "delivery": delivery,
        }
        for dependency_name, dependency in dependencies.items():
            if dependency is None:
                raise ValueError(f"{dependency_name} must not be None")
        if max_workers < 1:
            raise ValueError("max_workers must be >= 1")

        self._execution_ledger = execution_ledger
        self._partner_directory = partner_directory
        self._control_number_issuer = control_number_issuer
        self._guide_resolver = guide_resolver
        self._mapping_invoker = mapping_invoker
        self._translator = translator
        self._delivery = delivery
        self._max_workers = max_workers
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def job_run(self, raw_event: Any) -> OutboundSuccessResponse | ExecutionFailureResponse:
        """Run one outbound event.

        Args:
            raw_event: Raw event document (`metadata` plus `payload`).

        Returns:
            OutboundSuccessResponse | ExecutionFailureResponse: Outcome; failures are
            recorded in the ledger before being returned.

        Raises:
            RuntimeError: Raised when the ledger cannot record the start of the run.
        """

        execution_id = job_generate_execution_id(raw_event)
        log_token = config_bind_execution_id(execution_id)
        try:
            logger.info("starting outbound execution")
            self._execution_ledger.db_execution_record_start(
                execution_id=execution_id,
                workflow=OUTBOUND_WORKFLOW_NAME,
                input_payload=raw_event,
            )
            timeline: list[dict[str, object]] = [domain_build_stage_event(stage="run", status="started")]
            try:
                return self._job_run_stages(execution_id=execution_id, raw_event=raw_event, timeline=timeline)
            except Exception as error:  # pylint: disable=broad-exception-caught
                return self._job_fail(execution_id=execution_id, error=error, details=None, timeline=timeline)
        finally:
            config_reset_execution_id(log_token)

    def _job_run_stages(
        self,
        execution_id: str,
        raw_event: Any,
        timeline: list[dict[str, object]],
    ) -> OutboundSuccessResponse | ExecutionFailureResponse:
        """Run resolution, envelope and fan-out stages; fatal errors propagate."""

        stage = "validate_event"
        try:
            event = domain_parse_outbound_event(raw_event)
            sending_partner_id = event.metadata.sending_partner_id
            receiving_partner_id = event.metadata.receiving_partner_id

            stage = "resolve_partners"
            sender_profile = self._partner_directory.partners_load_profile(sending_partner_id)
            receiver_profile = self._partner_directory.partners_load_profile(receiving_partner_id)
            partnership = self._partner_directory.partners_load_partnership(
                sending_partner_id=sending_partner_id,
                receiving_partner_id=receiving_partner_id,
            )
            timeline.append(
                domain_build_stage_event(
                    stage=stage,
                    status="completed",
                    details={"sending_partner_id": sending_partner_id, "receiving_partner_id": receiving_partner_id},
                )
            )

            stage = "resolve_guide"
            transaction_set_type = domain_determine_transaction_set_type(event)
            pair_configs = domain_transaction_set_configs_for_pair(
                partnership=partnership,
                sending_partner_id=sending_partner_id,
                receiving_partner_id=receiving_partner_id,
            )
            guide = self._guide_resolver.adapter_resolve_guide(
                candidate_guide_ids=[config.guide_id for config in pair_configs],
                transaction_set_type=transaction_set_type,
            )
            transaction_set_config = domain_select_transaction_set_config(pair_configs, guide.guide_id)
            functional_identifier_code = domain_lookup_functional_identifier_code(transaction_set_type)
            timeline.append(
                domain_build_stage_event(
                    stage=stage,
                    status="completed",
                    details={"guide_id": guide.guide_id, "transaction_set_type": transaction_set_type},
                )
            )

            stage = "build_envelope"
            envelope = self._job_build_envelope(
                event=event,
                sender_profile=sender_profile,
                receiver_profile=receiver_profile,
                functional_identifier_code=functional_identifier_code,
                usage_indicator_code=transaction_set_config.usage_indicator_code,
            )
            timeline.append(
                domain_build_stage_event(
                    stage=stage,
                    status="completed",
                    details={
                        "isa_control_number": envelope.interchange_header.control_number,
                        "gs_control_number": envelope.group_header.control_number,
                    },
                )
            )
        except Exception as error:
            timeline.append(domain_build_failed_stage_event(stage=stage, error=error))
            raise

        fulfilled, rejected = self._job_deliver_all(
            event=event,
            destinations=transaction_set_config.destinations,
            transaction_set_type=transaction_set_type,
            guide_id=guide.guide_id,
            envelope=envelope,
            timeline=timeline,
        )

        if rejected:
            partial_error = PartialDeliveryError(
                f"some deliveries were not successful: {len(rejected)} failed, {len(fulfilled)} succeeded"
            )
            return self._job_fail(
                execution_id=execution_id,
                error=partial_error,
                details={"fulfilled": fulfilled, "rejected": rejected},
                timeline=timeline,
            )

        delivery_results = [entry["value"] for entry in fulfilled]
        timeline.append(domain_build_stage_event(stage="run", status="success"))
        self._execution_ledger.db_execution_record_success(
            execution_id=execution_id,
            output_payload={"deliveryResults": delivery_results},
            diagnostics=timeline,
        )
        logger.info("outbound execution succeeded with %d deliveries", len(delivery_results))
        return OutboundSuccessResponse(execution_id=execution_id, delivery_results=delivery_results)

    def _job_build_envelope(
        self,
        event: OutboundEvent,
        sender_profile,
        receiver_profile,
        functional_identifier_code: str,
        usage_indicator_code: str,
    ) -> Envelope:
        """Issue exactly one ISA and one GS control number and build the shared envelope."""

        sending_partner_id = event.metadata.sending_partner_id
        receiving_partner_id = event.metadata.receiving_partner_id
        isa_control_number = self._control_number_issuer.db_control_number_issue(
            segment="ISA",
            usage_indicator_code=usage_indicator_code,
            sending_partner_id=sending_partner_id,
            receiving_partner_id=receiving_partner_id,
        )
        gs_control_number = self._control_number_issuer.db_control_number_issue(
            segment="GS",
            usage_indicator_code=usage_indicator_code,
            sending_partner_id=sending_partner_id,
            receiving_partner_id=receiving_partner_id,
        )
        return domain_build_envelope(
            sender_profile=sender_profile,
            receiver_profile=receiver_profile,
            functional_identifier_code=functional_identifier_code,
            isa_control_number=isa_control_number,
            gs_control_number=gs_control_number,
            usage_indicator_code=usage_indicator_code,
            document_date=self._clock(),
        )

    def _job_deliver_all(
        self,
        event: OutboundEvent,
        destinations: list[TransactionSetDestination],
        transaction_set_type: str,
        guide_id: str,
        envelope: Envelope,
        timeline: list[dict[str, object]],
    ) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
        """Deliver to every destination concurrently and partition the settled outcomes.

        Returns:
            tuple[list[dict[str, Any]], list[dict[str, Any]]]: Fulfilled `{value}` entries and
            rejected `{reason}` entries, each in destination order.
        """

        timeline.append(
            domain_build_stage_event(stage="deliver", status="started", details={"destination_count": len(destinations)})
        )
        if not destinations:
            timeline.append(domain_build_stage_event(stage="deliver", status="completed", details={"fulfilled": 0}))
            return [], []

        worker_count = min(self._max_workers, len(destinations))
        with ThreadPoolExecutor(max_workers=worker_count, thread_name_prefix="outbound-delivery") as executor:
            futures: list[Future] = [
                executor.submit(
                    contextvars.copy_context().run,
                    self._job_deliver_one,
                    payload=event.payload,
                    transaction_set_destination=transaction_set_destination,
                    transaction_set_type=transaction_set_type,
                    guide_id=guide_id,
                    envelope=envelope,
                )
                for transaction_set_destination in destinations
            ]

        fulfilled: list[dict[str, Any]] = []
        rejected: list[dict[str, Any]] = []
        for destination_index, future in enumerate(futures):
            error = future.exception()
            if error is None:
                fulfilled.append({"value": future.result()})
                continue
            logger.warning("delivery to destination %d failed: %s", destination_index, error)
            rejected.append(
                {
                    "reason": {
                        **job_serialize_error(error),
                        "errorCode": job_error_code_for_exception(error),
                        "destinationIndex": destination_index,
                    }
                }
            )

        timeline.append(
            domain_build_stage_event(
                stage="deliver",
                status="completed" if not rejected else "failed",
                details={"fulfilled": len(fulfilled), "rejected": len(rejected)},
            )
        )
        return fulfilled, rejected

    def _job_deliver_one(
        self,
        payload: Any,
        transaction_set_destination: TransactionSetDestination,
        transaction_set_type: str,
        guide_id: str,
        envelope: Envelope,
    ) -> dict[str, object]:
        """Map, validate, translate and deliver for one destination."""

        if transaction_set_destination.mapping_id:
            guide_json = self._mapping_invoker.adapter_invoke_mapping(
                mapping_id=transaction_set_destination.mapping_id,
                input_payload=payload,
            )
        else:
            guide_json = payload

        domain_validate_transaction_set_control_numbers(guide_json)
        edi_text = self._translator.adapter_translate_json_to_edi(
            guide_json=guide_json,
            guide_id=guide_id,
            envelope=envelope,
        )

        destination: Destination = transaction_set_destination.destination
        if isinstance(destination, BucketDestination):
            destination = job_bucket_destination_for_event(
                destination=destination,
                isa_control_number=envelope.interchange_header.control_number,
                transaction_set_type=transaction_set_type,
            )
        return self._delivery.adapter_deliver(destination=destination, edi_text=edi_text)

    def _job_fail(
        self,
        execution_id: str,
        error: BaseException,
        details: Any | None,
        timeline: list[dict[str, object]],
    ) -> ExecutionFailureResponse:
        """Record a failed run once and build its failure response."""

        error_code = job_error_code_for_exception(error)
        error_message = job_error_message(error)
        if details is None and error_code == UNEXPECTED_ERROR_CODE:
            details = job_serialize_error(error)

        timeline.append(domain_build_failed_stage_event(stage="run", error=error))
        logger.error("outbound execution failed: %s (%s)", error_message, error_code)
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
