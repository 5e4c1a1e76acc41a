"""Main module entrypoint for local runtime execution.

This module validates startup configuration and launches the FastAPI service
or runs one workflow from the command line.
"""

import argparse
import json
import sys
from pathlib import Path

import uvicorn

from x12_exchange.bootstrap import bootstrap_create_application, bootstrap_create_services
from x12_exchange.jobs import ExecutionFailureResponse
from x12_exchange.partners import partners_seed_sample_records


def main_build_argument_parser() -> argparse.ArgumentParser:
    """Build the command-line parser.

    Returns:
        argparse.ArgumentParser: Parser with runtime commands and their options.
    """

    argument_parser = argparse.ArgumentParser(description="X12 exchange runtime entrypoint")
    argument_parser.add_argument(
        "command",
        nargs="?",
        default="api",
        choices=("api", "outbound-run", "ftp-poll", "seed-sample"),
        help="Runtime command: `api` starts server, `outbound-run` runs one outbound event file, "
        "`ftp-poll` runs one configured poll, `seed-sample` writes sample partner records",
        type=str,
    )
    argument_parser.add_argument(
        "--event-file",
        dest="event_file",
        type=Path,
        help="JSON outbound event file for `outbound-run`",
    )
    argument_parser.add_argument(
        "--ftp-config-id",
        dest="ftp_config_id",
        type=str,
        help="Poll target key for `ftp-poll`",
    )
    argument_parser.add_argument("--guide-850", dest="guide_850_id", type=str, help="850 guide id for `seed-sample`")
    argument_parser.add_argument("--guide-855", dest="guide_855_id", type=str, help="855 guide id for `seed-sample`")
    argument_parser.add_argument(
        "--bucket-name",
        dest="bucket_name",
        type=str,
        help="Outbound bucket for `seed-sample`; defaults to the poller destination bucket",
    )
    argument_parser.add_argument(
        "--webhook-url",
        dest="webhook_url",
        type=str,
        default="https://example.com/webhook",
        help="Inbound webhook URL for `seed-sample`",
    )
    return argument_parser


def main(argv: list[str] | None = None) -> None:
    """Run selected runtime command with validated startup configuration.

    Args:
        argv: Optional argument list; `sys.argv` is used when omitted.

    Returns:
        None: This function does not return a runtime value.

    Raises:
        SettingsLoadError: Raised when configuration validation fails.
        SystemExit: Raised with status 1 when a workflow fails or arguments are missing.
    """

    argument_parser = main_build_argument_parser()
    parsed_arguments = argument_parser.parse_args(argv)

    if parsed_arguments.command == "outbound-run":
        if parsed_arguments.event_file is None:
            argument_parser.error("--event-file is required for outbound-run")
        raw_event = json.loads(parsed_arguments.event_file.read_text(encoding="utf-8"))
        services = bootstrap_create_services()
        main_emit_outcome(services.outbound_pipeline.job_run(raw_event))
        return

    if parsed_arguments.command == "ftp-poll":
        if not parsed_arguments.ftp_config_id:
            argument_parser.error("--ftp-config-id is required for ftp-poll")
        services = bootstrap_create_services()
        main_emit_outcome(services.poll_orchestrator.job_execute_poll(parsed_arguments.ftp_config_id))
        return

    if parsed_arguments.command == "seed-sample":
        if not parsed_arguments.guide_850_id or not parsed_arguments.guide_855_id:
            argument_parser.error("--guide-850 and --guide-855 are required for seed-sample")
        services = bootstrap_create_services()
        written_keys = partners_seed_sample_records(
            key_value_store=services.key_value_store,
            keyspace=services.settings.partners_keyspace_name,
            guide_850_id=parsed_arguments.guide_850_id,
            guide_855_id=parsed_arguments.guide_855_id,
            bucket_name=parsed_arguments.bucket_name or services.settings.ftp_destination_bucket_name,
            webhook_url=parsed_arguments.webhook_url,
        )
        print(json.dumps({"written": written_keys}, indent=2))
        return

    services = bootstrap_create_services()
    uvicorn.run(
        bootstrap_create_application(services),
        host=services.settings.application_host,
        port=services.settings.application_port,
        log_config=None,
    )


def main_emit_outcome(outcome) -> None:
    """Print a workflow outcome as JSON and exit non-zero on failure.

    Args:
        outcome: Success or failure response exposing `to_payload()`.

    Returns:
        None: Prints the payload to stdout as side effect.

    Raises:
        SystemExit: Raised with status 1 for failure responses.
    """

    print(json.dumps(outcome.to_payload(), indent=2, default=str))
    if isinstance(outcome, ExecutionFailureResponse):
        sys.exit(1)


if __name__ == "__main__":
    main()
