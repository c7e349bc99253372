"""Main module entrypoint for the deployment orchestrator CLI.

This module validates startup configuration, runs one orchestrator command
and exits with the command's status.
"""

import argparse
import logging
import sys

from stack_orchestrator.bootstrap import bootstrap_create_deployment_orchestrator
from stack_orchestrator.config import SettingsLoadError, config_load_settings
from stack_orchestrator.domain import ConfigurationError, ProbeTimeoutError, ValidationGapError
from stack_orchestrator.jobs import job_render_access_info, job_render_report

logger = logging.getLogger(__name__)

_GENERATE_TRAFFIC_DEFAULT_REQUESTS = 90


def main_build_argument_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser.

    Returns:
        argparse.ArgumentParser: Parser for orchestrator commands.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    argument_parser = argparse.ArgumentParser(
        prog="stack-orchestrator",
        description="Bring up the demo stack, wait for readiness, generate traffic and validate metrics",
    )
    argument_parser.add_argument(
        "command",
        nargs="?",
        default="deploy",
        choices=("deploy", "status", "test-metrics", "generate-traffic", "cleanup"),
        help="`deploy` builds and validates the complete stack, `status` shows service health and sample "
        "metrics, `test-metrics` validates metric collection, `generate-traffic` sends additional load, "
        "`cleanup` removes containers and volumes",
        type=str,
    )
    argument_parser.add_argument(
        "--strict-metrics",
        dest="strict_metrics",
        action="store_true",
        help="Exit non-zero when an expected metric is missing or the app metrics endpoint check fails",
    )
    argument_parser.add_argument(
        "--requests",
        dest="requests",
        type=int,
        help="Requests per traffic round, overrides TRAFFIC_REQUESTS_PER_ROUND",
    )
    argument_parser.add_argument(
        "--concurrency",
        dest="concurrency",
        type=int,
        help="Maximum concurrent traffic requests, overrides TRAFFIC_CONCURRENCY",
    )
    return argument_parser


def main(argv: list[str] | None = None) -> None:
    """Run the selected orchestrator command.

    Args:
        argv: Optional argument list, defaults to `sys.argv[1:]`.

    Returns:
        None: Exits through `SystemExit` with the command status.

    Raises:
        SystemExit: Raised with exit code 0 on success and 1 on failure.
    """

    parsed_arguments = main_build_argument_parser().parse_args(argv)

    try:
        settings = config_load_settings()
    except SettingsLoadError as error:
        logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
        logger.error("%s", error)
        raise SystemExit(1) from error

    logging.basicConfig(level=settings.log_level, format="[%(levelname)s] %(message)s")

    traffic_requests = parsed_arguments.requests
    if traffic_requests is None and parsed_arguments.command == "generate-traffic":
        traffic_requests = _GENERATE_TRAFFIC_DEFAULT_REQUESTS

    try:
        orchestrator = bootstrap_create_deployment_orchestrator(
            settings=settings,
            strict_metrics=parsed_arguments.strict_metrics,
            traffic_requests=traffic_requests,
            traffic_concurrency=parsed_arguments.concurrency,
        )
        try:
            execution_result = orchestrator.job_execute(job_name=parsed_arguments.command)
        finally:
            orchestrator.job_close()
    except ConfigurationError as error:
        logger.error("Configuration error: %s", error)
        raise SystemExit(1) from error

    report = execution_result.report
    sys.stdout.write(job_render_report(report) + "\n")
    if parsed_arguments.command == "deploy" and not report.errors:
        sys.stdout.write(
            "\n"
            + job_render_access_info(
                app_base_url=settings.app_base_url,
                prometheus_base_url=settings.prometheus_base_url,
                grafana_base_url=settings.grafana_base_url,
                alertmanager_base_url=settings.alertmanager_base_url,
            )
            + "\n"
        )

    try:
        report.report_raise_for_mandatory_failures()
        if report.strict_metrics:
            report.report_raise_for_validation_gaps()
    except ProbeTimeoutError as error:
        logger.error("Deployment failed: %s", error)
        raise SystemExit(1) from error
    except ValidationGapError as error:
        logger.error("Metric validation failed: %s", error)
        raise SystemExit(1) from error
    raise SystemExit(report.report_exit_code())


if __name__ == "__main__":
    main()
