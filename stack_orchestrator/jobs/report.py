"""Aggregated run report and its textual rendering."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from ..domain import (
    LoadGenerationResult,
    ProbeTimeoutError,
    ServiceState,
    ServiceStatus,
    ValidationGapError,
    ValidationResult,
)


APP_SCRAPE_CHECK_NAME = "app metrics endpoint"


@dataclass
class DeploymentReport:
    """Everything one orchestrator command observed.

    Attributes:
        command: Executed subcommand name.
        statuses: Service statuses in execution order.
        validation_results: Metric query results.
        scrape_check_passed: App exposition check result, None when not run.
        dashboard_present: Dashboard search result, None when not run.
        load_results: One entry per traffic round.
        compose_output: Captured compose output (ps listing or failure output).
        metrics_sample: First lines of the app exposition text.
        service_logs: Log tails of failed services keyed by service name.
        errors: Fatal stage failures such as a failed compose command.
        strict_metrics: Whether missing metrics fail the run.
        timeline: Structured stage events.
    """

    command: str
    statuses: list[ServiceStatus] = field(default_factory=list)
    validation_results: list[ValidationResult] = field(default_factory=list)
    scrape_check_passed: bool | None = None
    dashboard_present: bool | None = None
    load_results: list[LoadGenerationResult] = field(default_factory=list)
    compose_output: str = ""
    metrics_sample: str = ""
    service_logs: dict[str, str] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)
    strict_metrics: bool = False
    timeline: list[dict[str, object]] = field(default_factory=list)

    def report_record_stage(self, stage: str, status: str, details: dict[str, Any] | None = None) -> None:
        """Append one stage event stamped with the current UTC time."""

        stage_event: dict[str, object] = {
            "stage": stage,
            "status": status,
            "at_utc": datetime.now(timezone.utc).isoformat(),
        }
        if details:
            stage_event["details"] = details
        self.timeline.append(stage_event)

    def report_mandatory_failures(self) -> list[ServiceStatus]:
        """Return mandatory services that did not end healthy."""

        return [status for status in self.statuses if status.mandatory and status.status_is_failure()]

    def report_missing_metrics(self) -> list[str]:
        """Return names of metrics that were not present."""

        return [result.metric_name for result in self.validation_results if not result.present]

    def report_validation_gaps(self) -> list[str]:
        """Return missing metric names, plus the app endpoint when its scrape check failed."""

        gap_names = self.report_missing_metrics()
        if self.scrape_check_passed is False:
            gap_names.insert(0, APP_SCRAPE_CHECK_NAME)
        return gap_names

    def report_exit_code(self) -> int:
        """Return process exit code: 0 on success, 1 on any fatal outcome."""

        if self.errors or self.report_mandatory_failures():
            return 1
        if self.strict_metrics and self.report_validation_gaps():
            return 1
        return 0

    def report_raise_for_mandatory_failures(self) -> None:
        """Escalate mandatory readiness failures.

        Raises:
            ProbeTimeoutError: Raised when any mandatory service is not healthy.
        """

        failed_names = tuple(status.name for status in self.report_mandatory_failures())
        if failed_names:
            raise ProbeTimeoutError(
                f"mandatory services not healthy: {', '.join(failed_names)}",
                service_names=failed_names,
            )

    def report_raise_for_validation_gaps(self) -> None:
        """Escalate missing metrics and a failed app scrape check.

        Raises:
            ValidationGapError: Raised when any validation check did not pass.
        """

        gap_names = tuple(self.report_validation_gaps())
        if gap_names:
            raise ValidationGapError(f"validation gaps: {', '.join(gap_names)}", metric_names=gap_names)


def job_render_report(report: DeploymentReport) -> str:
    """Render the final human-readable report.

    Args:
        report: Aggregated command report.

    Returns:
        str: Multi-line report text.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    lines = [f"=== {report.command.upper()} REPORT ==="]

    if report.statuses:
        lines.append("")
        lines.append("SERVICES:")
        for status in report.statuses:
            role = "mandatory" if status.mandatory else "optional"
            lines.append(
                f"  {status.name:<20} {status.state.value:<10} ({role}, attempts={status.attempts}) {status.detail}".rstrip()
            )

    if report.load_results:
        lines.append("")
        lines.append("TRAFFIC:")
        for round_index, load_result in enumerate(report.load_results, start=1):
            lines.append(
                f"  round {round_index}: {load_result.total_requests} requests, "
                f"{load_result.succeeded} succeeded, {load_result.failed} failed, "
                f"max in flight {load_result.max_in_flight}"
            )

    if report.validation_results or report.scrape_check_passed is not None or report.dashboard_present is not None:
        lines.append("")
        lines.append("METRICS:")
        if report.scrape_check_passed is not None:
            lines.append(f"  {APP_SCRAPE_CHECK_NAME:<22} {_job_render_check(report.scrape_check_passed)}")
        for result in report.validation_results:
            sample_text = f" value={result.sample_value}" if result.sample_value is not None else ""
            lines.append(f"  {result.metric_name:<22} {_job_render_check(result.present)}{sample_text}")
        if report.dashboard_present is not None:
            lines.append(f"  grafana dashboard      {_job_render_check(report.dashboard_present)}")

    if report.compose_output:
        lines.append("")
        lines.append("CONTAINERS:")
        lines.extend(f"  {line}" for line in report.compose_output.rstrip().splitlines())

    if report.metrics_sample:
        lines.append("")
        lines.append("METRICS SAMPLE:")
        lines.extend(f"  {line}" for line in report.metrics_sample.rstrip().splitlines())

    for service_name, log_text in report.service_logs.items():
        lines.append("")
        lines.append(f"LOGS ({service_name}):")
        lines.extend(f"  {line}" for line in log_text.rstrip().splitlines())

    if report.errors:
        lines.append("")
        lines.append("ERRORS:")
        lines.extend(f"  {error}" for error in report.errors)

    lines.append("")
    lines.append("RESULT: " + ("SUCCESS" if report.report_exit_code() == 0 else "FAILED"))
    return "\n".join(lines)


def job_render_access_info(
    app_base_url: str,
    prometheus_base_url: str,
    grafana_base_url: str,
    alertmanager_base_url: str,
) -> str:
    """Render the endpoint listing printed after a deployment."""

    return "\n".join(
        [
            "APPLICATION ACCESS:",
            f"  App:          {app_base_url}",
            f"  Health API:   {app_base_url}/health",
            f"  Metrics API:  {app_base_url}/metrics",
            "",
            "MONITORING ACCESS:",
            f"  Grafana:      {grafana_base_url}",
            f"  Prometheus:   {prometheus_base_url}",
            f"  Alertmanager: {alertmanager_base_url}",
        ]
    )


def _job_render_check(passed: bool) -> str:
    return "OK" if passed else "MISSING"


def job_state_counts(statuses: list[ServiceStatus]) -> dict[str, int]:
    """Return number of services per state value."""

    counts = {state.value: 0 for state in ServiceState}
    for status in statuses:
        counts[status.state.value] += 1
    return counts
