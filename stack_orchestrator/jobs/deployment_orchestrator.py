"""Job-layer deployment orchestrator with stage timeline diagnostics."""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Callable

from ..adapters import (
    ComposeCommandError,
    ComposeRuntimePort,
    DashboardSearchPort,
    HttpServicePort,
    MetricQueryPort,
    TransientNetworkError,
)
from ..domain import (
    ConfigurationError,
    RequestCounter,
    ServiceSpec,
    ServiceState,
    domain_order_service_specs,
    domain_validate_http_url,
)
from .interfaces import JobExecutionResult, JobOrchestratorPort
from .load_generation import job_generate_load
from .metrics_validation import job_check_dashboard, job_check_scrape_text, job_validate_metrics
from .readiness import ServiceReadinessPoller
from .report import DeploymentReport, job_state_counts

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeploymentOrchestratorConfig:
    """Configuration values for orchestrator command execution.

    Attributes:
        app_base_url: Application base URL, source of load targets and scrape checks.
        prometheus_base_url: Query API endpoint for metric validation.
        metric_names: Metrics expected after load generation.
        grafana_dashboard_title: Dashboard title expected in Grafana search.
        traffic_rounds: Load rounds during `deploy`.
        traffic_requests_per_round: Requests per load round.
        traffic_concurrency: Maximum in-flight requests.
        traffic_round_pause_seconds: Pause between load rounds.
        metrics_settle_seconds: Wait between load and metric validation.
        strict_metrics: Whether missing metrics fail the run.
        metrics_sample_lines: Lines of exposition text shown by `status`.
        log_tail_lines: Log lines collected for failed services.
    """

    app_base_url: str
    prometheus_base_url: str
    metric_names: tuple[str, ...]
    grafana_dashboard_title: str = "Rails SRE Monitoring"
    traffic_rounds: int = 3
    traffic_requests_per_round: int = 60
    traffic_concurrency: int = 10
    traffic_round_pause_seconds: float = 10.0
    metrics_settle_seconds: float = 30.0
    strict_metrics: bool = False
    metrics_sample_lines: int = 15
    log_tail_lines: int = 20


class DeploymentJobOrchestrator(JobOrchestratorPort):
    """Concrete orchestrator for the `deploy`, `status`, `test-metrics`,
    `generate-traffic` and `cleanup` commands."""

    _DEPLOY_JOB_NAME = "deploy"
    _STATUS_JOB_NAME = "status"
    _TEST_METRICS_JOB_NAME = "test-metrics"
    _GENERATE_TRAFFIC_JOB_NAME = "generate-traffic"
    _CLEANUP_JOB_NAME = "cleanup"

    def __init__(
        self,
        compose_runtime: ComposeRuntimePort,
        readiness_poller: ServiceReadinessPoller,
        http_service: HttpServicePort,
        query_port: MetricQueryPort,
        dashboard_port: DashboardSearchPort,
        service_specs: Sequence[ServiceSpec],
        config: DeploymentOrchestratorConfig,
        sleep_function: Callable[[float], None] | None = None,
    ):
        """Initialize orchestrator dependencies and validate configuration.

        Args:
            compose_runtime: Container stack lifecycle adapter.
            readiness_poller: Sequential readiness poller.
            http_service: Adapter for load requests and exposition scrapes.
            query_port: Metric query adapter.
            dashboard_port: Dashboard search adapter.
            service_specs: Declared stack services.
            config: Command execution configuration.
            sleep_function: Optional sleep override, defaults to `time.sleep`.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies are missing.
            ConfigurationError: Raised for invalid service list, URLs or bounds.
        """

        if compose_runtime is None:
            raise ValueError("compose_runtime must not be None")
        if readiness_poller is None:
            raise ValueError("readiness_poller must not be None")
        if http_service is None:
            raise ValueError("http_service must not be None")
        if query_port is None:
            raise ValueError("query_port must not be None")
        if dashboard_port is None:
            raise ValueError("dashboard_port must not be None")
        if config.traffic_rounds < 0:
            raise ConfigurationError("config.traffic_rounds must be >= 0")
        if config.traffic_requests_per_round < 0:
            raise ConfigurationError("config.traffic_requests_per_round must be >= 0")
        if config.traffic_concurrency < 1:
            raise ConfigurationError("config.traffic_concurrency must be >= 1")

        self._app_base_url = domain_validate_http_url(
            config.app_base_url, field_name="config.app_base_url"
        ).rstrip("/")
        self._prometheus_base_url = domain_validate_http_url(
            config.prometheus_base_url, field_name="config.prometheus_base_url"
        )
        self._ordered_specs = domain_order_service_specs(service_specs)
        self._compose_runtime = compose_runtime
        self._readiness_poller = readiness_poller
        self._http_service = http_service
        self._query_port = query_port
        self._dashboard_port = dashboard_port
        self._config = config
        self._sleep_function = sleep_function or time.sleep
        self._request_counter = RequestCounter()

    @property
    def request_counter(self) -> RequestCounter:
        """Counter accumulating traffic outcomes across all rounds run by this instance."""

        return self._request_counter

    def job_supported_names(self) -> tuple[str, ...]:
        """Return supported command names.

        Returns:
            tuple[str, ...]: Supported command names.

        Raises:
            RuntimeError: This implementation does not raise runtime errors.
        """

        return (
            self._DEPLOY_JOB_NAME,
            self._STATUS_JOB_NAME,
            self._TEST_METRICS_JOB_NAME,
            self._GENERATE_TRAFFIC_JOB_NAME,
            self._CLEANUP_JOB_NAME,
        )

    def job_execute(self, job_name: str) -> JobExecutionResult:
        """Execute one command and aggregate its report.

        Args:
            job_name: Name of command to execute.

        Returns:
            JobExecutionResult: Final status with the aggregated report.

        Raises:
            ValueError: Raised when command name is unsupported.
            ConfigurationError: Raised when prerequisites are missing for `deploy`.
        """

        normalized_job_name = job_name.strip()
        handlers: dict[str, Callable[[DeploymentReport], None]] = {
            self._DEPLOY_JOB_NAME: self._job_run_deploy,
            self._STATUS_JOB_NAME: self._job_run_status,
            self._TEST_METRICS_JOB_NAME: self._job_run_test_metrics,
            self._GENERATE_TRAFFIC_JOB_NAME: self._job_run_generate_traffic,
            self._CLEANUP_JOB_NAME: self._job_run_cleanup,
        }
        handler = handlers.get(normalized_job_name)
        if handler is None:
            raise ValueError(f"unsupported job_name={normalized_job_name}")

        report = DeploymentReport(command=normalized_job_name, strict_metrics=self._config.strict_metrics)
        report.report_record_stage(stage="run", status="started")
        handler(report)

        status = "success" if report.report_exit_code() == 0 else "failed"
        report.report_record_stage(stage="run", status=status)
        return JobExecutionResult(job_name=normalized_job_name, status=status, report=report)

    def job_close(self) -> None:
        """Release HTTP connections held by the orchestrator."""

        self._http_service.adapter_close()

    def job_app_load_targets(self) -> list[str]:
        """Return application URLs used for synthetic traffic."""

        return [f"{self._app_base_url}/", f"{self._app_base_url}/health", f"{self._app_base_url}/metrics"]

    def _job_run_deploy(self, report: DeploymentReport) -> None:
        """Bring the stack up, wait for readiness, generate load and validate metrics."""

        self._job_check_prerequisites(report)

        report.report_record_stage(stage="compose_down", status="started")
        try:
            self._compose_runtime.adapter_down(remove_volumes=True, remove_orphans=True)
            report.report_record_stage(stage="compose_down", status="completed")
        except ComposeCommandError as error:
            logger.warning("Cleanup of previous stack failed, continuing: %s", error)
            report.report_record_stage(stage="compose_down", status="skipped", details={"error_message": str(error)})

        logger.info("Building and starting services...")
        report.report_record_stage(stage="compose_up", status="started")
        try:
            self._compose_runtime.adapter_up()
        except ComposeCommandError as error:
            logger.error("Failed to start services: %s", error)
            report.errors.append(f"compose up failed: {error}")
            report.compose_output = error.output or self._compose_runtime.adapter_logs_tail(
                tail_lines=self._config.log_tail_lines
            )
            report.report_record_stage(stage="compose_up", status="failed", details={"error_message": str(error)})
            return
        report.report_record_stage(stage="compose_up", status="completed")

        self._job_run_readiness(report)

        report.report_record_stage(stage="load", status="started")
        for round_index in range(self._config.traffic_rounds):
            if round_index > 0 and self._config.traffic_round_pause_seconds > 0:
                self._sleep_function(self._config.traffic_round_pause_seconds)
            logger.info("Traffic generation round %d/%d...", round_index + 1, self._config.traffic_rounds)
            report.load_results.append(
                job_generate_load(
                    request_port=self._http_service,
                    targets=self.job_app_load_targets(),
                    total_requests=self._config.traffic_requests_per_round,
                    concurrency=self._config.traffic_concurrency,
                    counter=self._request_counter,
                )
            )
        report.report_record_stage(
            stage="load",
            status="completed",
            details={"succeeded": self._request_counter.succeeded, "failed": self._request_counter.failed},
        )

        if self._config.metrics_settle_seconds > 0:
            logger.info("Waiting %.0fs for metrics collection to stabilize...", self._config.metrics_settle_seconds)
            self._sleep_function(self._config.metrics_settle_seconds)

        self._job_run_validation(report, include_dashboard=True)

    def _job_run_status(self, report: DeploymentReport) -> None:
        """Take a one-shot snapshot of service health, containers and metrics."""

        report.report_record_stage(stage="snapshot", status="started")
        report.statuses = [self._readiness_poller.job_probe_once(spec) for spec in self._ordered_specs]

        try:
            report.compose_output = self._compose_runtime.adapter_ps().output
        except ComposeCommandError as error:
            report.compose_output = f"container status unavailable: {error}"

        try:
            metrics_text = self._http_service.adapter_fetch_text(f"{self._app_base_url}/metrics")
            report.metrics_sample = "\n".join(metrics_text.splitlines()[: self._config.metrics_sample_lines])
        except TransientNetworkError as error:
            report.metrics_sample = f"metrics unavailable: {error}"

        report.report_record_stage(
            stage="snapshot",
            status="completed",
            details=job_state_counts(report.statuses),
        )

    def _job_run_test_metrics(self, report: DeploymentReport) -> None:
        self._job_run_validation(report, include_dashboard=False)

    def _job_run_generate_traffic(self, report: DeploymentReport) -> None:
        report.report_record_stage(stage="load", status="started")
        report.load_results.append(
            job_generate_load(
                request_port=self._http_service,
                targets=self.job_app_load_targets(),
                total_requests=self._config.traffic_requests_per_round,
                concurrency=self._config.traffic_concurrency,
                counter=self._request_counter,
            )
        )
        report.report_record_stage(stage="load", status="completed")

    def _job_run_cleanup(self, report: DeploymentReport) -> None:
        """Tear down containers and volumes, then prune unused objects."""

        report.report_record_stage(stage="cleanup", status="started")
        try:
            self._compose_runtime.adapter_down(remove_volumes=True)
            self._compose_runtime.adapter_system_prune()
        except ComposeCommandError as error:
            logger.error("Cleanup failed: %s", error)
            report.errors.append(f"cleanup failed: {error}")
            report.compose_output = error.output
            report.report_record_stage(stage="cleanup", status="failed", details={"error_message": str(error)})
            return
        logger.info("Cleanup completed.")
        report.report_record_stage(stage="cleanup", status="completed")

    def _job_check_prerequisites(self, report: DeploymentReport) -> None:
        """Fail fast when container tooling is not installed.

        Raises:
            ConfigurationError: Raised when required executables are missing.
        """

        missing_binaries = self._compose_runtime.adapter_missing_prerequisites()
        if missing_binaries:
            raise ConfigurationError(f"required executables not installed: {', '.join(missing_binaries)}")
        report.report_record_stage(stage="prerequisites", status="completed")

    def _job_run_readiness(self, report: DeploymentReport) -> None:
        """Wait for all services and collect log tails for the ones that timed out."""

        report.report_record_stage(stage="readiness", status="started")
        report.statuses = self._readiness_poller.job_run_startup_sequence(self._ordered_specs)
        for status in report.statuses:
            if status.state is ServiceState.TIMED_OUT:
                report.service_logs[status.name] = self._compose_runtime.adapter_logs_tail(
                    service_name=status.name,
                    tail_lines=self._config.log_tail_lines,
                )
        report.report_record_stage(
            stage="readiness",
            status="completed",
            details=job_state_counts(report.statuses),
        )

    def _job_run_validation(self, report: DeploymentReport, include_dashboard: bool) -> None:
        """Validate app exposition, query endpoint metrics and optionally the dashboard."""

        logger.info("Validating metrics collection...")
        report.report_record_stage(stage="validation", status="started")
        report.scrape_check_passed = job_check_scrape_text(
            text_port=self._http_service,
            metrics_url=f"{self._app_base_url}/metrics",
        )
        report.validation_results = job_validate_metrics(
            query_port=self._query_port,
            metric_names=self._config.metric_names,
            query_endpoint=self._prometheus_base_url,
        )
        if include_dashboard:
            report.dashboard_present = job_check_dashboard(
                search_port=self._dashboard_port,
                dashboard_title=self._config.grafana_dashboard_title,
            )
        report.report_record_stage(
            stage="validation",
            status="completed",
            details={"validation_gaps": report.report_validation_gaps()},
        )
