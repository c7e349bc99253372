"""Regression tests for deployment orchestrator command workflows and exit codes."""

from __future__ import annotations

from typing import Any

import pytest

from stack_orchestrator.adapters import (
    ComposeCommandError,
    ComposeCommandResult,
    ProbeOutcome,
    TransientNetworkError,
)
from stack_orchestrator.domain import (
    ConfigurationError,
    HealthProbe,
    ProbeTimeoutError,
    ServiceSpec,
    ServiceState,
    ValidationGapError,
    ValidationResult,
)
from stack_orchestrator.jobs import (
    DeploymentJobOrchestrator,
    DeploymentOrchestratorConfig,
    DeploymentReport,
    ServiceReadinessPoller,
    job_render_report,
)


class _ComposeStub:
    """Compose runtime stub recording lifecycle calls."""

    def __init__(self, failing_commands: frozenset[str] = frozenset(), missing: list[str] | None = None):
        self.calls: list[str] = []
        self._failing_commands = failing_commands
        self._missing = missing or []

    def adapter_missing_prerequisites(self) -> list[str]:
        return list(self._missing)

    def adapter_up(self) -> ComposeCommandResult:
        return self._run("up")

    def adapter_down(self, remove_volumes: bool = True, remove_orphans: bool = False) -> ComposeCommandResult:
        _ = (remove_volumes, remove_orphans)
        return self._run("down")

    def adapter_ps(self) -> ComposeCommandResult:
        return self._run("ps", output="rails-app   running\npostgres    running\n")

    def adapter_logs_tail(self, service_name: str | None = None, tail_lines: int = 20) -> str:
        self.calls.append(f"logs:{service_name}")
        return f"{service_name} log line\n"

    def adapter_system_prune(self) -> ComposeCommandResult:
        return self._run("prune")

    def _run(self, command: str, output: str = "") -> ComposeCommandResult:
        self.calls.append(command)
        if command in self._failing_commands:
            raise ComposeCommandError(f"{command} failed", return_code=1, output=f"{command} error output\n")
        return ComposeCommandResult(argv=(command,), return_code=0, output=output)


class _ProbeStub:
    """Probe stub where listed hosts never become healthy."""

    def __init__(self, unhealthy_hosts: frozenset[str] = frozenset()):
        self.calls: list[str] = []
        self._unhealthy_hosts = unhealthy_hosts

    def adapter_probe(self, probe: HealthProbe) -> ProbeOutcome:
        self.calls.append(probe.url)
        if any(host in probe.url for host in self._unhealthy_hosts):
            raise TransientNetworkError("HTTP 503", target=probe.url, status_code=503)
        return ProbeOutcome(healthy=True, status_code=200, detail="HTTP 200")


class _HttpServiceStub:
    """HTTP service stub for load requests and exposition scrapes."""

    def __init__(self, metrics_text: str = "rails_up 1\n"):
        self.requested_urls: list[str] = []
        self.closed = False
        self._metrics_text = metrics_text

    def adapter_request_succeeds(self, url: str) -> bool:
        self.requested_urls.append(url)
        return True

    def adapter_fetch_text(self, url: str) -> str:
        return self._metrics_text

    def adapter_close(self) -> None:
        self.closed = True


class _QueryStub:
    """Query stub returning a populated vector for known metrics."""

    def __init__(self, present_metrics: frozenset[str]):
        self._present_metrics = present_metrics

    def adapter_query_instant(self, query_endpoint: str, query: str) -> list[dict[str, Any]]:
        if query in self._present_metrics:
            return [{"metric": {"__name__": query}, "value": [1718000000.0, "1"]}]
        return []


class _DashboardStub:
    def adapter_search_dashboard_titles(self, query: str) -> list[str]:
        return ["Rails SRE Monitoring Dashboard"]


def _specs() -> list[ServiceSpec]:
    def _spec(name: str, mandatory: bool = True, depends_on: tuple[str, ...] = ()) -> ServiceSpec:
        return ServiceSpec(
            name=name,
            health_probe=HealthProbe(url=f"http://{name}.test/health"),
            max_attempts=3,
            poll_interval_seconds=1.0,
            mandatory=mandatory,
            depends_on=depends_on,
        )

    return [
        _spec("postgres"),
        _spec("redis"),
        _spec("app", depends_on=("postgres", "redis")),
        _spec("grafana", mandatory=False),
    ]


def _build_orchestrator(
    compose_stub: _ComposeStub | None = None,
    probe_stub: _ProbeStub | None = None,
    http_stub: _HttpServiceStub | None = None,
    present_metrics: frozenset[str] = frozenset({"rails_up", "redis_up"}),
    strict_metrics: bool = False,
    sleep_calls: list[float] | None = None,
) -> DeploymentJobOrchestrator:
    sleep_function = sleep_calls.append if sleep_calls is not None else (lambda seconds: None)
    return DeploymentJobOrchestrator(
        compose_runtime=compose_stub or _ComposeStub(),
        readiness_poller=ServiceReadinessPoller(probe_port=probe_stub or _ProbeStub(), sleep_function=lambda s: None),
        http_service=http_stub or _HttpServiceStub(),
        query_port=_QueryStub(present_metrics),
        dashboard_port=_DashboardStub(),
        service_specs=_specs(),
        config=DeploymentOrchestratorConfig(
            app_base_url="http://app.test/",
            prometheus_base_url="http://prometheus.test",
            metric_names=("rails_up", "redis_up"),
            traffic_rounds=2,
            traffic_requests_per_round=6,
            traffic_concurrency=2,
            traffic_round_pause_seconds=10.0,
            metrics_settle_seconds=30.0,
            strict_metrics=strict_metrics,
        ),
        sleep_function=sleep_function,
    )


def test_jobs_deploy_runs_full_sequence_and_succeeds() -> None:
    """Run bring-up, readiness, load and validation in order with exit code 0.

    Returns:
        None: Assertions validate full deploy workflow.

    Raises:
        AssertionError: Raised when workflow order or results differ.
    """

    compose_stub = _ComposeStub()
    http_stub = _HttpServiceStub()
    sleep_calls: list[float] = []
    orchestrator = _build_orchestrator(compose_stub=compose_stub, http_stub=http_stub, sleep_calls=sleep_calls)

    execution_result = orchestrator.job_execute(job_name="deploy")
    report = execution_result.report

    assert execution_result.status == "success"
    assert report.report_exit_code() == 0
    assert compose_stub.calls == ["down", "up"]
    assert [status.state for status in report.statuses] == [ServiceState.HEALTHY] * 4
    assert [load_result.total_requests for load_result in report.load_results] == [6, 6]
    assert sorted(set(http_stub.requested_urls)) == [
        "http://app.test/",
        "http://app.test/health",
        "http://app.test/metrics",
    ]
    assert orchestrator.request_counter.total == 12
    assert sleep_calls == [10.0, 30.0]
    assert report.scrape_check_passed is True
    assert report.dashboard_present is True
    assert all(result.present for result in report.validation_results)
    assert [event["stage"] for event in report.timeline if event["status"] == "completed"] == [
        "prerequisites",
        "compose_down",
        "compose_up",
        "readiness",
        "load",
        "validation",
    ]
    assert "RESULT: SUCCESS" in job_render_report(report)


def test_jobs_deploy_mandatory_timeout_fails_after_attempting_all_services() -> None:
    """Exit non-zero when a mandatory service times out, still probing every service.

    Returns:
        None: Assertions validate mandatory failure propagation.

    Raises:
        AssertionError: Raised when failure aborts early or exits zero.
    """

    compose_stub = _ComposeStub()
    probe_stub = _ProbeStub(unhealthy_hosts=frozenset({"app.test"}))
    orchestrator = _build_orchestrator(compose_stub=compose_stub, probe_stub=probe_stub)

    execution_result = orchestrator.job_execute(job_name="deploy")
    report = execution_result.report

    assert execution_result.status == "failed"
    assert report.report_exit_code() == 1
    assert [(status.name, status.state) for status in report.statuses] == [
        ("postgres", ServiceState.HEALTHY),
        ("redis", ServiceState.HEALTHY),
        ("app", ServiceState.TIMED_OUT),
        ("grafana", ServiceState.HEALTHY),
    ]
    assert probe_stub.calls.count("http://app.test/health") == 3
    assert report.service_logs == {"app": "app log line\n"}
    with pytest.raises(ProbeTimeoutError) as error_info:
        report.report_raise_for_mandatory_failures()
    assert error_info.value.service_names == ("app",)


def test_jobs_deploy_optional_timeout_keeps_success() -> None:
    """Exit zero when only an optional service times out.

    Returns:
        None: Assertions validate optional failure handling.

    Raises:
        AssertionError: Raised when optional failures fail the run.
    """

    orchestrator = _build_orchestrator(probe_stub=_ProbeStub(unhealthy_hosts=frozenset({"grafana.test"})))

    report = orchestrator.job_execute(job_name="deploy").report

    assert report.statuses[-1].state is ServiceState.TIMED_OUT
    assert report.report_exit_code() == 0


def test_jobs_deploy_compose_up_failure_stops_before_probing() -> None:
    """Report compose failure with captured output and skip readiness.

    Returns:
        None: Assertions validate compose failure handling.

    Raises:
        AssertionError: Raised when probing runs after failed bring-up.
    """

    probe_stub = _ProbeStub()
    orchestrator = _build_orchestrator(compose_stub=_ComposeStub(failing_commands=frozenset({"up"})), probe_stub=probe_stub)

    report = orchestrator.job_execute(job_name="deploy").report

    assert report.report_exit_code() == 1
    assert report.errors == ["compose up failed: up failed"]
    assert report.compose_output == "up error output\n"
    assert probe_stub.calls == []


def test_jobs_deploy_tolerates_failed_teardown_of_previous_stack() -> None:
    """Continue deploy when cleanup of a previous stack fails.

    Returns:
        None: Assertions validate tolerated teardown failure.

    Raises:
        AssertionError: Raised when teardown failure aborts deploy.
    """

    orchestrator = _build_orchestrator(compose_stub=_ComposeStub(failing_commands=frozenset({"down"})))

    report = orchestrator.job_execute(job_name="deploy").report

    assert report.report_exit_code() == 0
    assert any(event["stage"] == "compose_down" and event["status"] == "skipped" for event in report.timeline)


def test_jobs_deploy_missing_prerequisites_raise_configuration_error() -> None:
    """Abort before any compose call when docker tooling is missing.

    Returns:
        None: Assertions validate prerequisite check.

    Raises:
        AssertionError: Raised when deploy proceeds without tooling.
    """

    compose_stub = _ComposeStub(missing=["docker"])
    orchestrator = _build_orchestrator(compose_stub=compose_stub)

    with pytest.raises(ConfigurationError, match="docker"):
        orchestrator.job_execute(job_name="deploy")
    assert compose_stub.calls == []


def test_jobs_test_metrics_strict_mode_fails_on_validation_gap() -> None:
    """Exit non-zero for missing metrics only in strict mode.

    Returns:
        None: Assertions validate strict metric handling.

    Raises:
        AssertionError: Raised when strict mode is ignored.
    """

    lenient_report = _build_orchestrator(present_metrics=frozenset({"rails_up"})).job_execute("test-metrics").report
    strict_report = _build_orchestrator(
        present_metrics=frozenset({"rails_up"}),
        strict_metrics=True,
    ).job_execute("test-metrics").report

    assert lenient_report.report_missing_metrics() == ["redis_up"]
    assert lenient_report.report_exit_code() == 0
    assert lenient_report.dashboard_present is None
    assert strict_report.report_exit_code() == 1
    with pytest.raises(ValidationGapError, match="redis_up"):
        strict_report.report_raise_for_validation_gaps()


def test_jobs_status_reports_snapshot_without_waiting() -> None:
    """Probe every service once and include container listing and metrics sample.

    Returns:
        None: Assertions validate status snapshot command.

    Raises:
        AssertionError: Raised when snapshot waits or misses sections.
    """

    metrics_text = "\n".join(f"metric_{index} 1" for index in range(40))
    probe_stub = _ProbeStub(unhealthy_hosts=frozenset({"app.test"}))
    orchestrator = _build_orchestrator(probe_stub=probe_stub, http_stub=_HttpServiceStub(metrics_text=metrics_text))

    report = orchestrator.job_execute(job_name="status").report

    assert len(probe_stub.calls) == 4
    assert report.statuses[2].state is ServiceState.UNHEALTHY
    assert report.report_exit_code() == 1
    assert "rails-app   running" in report.compose_output
    assert len(report.metrics_sample.splitlines()) == 15


def test_jobs_generate_traffic_runs_single_round() -> None:
    """Run one traffic round without bring-up or validation.

    Returns:
        None: Assertions validate traffic-only command.

    Raises:
        AssertionError: Raised when other stages run.
    """

    compose_stub = _ComposeStub()
    orchestrator = _build_orchestrator(compose_stub=compose_stub)

    report = orchestrator.job_execute(job_name="generate-traffic").report

    assert len(report.load_results) == 1
    assert report.load_results[0].total_requests == 6
    assert compose_stub.calls == []
    assert report.report_exit_code() == 0


@pytest.mark.parametrize(
    ("failing_commands", "expected_exit_code", "expected_calls"),
    [
        (frozenset(), 0, ["down", "prune"]),
        (frozenset({"down"}), 1, ["down"]),
    ],
)
def test_jobs_cleanup_tears_down_stack(
    failing_commands: frozenset[str],
    expected_exit_code: int,
    expected_calls: list[str],
) -> None:
    """Remove stack and prune, failing the run when teardown fails.

    Args:
        failing_commands: Compose commands that fail.
        expected_exit_code: Expected report exit code.
        expected_calls: Expected compose call sequence.

    Returns:
        None: Assertions validate cleanup command.

    Raises:
        AssertionError: Raised when cleanup outcome differs.
    """

    compose_stub = _ComposeStub(failing_commands=failing_commands)
    orchestrator = _build_orchestrator(compose_stub=compose_stub)

    report = orchestrator.job_execute(job_name="cleanup").report

    assert report.report_exit_code() == expected_exit_code
    assert compose_stub.calls == expected_calls


def test_jobs_orchestrator_rejects_unsupported_job_and_invalid_catalog() -> None:
    """Reject unknown commands and invalid service catalogs.

    Returns:
        None: Assertions validate input checks.

    Raises:
        AssertionError: Raised when invalid inputs are accepted.
    """

    orchestrator = _build_orchestrator()
    with pytest.raises(ValueError, match="unsupported job_name"):
        orchestrator.job_execute(job_name="rollback")

    with pytest.raises(ConfigurationError, match="empty"):
        DeploymentJobOrchestrator(
            compose_runtime=_ComposeStub(),
            readiness_poller=ServiceReadinessPoller(probe_port=_ProbeStub()),
            http_service=_HttpServiceStub(),
            query_port=_QueryStub(frozenset()),
            dashboard_port=_DashboardStub(),
            service_specs=[],
            config=DeploymentOrchestratorConfig(
                app_base_url="http://app.test",
                prometheus_base_url="http://prometheus.test",
                metric_names=(),
            ),
        )


def test_jobs_orchestrator_close_releases_http_service() -> None:
    """Close the shared HTTP service on orchestrator close.

    Returns:
        None: Assertions validate resource release.

    Raises:
        AssertionError: Raised when HTTP service stays open.
    """

    http_stub = _HttpServiceStub()
    orchestrator = _build_orchestrator(http_stub=http_stub)

    orchestrator.job_close()

    assert http_stub.closed


def test_jobs_report_records_stages_and_renders_sections() -> None:
    """Stamp stage events and render populated report sections.

    Returns:
        None: Assertions validate report helpers.

    Raises:
        AssertionError: Raised when event shape or rendering differs.
    """

    report = DeploymentReport(
        command="test-metrics",
        validation_results=[
            ValidationResult(metric_name="rails_up", present=True, sample_value="1"),
            ValidationResult(metric_name="redis_up", present=False),
        ],
        errors=["compose up failed: boom"],
    )
    report.report_record_stage(stage="validation", status="started")
    report.report_record_stage(stage="validation", status="completed", details={"missing_metrics": ["redis_up"]})

    rendered_report = job_render_report(report)

    assert "details" not in report.timeline[0]
    assert report.timeline[1]["details"] == {"missing_metrics": ["redis_up"]}
    assert "at_utc" in report.timeline[1]
    assert "rails_up               OK value=1" in rendered_report
    assert "redis_up               MISSING" in rendered_report
    assert "ERRORS:\n  compose up failed: boom" in rendered_report
    assert rendered_report.endswith("RESULT: FAILED")


def test_jobs_test_metrics_strict_mode_fails_on_failed_app_scrape() -> None:
    """Exit non-zero in strict mode when the app does not expose `rails_up 1`.

    Returns:
        None: Assertions validate scrape check handling.

    Raises:
        AssertionError: Raised when a failed scrape check is ignored.
    """

    lenient_report = _build_orchestrator(http_stub=_HttpServiceStub(metrics_text="rails_up 0\n")).job_execute(
        "test-metrics"
    ).report
    strict_report = _build_orchestrator(
        http_stub=_HttpServiceStub(metrics_text="rails_up 0\n"),
        strict_metrics=True,
    ).job_execute("test-metrics").report

    assert lenient_report.scrape_check_passed is False
    assert lenient_report.report_exit_code() == 0
    assert strict_report.report_missing_metrics() == []
    assert strict_report.report_validation_gaps() == ["app metrics endpoint"]
    assert strict_report.report_exit_code() == 1
    with pytest.raises(ValidationGapError, match="app metrics endpoint"):
        strict_report.report_raise_for_validation_gaps()
