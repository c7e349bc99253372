"""Orchestrator bootstrap wiring for startup validation and dependency assembly."""

from __future__ import annotations

from .adapters import DockerComposeAdapter, GrafanaSearchAdapter, HttpServiceAdapter, PrometheusQueryAdapter
from .catalog import catalog_build_service_specs
from .config import OrchestratorSettings, config_load_settings
from .jobs import DeploymentJobOrchestrator, DeploymentOrchestratorConfig, ServiceReadinessPoller


def bootstrap_create_deployment_orchestrator(
    settings: OrchestratorSettings | None = None,
    strict_metrics: bool = False,
    traffic_requests: int | None = None,
    traffic_concurrency: int | None = None,
) -> DeploymentJobOrchestrator:
    """Build the deployment orchestrator from validated settings.

    Args:
        settings: Optional pre-loaded settings; loaded from environment when None.
        strict_metrics: Whether missing metrics fail the run.
        traffic_requests: Optional override of requests per traffic round.
        traffic_concurrency: Optional override of traffic concurrency.

    Returns:
        DeploymentJobOrchestrator: Fully wired orchestrator instance.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
        ConfigurationError: Raised when service catalog or overrides are invalid.
    """

    resolved_settings = settings or config_load_settings()
    http_service = HttpServiceAdapter(request_timeout_seconds=resolved_settings.probe_timeout_seconds)
    compose_runtime = DockerComposeAdapter(
        project_directory=resolved_settings.project_directory,
        compose_file=resolved_settings.compose_file,
        compose_command=resolved_settings.compose_command,
        command_timeout_seconds=resolved_settings.compose_timeout_seconds,
    )
    try:
        return DeploymentJobOrchestrator(
            compose_runtime=compose_runtime,
            readiness_poller=ServiceReadinessPoller(probe_port=http_service),
            http_service=http_service,
            query_port=PrometheusQueryAdapter(http_service=http_service),
            dashboard_port=GrafanaSearchAdapter(http_service=http_service, base_url=resolved_settings.grafana_base_url),
            service_specs=catalog_build_service_specs(resolved_settings),
            config=DeploymentOrchestratorConfig(
                app_base_url=resolved_settings.app_base_url,
                prometheus_base_url=resolved_settings.prometheus_base_url,
                metric_names=tuple(resolved_settings.metric_names),
                grafana_dashboard_title=resolved_settings.grafana_dashboard_title,
                traffic_rounds=resolved_settings.traffic_rounds,
                traffic_requests_per_round=(
                    resolved_settings.traffic_requests_per_round if traffic_requests is None else traffic_requests
                ),
                traffic_concurrency=(
                    resolved_settings.traffic_concurrency if traffic_concurrency is None else traffic_concurrency
                ),
                traffic_round_pause_seconds=resolved_settings.traffic_round_pause_seconds,
                metrics_settle_seconds=resolved_settings.metrics_settle_seconds,
                strict_metrics=strict_metrics,
            ),
        )
    except ValueError:
        http_service.adapter_close()
        raise
