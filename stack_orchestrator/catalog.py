"""Default service catalog for the demo application monitoring stack."""

from __future__ import annotations

from typing import Any

from .config import OrchestratorSettings
from .domain import HealthProbe, ServiceSpec


def catalog_app_health_predicate(body: Any) -> bool:
    """Return whether the app health document reports a healthy status."""

    return isinstance(body, dict) and str(body.get("status", "")).lower() == "healthy"


def catalog_build_service_specs(settings: OrchestratorSettings) -> list[ServiceSpec]:
    """Build readiness specs for every service of the stack.

    Datastores are reached through their HTTP exporters. The app waits on
    both datastores; Grafana and Alertmanager wait on Prometheus.

    Args:
        settings: Validated runtime settings.

    Returns:
        list[ServiceSpec]: Specs in declaration order.

    Raises:
        ConfigurationError: Raised when a configured URL is malformed.
    """

    optional_services = set(settings.optional_services)
    poll_interval_seconds = settings.poll_interval_seconds

    def _spec(name: str, probe: HealthProbe, max_attempts: int, depends_on: tuple[str, ...] = ()) -> ServiceSpec:
        return ServiceSpec(
            name=name,
            health_probe=probe,
            max_attempts=max_attempts,
            poll_interval_seconds=poll_interval_seconds,
            mandatory=name not in optional_services,
            depends_on=depends_on,
        )

    return [
        _spec(
            "postgres",
            HealthProbe(url=f"{settings.postgres_exporter_url}/metrics"),
            settings.datastore_max_attempts,
        ),
        _spec(
            "redis",
            HealthProbe(url=f"{settings.redis_exporter_url}/metrics"),
            settings.datastore_max_attempts,
        ),
        _spec(
            "rails-app",
            HealthProbe(
                url=f"{settings.app_base_url}/health",
                expect_json=True,
                body_predicate=catalog_app_health_predicate,
            ),
            settings.app_max_attempts,
            depends_on=("postgres", "redis"),
        ),
        _spec(
            "prometheus",
            HealthProbe(url=f"{settings.prometheus_base_url}/-/healthy"),
            settings.monitoring_max_attempts,
        ),
        _spec(
            "grafana",
            HealthProbe(url=f"{settings.grafana_base_url}/api/health"),
            settings.monitoring_max_attempts,
            depends_on=("prometheus",),
        ),
        _spec(
            "alertmanager",
            HealthProbe(url=f"{settings.alertmanager_base_url}/-/healthy"),
            settings.monitoring_max_attempts,
            depends_on=("prometheus",),
        ),
    ]
