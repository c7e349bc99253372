"""Typed runtime settings with dotenv support and startup validation."""

from pathlib import Path

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SettingsLoadError(RuntimeError):
    """Raised when runtime settings cannot be loaded or validated."""


class OrchestratorSettings(BaseSettings):
    """Settings for stack bring-up, readiness polling, load and validation.

    Environment variable names map directly to field names in uppercase.
    Example: `app_base_url` reads from `APP_BASE_URL`. List fields are read
    from JSON arrays, e.g. `METRIC_NAMES='["rails_up", "redis_up"]'`.

    Attributes:
        environment_name: Runtime environment label.
        log_level: Root logger level name.
        project_directory: Directory holding the compose file.
        compose_file: Compose file name.
        compose_command: Compose invocation (`docker compose` or `docker-compose`).
        compose_timeout_seconds: Upper bound for one compose invocation.
        app_base_url: Application base URL.
        prometheus_base_url: Prometheus base URL, also the metrics query endpoint.
        grafana_base_url: Grafana base URL.
        alertmanager_base_url: Alertmanager base URL.
        postgres_exporter_url: Postgres exporter base URL.
        redis_exporter_url: Redis exporter base URL.
        app_max_attempts: Probe attempts for the application.
        monitoring_max_attempts: Probe attempts for monitoring services.
        datastore_max_attempts: Probe attempts for datastore exporters.
        poll_interval_seconds: Delay between failed probe attempts.
        probe_timeout_seconds: Per-request HTTP timeout.
        traffic_rounds: Load-generation rounds during `deploy`.
        traffic_requests_per_round: Requests issued per round.
        traffic_concurrency: Maximum concurrent in-flight requests.
        traffic_round_pause_seconds: Pause between load rounds.
        metrics_settle_seconds: Wait before validating metrics after load.
        metric_names: Metrics expected in the query endpoint.
        grafana_dashboard_title: Title expected in Grafana dashboard search.
        optional_services: Services whose timeout does not fail the run.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    environment_name: str = Field(default="development")
    log_level: str = Field(default="INFO")
    project_directory: Path = Field(default=Path("."))
    compose_file: str = Field(default="docker-compose.yml", min_length=1)
    compose_command: str = Field(default="docker compose", min_length=1)
    compose_timeout_seconds: float = Field(default=900.0, gt=0)
    app_base_url: str = Field(default="http://localhost:3000")
    prometheus_base_url: str = Field(default="http://localhost:9090")
    grafana_base_url: str = Field(default="http://localhost:3001")
    alertmanager_base_url: str = Field(default="http://localhost:9093")
    postgres_exporter_url: str = Field(default="http://localhost:9187")
    redis_exporter_url: str = Field(default="http://localhost:9121")
    app_max_attempts: int = Field(default=48, ge=1)
    monitoring_max_attempts: int = Field(default=24, ge=1)
    datastore_max_attempts: int = Field(default=24, ge=1)
    poll_interval_seconds: float = Field(default=5.0, ge=0)
    probe_timeout_seconds: float = Field(default=5.0, gt=0)
    traffic_rounds: int = Field(default=3, ge=0)
    traffic_requests_per_round: int = Field(default=60, ge=0)
    traffic_concurrency: int = Field(default=10, ge=1)
    traffic_round_pause_seconds: float = Field(default=10.0, ge=0)
    metrics_settle_seconds: float = Field(default=30.0, ge=0)
    metric_names: list[str] = Field(
        default_factory=lambda: [
            "rails_up",
            "database_up",
            "redis_up",
            "rails_memory_usage_bytes",
            "http_requests_total",
        ]
    )
    grafana_dashboard_title: str = Field(default="Rails SRE Monitoring", min_length=1)
    optional_services: list[str] = Field(default_factory=lambda: ["prometheus", "grafana", "alertmanager"])

    @field_validator(
        "app_base_url",
        "prometheus_base_url",
        "grafana_base_url",
        "alertmanager_base_url",
        "postgres_exporter_url",
        "redis_exporter_url",
    )
    @classmethod
    def _validate_base_url(cls, value: str) -> str:
        stripped_value = value.strip()
        if not stripped_value.startswith(("http://", "https://")):
            raise ValueError("value must be an absolute http(s) URL")
        return stripped_value.rstrip("/")

    @field_validator("metric_names", "optional_services")
    @classmethod
    def _validate_name_list(cls, value: list[str]) -> list[str]:
        stripped_values = [item.strip() for item in value]
        if any(not item for item in stripped_values):
            raise ValueError("names must not be blank")
        return stripped_values

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        normalized_value = value.strip().upper()
        if normalized_value not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError("log_level must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL")
        return normalized_value


def config_load_settings() -> OrchestratorSettings:
    """Load and validate runtime settings from environment and dotenv.

    Returns:
        OrchestratorSettings: Validated runtime settings object.

    Raises:
        SettingsLoadError: Raised when settings are missing or invalid.
    """

    try:
        return OrchestratorSettings()
    except ValidationError as error:
        raise SettingsLoadError(
            f"Startup configuration validation failed. Update .env or environment variables. Details: {error}"
        ) from error
