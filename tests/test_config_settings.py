"""Tests for runtime settings loading and startup validation."""

from __future__ import annotations

from pathlib import Path

import pytest

from stack_orchestrator.config import OrchestratorSettings, SettingsLoadError, config_load_settings


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Run each test without ambient settings variables or dotenv file."""

    monkeypatch.chdir(tmp_path)
    for field_name in OrchestratorSettings.model_fields:
        monkeypatch.delenv(field_name.upper(), raising=False)


def test_config_defaults_describe_local_stack() -> None:
    """Load default settings matching the local demo stack.

    Returns:
        None: Assertions validate default values.

    Raises:
        AssertionError: Raised when defaults drift.
    """

    settings = config_load_settings()

    assert settings.app_base_url == "http://localhost:3000"
    assert settings.grafana_base_url == "http://localhost:3001"
    assert settings.app_max_attempts == 48
    assert settings.monitoring_max_attempts == 24
    assert settings.traffic_concurrency == 10
    assert settings.optional_services == ["prometheus", "grafana", "alertmanager"]
    assert "rails_up" in settings.metric_names
    assert settings.log_level == "INFO"


def test_config_reads_environment_and_dotenv(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Prefer environment variables over dotenv values and normalize URLs.

    Args:
        monkeypatch: Pytest fixture for environment overrides.
        tmp_path: Working directory holding the dotenv file.

    Returns:
        None: Assertions validate override precedence.

    Raises:
        AssertionError: Raised when overrides are not applied.
    """

    (tmp_path / ".env").write_text("APP_BASE_URL=http://dotenv.test:3000/\nTRAFFIC_ROUNDS=5\n", encoding="utf-8")
    monkeypatch.setenv("APP_BASE_URL", "http://env.test:3000/")
    monkeypatch.setenv("METRIC_NAMES", '["rails_up", "redis_up"]')
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = config_load_settings()

    assert settings.app_base_url == "http://env.test:3000"
    assert settings.traffic_rounds == 5
    assert settings.metric_names == ["rails_up", "redis_up"]
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize(
    ("variable_name", "variable_value"),
    [
        ("PROMETHEUS_BASE_URL", "prometheus:9090"),
        ("LOG_LEVEL", "verbose"),
        ("TRAFFIC_CONCURRENCY", "0"),
        ("POLL_INTERVAL_SECONDS", "-1"),
        ("OPTIONAL_SERVICES", '["grafana", " "]'),
    ],
)
def test_config_invalid_values_raise_settings_load_error(
    monkeypatch: pytest.MonkeyPatch,
    variable_name: str,
    variable_value: str,
) -> None:
    """Reject malformed settings with a startup error.

    Args:
        monkeypatch: Pytest fixture for environment overrides.
        variable_name: Environment variable to override.
        variable_value: Invalid value.

    Returns:
        None: Assertions validate startup failure.

    Raises:
        AssertionError: Raised when invalid settings are accepted.
    """

    monkeypatch.setenv(variable_name, variable_value)

    with pytest.raises(SettingsLoadError, match="Startup configuration validation failed"):
        config_load_settings()
