"""Configuration package for runtime settings and startup validation."""

from .settings import OrchestratorSettings, SettingsLoadError, config_load_settings

__all__ = ["OrchestratorSettings", "SettingsLoadError", "config_load_settings"]
