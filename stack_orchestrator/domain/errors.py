"""Project-native typed exceptions for orchestrator-level failures."""

from __future__ import annotations


class OrchestratorError(Exception):
    """Base exception for deployment orchestrator failures."""


class ConfigurationError(OrchestratorError, ValueError):
    """Malformed orchestrator input detected before any service interaction."""


class ProbeTimeoutError(OrchestratorError, TimeoutError):
    """One or more mandatory services never reported healthy within budget.

    Attributes:
        service_names: Names of mandatory services that timed out.
    """

    def __init__(self, message: str, service_names: tuple[str, ...] = ()):
        super().__init__(message)
        self.service_names = service_names


class ValidationGapError(OrchestratorError, RuntimeError):
    """Expected metrics were absent while strict metric validation was requested.

    Attributes:
        metric_names: Names of metrics missing from the query endpoint.
    """

    def __init__(self, message: str, metric_names: tuple[str, ...] = ()):
        super().__init__(message)
        self.metric_names = metric_names
