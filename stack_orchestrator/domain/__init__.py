"""Domain models used across orchestrator layer boundaries."""

from .counters import RequestCounter
from .dependencies import domain_order_service_specs
from .errors import ConfigurationError, OrchestratorError, ProbeTimeoutError, ValidationGapError
from .models import (
    HealthProbe,
    LoadGenerationResult,
    ServiceSpec,
    ServiceState,
    ServiceStatus,
    ValidationResult,
    domain_validate_http_url,
)

__all__ = [
    "ConfigurationError",
    "HealthProbe",
    "LoadGenerationResult",
    "OrchestratorError",
    "ProbeTimeoutError",
    "RequestCounter",
    "ServiceSpec",
    "ServiceState",
    "ServiceStatus",
    "ValidationGapError",
    "ValidationResult",
    "domain_order_service_specs",
    "domain_validate_http_url",
]
