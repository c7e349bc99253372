"""Typed domain models shared across orchestrator layers.

Service specs, probe definitions and validation results are immutable data
contracts. `ServiceStatus` is the only mutable model and is owned by the
readiness loop that polls the matching service.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable
from urllib.parse import urlsplit

from .errors import ConfigurationError


def domain_validate_http_url(url: str, field_name: str = "url") -> str:
    """Validate and normalize an absolute HTTP(S) URL.

    Args:
        url: Candidate URL value.
        field_name: Field label used in error messages.

    Returns:
        str: URL with surrounding whitespace removed.

    Raises:
        ConfigurationError: Raised when URL is blank, relative or not HTTP(S).
    """

    normalized_url = (url or "").strip()
    if not normalized_url:
        raise ConfigurationError(f"{field_name} must not be blank")

    try:
        split_url = urlsplit(normalized_url)
    except ValueError as error:
        raise ConfigurationError(f"{field_name} is malformed: {normalized_url}") from error

    if split_url.scheme not in ("http", "https"):
        raise ConfigurationError(f"{field_name} must use http or https: {normalized_url}")
    if not split_url.hostname:
        raise ConfigurationError(f"{field_name} must include a host: {normalized_url}")
    return normalized_url


@dataclass(frozen=True)
class HealthProbe:
    """One HTTP health-check definition.

    Attributes:
        url: Absolute probe URL.
        expect_json: Whether a successful response must carry a JSON body.
        body_predicate: Optional check applied to the decoded JSON body.
    """

    url: str
    expect_json: bool = False
    body_predicate: Callable[[Any], bool] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "url", domain_validate_http_url(self.url, field_name="health_probe.url"))


@dataclass(frozen=True)
class ServiceSpec:
    """Immutable readiness contract for one stack service.

    Attributes:
        name: Unique service name.
        health_probe: Probe used to decide readiness.
        max_attempts: Maximum number of probe attempts.
        poll_interval_seconds: Delay between consecutive failed attempts.
        mandatory: Whether a timeout must fail the whole orchestrator run.
        depends_on: Names of services that must be probed first.
    """

    name: str
    health_probe: HealthProbe
    max_attempts: int = 24
    poll_interval_seconds: float = 5.0
    mandatory: bool = True
    depends_on: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        normalized_name = (self.name or "").strip()
        if not normalized_name:
            raise ConfigurationError("service name must not be blank")
        if self.max_attempts < 1:
            raise ConfigurationError(f"service {normalized_name}: max_attempts must be >= 1")
        if self.poll_interval_seconds < 0:
            raise ConfigurationError(f"service {normalized_name}: poll_interval_seconds must be >= 0")
        if isinstance(self.depends_on, str):
            raise ConfigurationError(
                f"service {normalized_name}: depends_on must be a sequence of service names, not a string"
            )
        object.__setattr__(self, "name", normalized_name)
        object.__setattr__(self, "depends_on", tuple(dependency.strip() for dependency in self.depends_on))

    def spec_wait_budget_seconds(self) -> float:
        """Return the worst-case sleep budget of one readiness loop."""

        return float(self.poll_interval_seconds) * (self.max_attempts - 1)


class ServiceState(str, Enum):
    """Readiness state of one service."""

    PENDING = "Pending"
    UNHEALTHY = "Unhealthy"
    HEALTHY = "Healthy"
    TIMED_OUT = "TimedOut"

    def state_is_terminal(self) -> bool:
        """Return whether no further transition is allowed from this state."""

        return self in (ServiceState.HEALTHY, ServiceState.TIMED_OUT)


@dataclass
class ServiceStatus:
    """Mutable readiness status owned by a single polling loop.

    A status leaves the non-terminal states (`Pending`, `Unhealthy`) at most
    once, for `Healthy` or `TimedOut`, and never moves again afterwards.

    Attributes:
        name: Service name.
        mandatory: Copied from the spec for report rendering.
        state: Current readiness state.
        attempts: Number of probe attempts performed.
        detail: Last probe outcome description.
    """

    name: str
    mandatory: bool = True
    state: ServiceState = ServiceState.PENDING
    attempts: int = 0
    detail: str = ""

    def status_record_failed_attempt(self, detail: str) -> None:
        """Record one failed probe attempt without leaving non-terminal states.

        Args:
            detail: Failure description of the attempt.

        Returns:
            None: Updates status in place.

        Raises:
            RuntimeError: Raised when status is already terminal.
        """

        self._status_require_non_terminal()
        self.attempts += 1
        self.state = ServiceState.UNHEALTHY
        self.detail = detail

    def status_mark_healthy(self, detail: str = "probe succeeded") -> None:
        """Record one successful attempt and move to terminal `Healthy`.

        Raises:
            RuntimeError: Raised when status is already terminal.
        """

        self._status_require_non_terminal()
        self.attempts += 1
        self.state = ServiceState.HEALTHY
        self.detail = detail

    def status_mark_timed_out(self) -> None:
        """Move to terminal `TimedOut` after the attempt budget was exhausted.

        Raises:
            RuntimeError: Raised when status is already terminal.
        """

        self._status_require_non_terminal()
        last_detail = f"; last failure: {self.detail}" if self.detail else ""
        self.state = ServiceState.TIMED_OUT
        self.detail = f"not healthy after {self.attempts} attempts{last_detail}"

    def status_is_failure(self) -> bool:
        """Return whether the status does not represent a healthy service."""

        return self.state is not ServiceState.HEALTHY

    def _status_require_non_terminal(self) -> None:
        if self.state.state_is_terminal():
            raise RuntimeError(f"service {self.name} already reached terminal state {self.state.value}")


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of one metric presence query.

    Attributes:
        metric_name: Queried metric name.
        present: Whether the query returned a non-empty result set.
        sample_value: First sample value when one was returned.
    """

    metric_name: str
    present: bool
    sample_value: str | None = None


@dataclass(frozen=True)
class LoadGenerationResult:
    """Immutable summary of one load-generation round.

    Attributes:
        total_requests: Number of requests issued.
        succeeded: Requests that returned a 2xx response.
        failed: Requests that errored or returned a non-2xx response.
        max_in_flight: Highest observed number of concurrently dispatched requests.
        per_target: Request count per target URL.
    """

    total_requests: int
    succeeded: int
    failed: int
    max_in_flight: int
    per_target: dict[str, int] = field(default_factory=dict)
