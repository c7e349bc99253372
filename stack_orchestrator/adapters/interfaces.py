"""Typed interfaces for adapter-layer responsibilities."""

from __future__ import annotations

from typing import Any, Protocol

from ..domain import HealthProbe
from .compose import ComposeCommandResult
from .http_service import ProbeOutcome


class ServiceProbePort(Protocol):
    """Port definition for one health probe exchange."""

    def adapter_probe(self, probe: HealthProbe) -> ProbeOutcome:
        """Execute one probe request.

        Args:
            probe: Health probe definition.

        Returns:
            ProbeOutcome: Completed exchange outcome.

        Raises:
            TransientNetworkError: Raised for transport failures and non-2xx responses.
        """


class LoadRequestPort(Protocol):
    """Port definition for fire-and-check traffic requests. Must be thread-safe."""

    def adapter_request_succeeds(self, url: str) -> bool:
        """Issue one GET and return whether it succeeded."""


class TextFetchPort(Protocol):
    """Port definition for plain-text scrapes."""

    def adapter_fetch_text(self, url: str) -> str:
        """Return response body text.

        Raises:
            TransientNetworkError: Raised for transport failures and non-2xx responses.
        """


class HttpServicePort(LoadRequestPort, TextFetchPort, Protocol):
    """Port definition for the shared HTTP client used by load and scrape calls."""

    def adapter_close(self) -> None:
        """Release pooled connections."""


class MetricQueryPort(Protocol):
    """Port definition for Prometheus-shaped instant queries."""

    def adapter_query_instant(self, query_endpoint: str, query: str) -> list[dict[str, Any]]:
        """Run one instant query and return the result array.

        Raises:
            TransientNetworkError: Raised for transport failures and non-2xx responses.
            AdapterResponseError: Raised when response contract is invalid.
        """


class DashboardSearchPort(Protocol):
    """Port definition for dashboard catalog lookups."""

    def adapter_search_dashboard_titles(self, query: str) -> list[str]:
        """Return titles of dashboards matching the query."""


class ComposeRuntimePort(Protocol):
    """Port definition for container stack lifecycle commands."""

    def adapter_missing_prerequisites(self) -> list[str]:
        """Return names of required executables missing from PATH."""

    def adapter_up(self) -> ComposeCommandResult:
        """Build and start the stack detached."""

    def adapter_down(self, remove_volumes: bool = True, remove_orphans: bool = False) -> ComposeCommandResult:
        """Stop and remove the stack."""

    def adapter_ps(self) -> ComposeCommandResult:
        """Return container status listing."""

    def adapter_logs_tail(self, service_name: str | None = None, tail_lines: int = 20) -> str:
        """Return recent log lines."""

    def adapter_system_prune(self) -> ComposeCommandResult:
        """Prune unused container runtime objects."""
