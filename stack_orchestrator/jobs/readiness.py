"""Readiness polling for stack services in dependency order."""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from typing import Callable

from ..adapters import ServiceProbePort, TransientNetworkError
from ..domain import ServiceSpec, ServiceStatus, domain_order_service_specs

logger = logging.getLogger(__name__)


class ServiceReadinessPoller:
    """Sequential health poller that owns every `ServiceStatus` it creates."""

    def __init__(
        self,
        probe_port: ServiceProbePort,
        sleep_function: Callable[[float], None] | None = None,
    ):
        """Initialize readiness poller.

        Args:
            probe_port: Adapter executing single probe exchanges.
            sleep_function: Optional sleep override, defaults to `time.sleep`.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when probe_port is None.
        """

        if probe_port is None:
            raise ValueError("probe_port must not be None")
        self._probe_port = probe_port
        self._sleep_function = sleep_function or time.sleep

    def job_wait_for_healthy(self, spec: ServiceSpec) -> ServiceStatus:
        """Poll one service until healthy or until its attempt budget is spent.

        Args:
            spec: Service readiness contract.

        Returns:
            ServiceStatus: Terminal status, `Healthy` or `TimedOut`.

        Raises:
            RuntimeError: This method reports timeouts instead of raising them.
        """

        status = ServiceStatus(name=spec.name, mandatory=spec.mandatory)
        logger.info("Waiting for %s to become healthy (up to %d attempts)", spec.name, spec.max_attempts)

        for attempt_index in range(spec.max_attempts):
            if self._job_attempt_probe(spec=spec, status=status):
                logger.info("%s is healthy after %d attempt(s)", spec.name, status.attempts)
                return status
            if attempt_index + 1 < spec.max_attempts and spec.poll_interval_seconds > 0:
                self._sleep_function(spec.poll_interval_seconds)

        status.status_mark_timed_out()
        if spec.mandatory:
            logger.error("%s did not become healthy: %s", spec.name, status.detail)
        else:
            logger.warning("%s took longer than expected: %s", spec.name, status.detail)
        return status

    def job_probe_once(self, spec: ServiceSpec) -> ServiceStatus:
        """Take a one-shot status snapshot without waiting.

        Returns:
            ServiceStatus: `Healthy` on success, otherwise non-terminal `Unhealthy`.
        """

        status = ServiceStatus(name=spec.name, mandatory=spec.mandatory)
        self._job_attempt_probe(spec=spec, status=status)
        return status

    def job_run_startup_sequence(self, specs: Sequence[ServiceSpec]) -> list[ServiceStatus]:
        """Wait for every service, one after another, in dependency order.

        A timed-out service never stops the sequence; later services are still
        attempted so the final report shows every service state.

        Args:
            specs: Declared service specs.

        Returns:
            list[ServiceStatus]: Terminal statuses in execution order.

        Raises:
            ConfigurationError: Raised for an invalid service list before any probe runs.
        """

        ordered_specs = domain_order_service_specs(specs)
        return [self.job_wait_for_healthy(spec) for spec in ordered_specs]

    def _job_attempt_probe(self, spec: ServiceSpec, status: ServiceStatus) -> bool:
        """Run one probe attempt and record its outcome on the status."""

        try:
            outcome = self._probe_port.adapter_probe(spec.health_probe)
        except TransientNetworkError as error:
            status.status_record_failed_attempt(detail=str(error))
            logger.debug("%s probe attempt %d failed: %s", spec.name, status.attempts, error)
            return False

        if not outcome.healthy:
            status.status_record_failed_attempt(detail=outcome.detail)
            logger.debug("%s probe attempt %d unhealthy: %s", spec.name, status.attempts, outcome.detail)
            return False

        status.status_mark_healthy(detail=outcome.detail)
        return True
