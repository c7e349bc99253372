"""Typed interfaces for job-layer orchestration responsibilities."""

from dataclasses import dataclass
from typing import Protocol

from .report import DeploymentReport


@dataclass(frozen=True)
class JobExecutionResult:
    """Result contract for one orchestrator command execution.

    Attributes:
        job_name: Command identifier.
        status: Final execution state (`success` or `failed`).
        report: Aggregated report of what the command observed.
    """

    job_name: str
    status: str
    report: DeploymentReport


class JobOrchestratorPort(Protocol):
    """Port definition for running named orchestrator commands."""

    def job_supported_names(self) -> tuple[str, ...]:
        """Return the set of command names this orchestrator can execute.

        Returns:
            tuple[str, ...]: Deterministic list of supported command names.

        Raises:
            RuntimeError: Raised when supported command metadata is unavailable.
        """

    def job_execute(self, job_name: str) -> JobExecutionResult:
        """Execute one named command.

        Args:
            job_name: Command name.

        Returns:
            JobExecutionResult: Final execution status payload.

        Raises:
            ConfigurationError: Raised when configuration is invalid.
        """
