"""Job layer package for deployment workflow orchestration."""

from .deployment_orchestrator import DeploymentJobOrchestrator, DeploymentOrchestratorConfig
from .interfaces import JobExecutionResult, JobOrchestratorPort
from .load_generation import job_generate_load
from .metrics_validation import job_check_dashboard, job_check_scrape_text, job_validate_metrics
from .readiness import ServiceReadinessPoller
from .report import DeploymentReport, job_render_access_info, job_render_report, job_state_counts

__all__ = [
    "DeploymentJobOrchestrator",
    "DeploymentOrchestratorConfig",
    "DeploymentReport",
    "JobExecutionResult",
    "JobOrchestratorPort",
    "ServiceReadinessPoller",
    "job_check_dashboard",
    "job_check_scrape_text",
    "job_generate_load",
    "job_render_access_info",
    "job_render_report",
    "job_state_counts",
    "job_validate_metrics",
]
