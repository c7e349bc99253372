"""Adapter layer package for HTTP and container runtime boundaries."""

from .compose import ComposeCommandResult, DockerComposeAdapter
from .errors import AdapterError, AdapterResponseError, ComposeCommandError, TransientNetworkError
from .grafana import GrafanaSearchAdapter
from .http_service import HttpServiceAdapter, ProbeOutcome
from .interfaces import (
    ComposeRuntimePort,
    DashboardSearchPort,
    HttpServicePort,
    LoadRequestPort,
    MetricQueryPort,
    ServiceProbePort,
    TextFetchPort,
)
from .prometheus import PrometheusQueryAdapter, adapter_extract_sample_value

__all__ = [
    "AdapterError",
    "AdapterResponseError",
    "ComposeCommandError",
    "ComposeCommandResult",
    "ComposeRuntimePort",
    "DashboardSearchPort",
    "DockerComposeAdapter",
    "GrafanaSearchAdapter",
    "HttpServiceAdapter",
    "HttpServicePort",
    "LoadRequestPort",
    "MetricQueryPort",
    "ProbeOutcome",
    "PrometheusQueryAdapter",
    "ServiceProbePort",
    "TextFetchPort",
    "TransientNetworkError",
    "adapter_extract_sample_value",
]
