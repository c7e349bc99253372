"""End-to-end metric visibility checks."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from ..adapters import (
    AdapterResponseError,
    DashboardSearchPort,
    MetricQueryPort,
    TextFetchPort,
    TransientNetworkError,
    adapter_extract_sample_value,
)
from ..domain import ConfigurationError, ValidationResult, domain_validate_http_url

logger = logging.getLogger(__name__)


def job_validate_metrics(
    query_port: MetricQueryPort,
    metric_names: Sequence[str],
    query_endpoint: str,
) -> list[ValidationResult]:
    """Query each metric once and record whether it returned any series.

    Args:
        query_port: Adapter running instant queries.
        metric_names: Metric names to look up.
        query_endpoint: Query API base URL.

    Returns:
        list[ValidationResult]: One result per metric name, in input order.

    Raises:
        ConfigurationError: Raised for a malformed endpoint or blank metric name.
    """

    normalized_endpoint = domain_validate_http_url(query_endpoint, field_name="query_endpoint")
    normalized_names = [name.strip() for name in metric_names]
    if any(not name for name in normalized_names):
        raise ConfigurationError("metric names must not be blank")

    results: list[ValidationResult] = []
    for metric_name in normalized_names:
        try:
            series = query_port.adapter_query_instant(query_endpoint=normalized_endpoint, query=metric_name)
        except (TransientNetworkError, AdapterResponseError) as error:
            logger.warning("Metric '%s' could not be queried: %s", metric_name, error)
            results.append(ValidationResult(metric_name=metric_name, present=False))
            continue

        if not series:
            logger.warning("Metric '%s' not found in query endpoint", metric_name)
            results.append(ValidationResult(metric_name=metric_name, present=False))
            continue

        logger.info("Metric '%s' is available", metric_name)
        results.append(
            ValidationResult(
                metric_name=metric_name,
                present=True,
                sample_value=adapter_extract_sample_value(series[0]),
            )
        )
    return results


def job_check_scrape_text(text_port: TextFetchPort, metrics_url: str, expected_line: str = "rails_up 1") -> bool:
    """Return whether an exposition endpoint serves the expected sample line."""

    try:
        scrape_text = text_port.adapter_fetch_text(metrics_url)
    except TransientNetworkError as error:
        logger.warning("Metrics endpoint %s not reachable: %s", metrics_url, error)
        return False

    found = any(line.strip() == expected_line for line in scrape_text.splitlines())
    if not found:
        logger.warning("Metrics endpoint %s does not expose '%s'", metrics_url, expected_line)
    return found


def job_check_dashboard(search_port: DashboardSearchPort, dashboard_title: str) -> bool:
    """Return whether a dashboard whose title contains `dashboard_title` is provisioned."""

    try:
        titles = search_port.adapter_search_dashboard_titles(dashboard_title)
    except (TransientNetworkError, AdapterResponseError) as error:
        logger.warning("Dashboard search failed: %s", error)
        return False

    found = any(dashboard_title in title for title in titles)
    if not found:
        logger.warning("Dashboard '%s' may not be visible yet", dashboard_title)
    return found
