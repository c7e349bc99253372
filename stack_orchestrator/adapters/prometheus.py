"""Prometheus instant-query adapter."""

from __future__ import annotations

from typing import Any

from .errors import AdapterResponseError
from .http_service import HttpServiceAdapter


class PrometheusQueryAdapter:
    """Adapter for the Prometheus `/api/v1/query` endpoint."""

    def __init__(self, http_service: HttpServiceAdapter):
        if http_service is None:
            raise ValueError("http_service must not be None")
        self._http_service = http_service

    def adapter_query_instant(self, query_endpoint: str, query: str) -> list[dict[str, Any]]:
        """Run one instant query and return its result vector.

        Args:
            query_endpoint: Prometheus base URL.
            query: PromQL expression.

        Returns:
            list[dict[str, Any]]: Result array from `data.result`.

        Raises:
            TransientNetworkError: Raised for transport failures and non-2xx responses.
            AdapterResponseError: Raised when response does not match the query API contract.
        """

        query_url = f"{query_endpoint.rstrip('/')}/api/v1/query"
        document = self._http_service.adapter_fetch_json(url=query_url, query_parameters={"query": query})
        if not isinstance(document, dict):
            raise AdapterResponseError("query response is not a JSON object", target=query_url)
        if document.get("status") != "success":
            error_message = document.get("error") or "query status is not success"
            raise AdapterResponseError(f"query failed: {error_message}", target=query_url)

        data = document.get("data")
        if not isinstance(data, dict) or not isinstance(data.get("result"), list):
            raise AdapterResponseError("query response missing data.result array", target=query_url)
        return data["result"]


def adapter_extract_sample_value(result_entry: Any) -> str | None:
    """Return the sample value string from one vector result entry, if any."""

    if not isinstance(result_entry, dict):
        return None
    value = result_entry.get("value")
    if isinstance(value, (list, tuple)) and len(value) == 2:
        return str(value[1])
    return None
