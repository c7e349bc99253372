"""Grafana dashboard search adapter."""

from __future__ import annotations

from .errors import AdapterResponseError
from .http_service import HttpServiceAdapter


class GrafanaSearchAdapter:
    """Adapter for Grafana `/api/search` dashboard lookups."""

    def __init__(self, http_service: HttpServiceAdapter, base_url: str):
        if http_service is None:
            raise ValueError("http_service must not be None")
        self._http_service = http_service
        self._base_url = base_url.rstrip("/")

    def adapter_search_dashboard_titles(self, query: str) -> list[str]:
        """Return titles of dashboards matching a search query.

        Args:
            query: Grafana search text.

        Returns:
            list[str]: Dashboard titles in response order.

        Raises:
            TransientNetworkError: Raised for transport failures and non-2xx responses.
            AdapterResponseError: Raised when response is not a JSON array.
        """

        search_url = f"{self._base_url}/api/search"
        document = self._http_service.adapter_fetch_json(url=search_url, query_parameters={"query": query})
        if not isinstance(document, list):
            raise AdapterResponseError("search response is not a JSON array", target=search_url)
        return [str(item.get("title", "")) for item in document if isinstance(item, dict)]
