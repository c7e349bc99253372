"""HTTP adapter for health probes, load requests and plain-text scrapes."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Final

import httpx

from ..domain import HealthProbe
from .errors import AdapterResponseError, TransientNetworkError


@dataclass(frozen=True)
class ProbeOutcome:
    """Result contract for one completed probe exchange.

    Attributes:
        healthy: Whether response satisfied the probe contract.
        status_code: HTTP status code of the response.
        detail: Short human-readable outcome description.
    """

    healthy: bool
    status_code: int
    detail: str


class HttpServiceAdapter:
    """Adapter around one pooled `httpx.Client` shared by all HTTP calls.

    `httpx.Client` is safe to share between threads, so the same adapter
    instance serves the sequential readiness loop and concurrent load workers.
    """

    _USER_AGENT: Final[str] = "stack-orchestrator/1.0 (Python/httpx)"

    def __init__(
        self,
        request_timeout_seconds: float = 5.0,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize HTTP adapter.

        Args:
            request_timeout_seconds: Per-request timeout in seconds.
            transport: Optional transport override, used by tests.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when timeout is not positive.
        """

        if request_timeout_seconds <= 0:
            raise ValueError("request_timeout_seconds must be > 0")

        self._request_timeout_seconds = request_timeout_seconds
        self._client = httpx.Client(
            timeout=request_timeout_seconds,
            headers={"User-Agent": self._USER_AGENT},
            follow_redirects=True,
            transport=transport,
        )

    def adapter_close(self) -> None:
        """Close the pooled HTTP client."""

        self._client.close()

    def adapter_probe(self, probe: HealthProbe) -> ProbeOutcome:
        """Execute one health probe request.

        Args:
            probe: Health probe definition.

        Returns:
            ProbeOutcome: Healthy outcome, or unhealthy when the body contract fails.

        Raises:
            TransientNetworkError: Raised for transport failures and non-2xx responses.
        """

        response = self._adapter_http_get(url=probe.url)
        if not probe.expect_json and probe.body_predicate is None:
            return ProbeOutcome(healthy=True, status_code=response.status_code, detail=f"HTTP {response.status_code}")

        try:
            body = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            return ProbeOutcome(
                healthy=False,
                status_code=response.status_code,
                detail="response body is not valid JSON",
            )

        if probe.body_predicate is None:
            return ProbeOutcome(healthy=True, status_code=response.status_code, detail=f"HTTP {response.status_code}")

        try:
            predicate_passed = bool(probe.body_predicate(body))
        except Exception as error:
            return ProbeOutcome(
                healthy=False,
                status_code=response.status_code,
                detail=f"health predicate raised {type(error).__name__}: {error}",
            )
        if not predicate_passed:
            return ProbeOutcome(
                healthy=False,
                status_code=response.status_code,
                detail="response body did not satisfy health predicate",
            )
        return ProbeOutcome(healthy=True, status_code=response.status_code, detail=f"HTTP {response.status_code}")

    def adapter_request_succeeds(self, url: str) -> bool:
        """Issue one GET and report pass/fail, discarding the body.

        Args:
            url: Request target URL.

        Returns:
            bool: True for a 2xx response, False for any failure.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        try:
            self._adapter_http_get(url=url)
        except TransientNetworkError:
            return False
        return True

    def adapter_fetch_text(self, url: str) -> str:
        """Fetch response body as text.

        Raises:
            TransientNetworkError: Raised for transport failures and non-2xx responses.
        """

        return self._adapter_http_get(url=url).text

    def adapter_fetch_json(self, url: str, query_parameters: dict[str, str] | None = None) -> Any:
        """Fetch response body and decode it as JSON.

        Args:
            url: Endpoint URL.
            query_parameters: Optional query string parameters.

        Returns:
            Any: Decoded JSON document.

        Raises:
            TransientNetworkError: Raised for transport failures and non-2xx responses.
            AdapterResponseError: Raised when response body is not JSON.
        """

        response = self._adapter_http_get(url=url, query_parameters=query_parameters)
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as error:
            raise AdapterResponseError("response body is not valid JSON", target=url) from error

    def _adapter_http_get(self, url: str, query_parameters: dict[str, str] | None = None) -> httpx.Response:
        """Execute one HTTP GET and map failures to typed adapter errors.

        Args:
            url: Endpoint URL.
            query_parameters: Optional query string parameters.

        Returns:
            httpx.Response: Successful response.

        Raises:
            TransientNetworkError: Raised for timeouts, transport errors and non-2xx status.
        """

        try:
            response = self._client.get(url, params=query_parameters)
        except httpx.TimeoutException as error:
            raise TransientNetworkError(f"request to {url} timed out", target=url) from error
        except httpx.HTTPError as error:
            raise TransientNetworkError(f"request to {url} failed: {error}", target=url) from error

        if not response.is_success:
            raise TransientNetworkError(
                f"{url} returned HTTP {response.status_code}",
                target=url,
                status_code=response.status_code,
            )
        return response
