"""Owned request tally used by load generation."""

from __future__ import annotations

from .models import LoadGenerationResult


class RequestCounter:
    """Single-writer request outcome counter.

    The counter is created by the caller that dispatches requests and passed
    explicitly to the code that records outcomes. It is not thread-safe: only
    the dispatching thread may call `counter_record`.
    """

    def __init__(self) -> None:
        self._succeeded = 0
        self._failed = 0
        self._per_target: dict[str, int] = {}

    @property
    def succeeded(self) -> int:
        return self._succeeded

    @property
    def failed(self) -> int:
        return self._failed

    @property
    def total(self) -> int:
        return self._succeeded + self._failed

    def counter_record(self, target_url: str, succeeded: bool) -> None:
        """Record one completed request outcome.

        Args:
            target_url: Request target URL.
            succeeded: Whether the request returned a 2xx response.

        Returns:
            None: Updates counters in place.
        """

        if succeeded:
            self._succeeded += 1
        else:
            self._failed += 1
        self._per_target[target_url] = self._per_target.get(target_url, 0) + 1

    def counter_snapshot(self, max_in_flight: int = 0) -> LoadGenerationResult:
        """Return an immutable snapshot of the current tallies."""

        return LoadGenerationResult(
            total_requests=self.total,
            succeeded=self._succeeded,
            failed=self._failed,
            max_in_flight=max_in_flight,
            per_target=dict(self._per_target),
        )
