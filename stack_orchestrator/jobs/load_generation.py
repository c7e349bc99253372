"""Bounded-concurrency synthetic traffic generation."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import ALL_COMPLETED, FIRST_COMPLETED, Future, ThreadPoolExecutor, wait

from ..adapters import LoadRequestPort
from ..domain import ConfigurationError, LoadGenerationResult, RequestCounter, domain_validate_http_url

logger = logging.getLogger(__name__)


def job_generate_load(
    request_port: LoadRequestPort,
    targets: Sequence[str],
    total_requests: int,
    concurrency: int,
    counter: RequestCounter | None = None,
) -> LoadGenerationResult:
    """Issue GET requests round-robin across targets with bounded fan-out.

    The calling thread is the only one that submits requests and the only one
    that writes to the counter. It waits for every in-flight request before
    returning.

    Args:
        request_port: Thread-safe adapter issuing single requests.
        targets: Target URLs, used round-robin in order.
        total_requests: Exact number of requests to issue.
        concurrency: Maximum number of requests in flight.
        counter: Optional caller-owned counter accumulating across rounds.

    Returns:
        LoadGenerationResult: Snapshot of this round's outcome tallies.

    Raises:
        ConfigurationError: Raised for empty targets, malformed URLs or invalid bounds.
    """

    normalized_targets = [domain_validate_http_url(target, field_name="load target") for target in targets]
    if not normalized_targets:
        raise ConfigurationError("load targets must not be empty")
    if total_requests < 0:
        raise ConfigurationError("total_requests must be >= 0")
    if concurrency < 1:
        raise ConfigurationError("concurrency must be >= 1")

    round_counter = RequestCounter()
    max_in_flight = 0
    logger.info(
        "Generating %d requests across %d target(s) with concurrency %d",
        total_requests,
        len(normalized_targets),
        concurrency,
    )

    with ThreadPoolExecutor(max_workers=concurrency, thread_name_prefix="load") as executor:
        pending: dict[Future[bool], str] = {}
        for request_index in range(total_requests):
            if len(pending) >= concurrency:
                _job_collect_completed(pending=pending, counters=(round_counter, counter), return_when=FIRST_COMPLETED)
            target_url = normalized_targets[request_index % len(normalized_targets)]
            pending[executor.submit(request_port.adapter_request_succeeds, target_url)] = target_url
            max_in_flight = max(max_in_flight, len(pending))
        _job_collect_completed(pending=pending, counters=(round_counter, counter), return_when=ALL_COMPLETED)

    result = round_counter.counter_snapshot(max_in_flight=max_in_flight)
    logger.info("Traffic round finished: %d succeeded, %d failed", result.succeeded, result.failed)
    return result


def _job_collect_completed(
    pending: dict[Future[bool], str],
    counters: tuple[RequestCounter | None, ...],
    return_when: str,
) -> None:
    """Wait for pending requests and record finished ones on every counter."""

    done, _ = wait(list(pending), return_when=return_when)
    for future in done:
        target_url = pending.pop(future)
        try:
            succeeded = bool(future.result())
        except (ConnectionError, TimeoutError) as error:
            logger.debug("Load request to %s failed: %s", target_url, error)
            succeeded = False
        for counter in counters:
            if counter is not None:
                counter.counter_record(target_url=target_url, succeeded=succeeded)
