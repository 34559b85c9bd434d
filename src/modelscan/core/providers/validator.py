"""Concurrent endpoint validation.

Every declared endpoint is probed by its own asyncio task. Workers only compute
an :class:`EndpointOutcome`; the coordinating task writes the outcomes back into
the endpoint records once all workers have finished, so no record is ever
shared between tasks.
"""

from __future__ import annotations

import asyncio
import sys
import threading
from collections.abc import Awaitable, Callable, Sequence
from time import perf_counter
from typing import TextIO

from modelscan.core.providers.models import Endpoint, EndpointOutcome, EndpointStatus
from modelscan.core.runtime.timeouts import remaining_seconds, run_with_timeout
from modelscan.core.telemetry.logging import get_logger

Probe = Callable[[Endpoint], Awaitable[None]]

CANCELLED_ERROR = "validation cancelled"

logger = get_logger(__name__)


class ProbeReporter:
    """Serializes verbose progress lines coming from concurrent workers."""

    def __init__(self, provider: str, *, verbose: bool = False, stream: TextIO | None = None) -> None:
        self.provider = provider
        self.verbose = verbose
        self.stream = stream
        self._lock = threading.Lock()

    def _write(self, line: str) -> None:
        with self._lock:
            print(line, file=self.stream or sys.stdout, flush=True)

    def started(self, endpoint: Endpoint) -> None:
        log = logger.info if self.verbose else logger.debug
        log("endpoint_probe_started", provider=self.provider, method=endpoint.method, path=endpoint.path)
        if self.verbose:
            self._write(f"  Testing endpoint: {endpoint.method} {endpoint.path}")

    def finished(self, endpoint: Endpoint, outcome: EndpointOutcome) -> None:
        log = logger.info if self.verbose else logger.debug
        log(
            "endpoint_probe_finished",
            provider=self.provider,
            method=endpoint.method,
            path=endpoint.path,
            status=outcome.status.value,
            latency_ms=round(outcome.latency * 1000, 2),
            error=outcome.error or None,
        )
        if not self.verbose:
            return
        if outcome.status is EndpointStatus.WORKING:
            self._write(f"    ok  {endpoint.method} {endpoint.path} ({outcome.latency * 1000:.1f}ms)")
        else:
            self._write(f"    FAIL {endpoint.method} {endpoint.path}: {outcome.error}")


async def _check_endpoint(
    endpoint: Endpoint,
    probe: Probe,
    deadline: float | None,
    reporter: ProbeReporter,
) -> EndpointOutcome:
    reporter.started(endpoint)
    started = perf_counter()
    timeout = remaining_seconds(deadline)
    try:
        await run_with_timeout(probe(endpoint), timeout)
    except asyncio.CancelledError:
        # the coordinator re-raises once every worker has reported
        outcome = EndpointOutcome.failed(perf_counter() - started, CANCELLED_ERROR)
    except TimeoutError as exc:
        message = f"probe timed out after {timeout:.3g}s" if timeout is not None else str(exc) or "probe timed out"
        outcome = EndpointOutcome.failed(perf_counter() - started, message)
    except Exception as exc:  # noqa: BLE001
        outcome = EndpointOutcome.failed(perf_counter() - started, str(exc) or exc.__class__.__name__)
    else:
        outcome = EndpointOutcome.working(perf_counter() - started)
    reporter.finished(endpoint, outcome)
    return outcome


async def _join(tasks: Sequence[asyncio.Task[EndpointOutcome]]) -> bool:
    """Wait for every worker, even if the caller is cancelled meanwhile.

    Returns True when a cancellation was received while waiting.
    """
    cancelled = False
    pending = set(tasks)
    while pending:
        try:
            _, pending = await asyncio.wait(pending)
        except asyncio.CancelledError:
            cancelled = True
            for task in pending:
                task.cancel()
    return cancelled


async def validate_endpoints(
    endpoints: Sequence[Endpoint],
    probe: Probe,
    *,
    provider: str = "",
    timeout_seconds: float | None = None,
    verbose: bool = False,
    stream: TextIO | None = None,
) -> None:
    """Probe all endpoints in parallel and record each outcome in place.

    Failures are recorded per endpoint and never raised. Deprecated endpoints
    are skipped. ``timeout_seconds`` is one deadline shared by all probes. If
    the calling task is cancelled, every in-flight probe is cancelled, its
    endpoint is marked failed, and the cancellation is re-raised afterwards.
    """
    targets = [ep for ep in endpoints if ep.status is not EndpointStatus.DEPRECATED]
    if not targets:
        return

    reporter = ProbeReporter(provider, verbose=verbose, stream=stream)
    loop = asyncio.get_running_loop()
    deadline = None if timeout_seconds is None else loop.time() + timeout_seconds

    tasks = [asyncio.create_task(_check_endpoint(ep, probe, deadline, reporter)) for ep in targets]
    cancelled = await _join(tasks)

    for endpoint, task in zip(targets, tasks):
        if task.cancelled():
            endpoint.record(EndpointOutcome.failed(0.0, CANCELLED_ERROR))
        else:
            endpoint.record(task.result())

    if cancelled:
        raise asyncio.CancelledError()
