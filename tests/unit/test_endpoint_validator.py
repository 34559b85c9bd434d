from __future__ import annotations

import asyncio
import io
from time import perf_counter

import pytest

from modelscan.core.providers.models import Endpoint, EndpointOutcome, EndpointStatus
from modelscan.core.providers.validator import CANCELLED_ERROR, validate_endpoints
from modelscan.core.runtime.errors import RemoteError


def _index(endpoint: Endpoint) -> int:
    return int(endpoint.path.rsplit("/", 1)[1])


async def _odd_fails(endpoint: Endpoint) -> None:
    await asyncio.sleep(0)
    i = _index(endpoint)
    if i % 2:
        raise RemoteError(f"HTTP 500 at {i}", status_code=500)


@pytest.mark.asyncio
async def test_zero_endpoints_completes_without_error():
    calls: list[Endpoint] = []

    async def probe(endpoint: Endpoint) -> None:
        calls.append(endpoint)

    assert await validate_endpoints([], probe) is None
    assert calls == []


@pytest.mark.asyncio
async def test_no_lost_updates_across_sizes():
    for _ in range(3):
        for n in range(51):
            endpoints = [Endpoint(f"/ep/{i}") for i in range(n)]
            await validate_endpoints(endpoints, _odd_fails)

            for ep in endpoints:
                i = _index(ep)
                if i % 2:
                    assert ep.status is EndpointStatus.FAILED
                    assert ep.error == f"HTTP 500 at {i}"
                else:
                    assert ep.status is EndpointStatus.WORKING
                    assert ep.error == ""


@pytest.mark.asyncio
async def test_probes_run_in_parallel():
    endpoints = [Endpoint(f"/slow/{i}") for i in range(5)]

    async def probe(endpoint: Endpoint) -> None:
        await asyncio.sleep(0.05)

    started = perf_counter()
    await validate_endpoints(endpoints, probe)
    elapsed = perf_counter() - started

    assert elapsed < 0.2
    assert all(ep.status is EndpointStatus.WORKING for ep in endpoints)
    assert all(ep.latency >= 0.04 for ep in endpoints)


@pytest.mark.asyncio
async def test_join_barrier_waits_for_every_worker():
    finished: list[int] = []
    endpoints = [Endpoint(f"/ep/{i}") for i in range(4)]

    async def probe(endpoint: Endpoint) -> None:
        await asyncio.sleep(0.01 * (_index(endpoint) + 1))
        finished.append(_index(endpoint))

    await validate_endpoints(endpoints, probe)
    assert sorted(finished) == [0, 1, 2, 3]


@pytest.mark.asyncio
async def test_cancelling_the_caller_marks_inflight_probes_failed():
    endpoints = [Endpoint(f"/ep/{i}") for i in range(5)]
    finished = asyncio.Event()

    async def probe(endpoint: Endpoint) -> None:
        if _index(endpoint) == 0:
            finished.set()
            return
        await asyncio.sleep(10)

    task = asyncio.create_task(validate_endpoints(endpoints, probe))
    await finished.wait()
    await asyncio.sleep(0.01)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert endpoints[0].status is EndpointStatus.WORKING
    for ep in endpoints[1:]:
        assert ep.status is EndpointStatus.FAILED
        assert ep.error == CANCELLED_ERROR
    assert all(ep.status is not EndpointStatus.UNKNOWN for ep in endpoints)


@pytest.mark.asyncio
async def test_outer_timeout_drains_cleanly():
    endpoints = [Endpoint(f"/ep/{i}") for i in range(3)]

    async def probe(endpoint: Endpoint) -> None:
        await asyncio.sleep(10)

    with pytest.raises(TimeoutError):
        async with asyncio.timeout(0.05):
            await validate_endpoints(endpoints, probe)

    assert all(ep.status is EndpointStatus.FAILED for ep in endpoints)


@pytest.mark.asyncio
async def test_shared_deadline_fails_slow_probes_only():
    endpoints = [Endpoint("/ep/0"), Endpoint("/ep/1")]

    async def probe(endpoint: Endpoint) -> None:
        await asyncio.sleep(0.0 if _index(endpoint) == 0 else 5)

    started = perf_counter()
    await validate_endpoints(endpoints, probe, timeout_seconds=0.05)
    assert perf_counter() - started < 1.0

    assert endpoints[0].status is EndpointStatus.WORKING
    assert endpoints[1].status is EndpointStatus.FAILED
    assert endpoints[1].error.startswith("probe timed out after")


@pytest.mark.asyncio
async def test_revalidation_overwrites_previous_outcome():
    ep = Endpoint("/flaky")
    results = iter([RemoteError("HTTP 503", status_code=503), None])

    async def probe(endpoint: Endpoint) -> None:
        exc = next(results)
        if exc:
            raise exc

    await validate_endpoints([ep], probe)
    assert ep.status is EndpointStatus.FAILED
    assert ep.error == "HTTP 503"

    await validate_endpoints([ep], probe)
    assert ep.status is EndpointStatus.WORKING
    assert ep.error == ""


@pytest.mark.asyncio
async def test_deprecated_endpoints_are_never_probed():
    retired = Endpoint("/old", outcome=EndpointOutcome(status=EndpointStatus.DEPRECATED))
    live = Endpoint("/new")
    probed: list[str] = []

    async def probe(endpoint: Endpoint) -> None:
        probed.append(endpoint.path)

    await validate_endpoints([retired, live], probe)
    assert probed == ["/new"]
    assert retired.status is EndpointStatus.DEPRECATED
    assert live.status is EndpointStatus.WORKING


@pytest.mark.asyncio
async def test_exception_without_message_uses_type_name():
    ep = Endpoint("/boom")

    async def probe(endpoint: Endpoint) -> None:
        raise ConnectionResetError()

    await validate_endpoints([ep], probe)
    assert ep.error == "ConnectionResetError"


@pytest.mark.asyncio
async def test_verbose_progress_lines_are_whole():
    endpoints = [Endpoint(f"/ep/{i}") for i in range(6)]
    stream = io.StringIO()

    await validate_endpoints(endpoints, _odd_fails, provider="fake", verbose=True, stream=stream)

    lines = stream.getvalue().splitlines()
    assert len(lines) == 12
    assert "  Testing endpoint: GET /ep/0" in lines
    assert any(line.startswith("    FAIL GET /ep/1: HTTP 500 at 1") for line in lines)
    assert any(line.startswith("    ok  GET /ep/2") for line in lines)


@pytest.mark.asyncio
async def test_quiet_mode_writes_nothing_to_stream():
    stream = io.StringIO()
    await validate_endpoints([Endpoint("/ep/0")], _odd_fails, stream=stream)
    assert stream.getvalue() == ""
