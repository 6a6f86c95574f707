"""
Tests for tagged fan-out results.
"""

from __future__ import annotations

import asyncio

import pytest

from kube_deployer.results import FetchResult, capture, gather_results


async def _value(v, delay=0.0):
    await asyncio.sleep(delay)
    return v


async def _boom(msg):
    raise RuntimeError(msg)


@pytest.mark.asyncio
async def test_capture_value_and_error():
    ok = await capture(_value(1))
    failed = await capture(_boom("x"))

    assert ok.ok and ok.unwrap() == 1
    assert not failed.ok
    with pytest.raises(RuntimeError, match="x"):
        failed.unwrap()


@pytest.mark.asyncio
async def test_gather_keeps_input_order_and_isolates_errors():
    results = await gather_results(_value("slow", 0.02), _boom("bad"), _value("fast"))

    assert [r.ok for r in results] == [True, False, True]
    assert results[0].value == "slow"
    assert results[2].value == "fast"


@pytest.mark.asyncio
async def test_cancellation_is_not_captured():
    async def cancelled():
        raise asyncio.CancelledError()

    with pytest.raises(asyncio.CancelledError):
        await capture(cancelled())


def test_fetch_result_defaults():
    assert FetchResult(value=None).ok
