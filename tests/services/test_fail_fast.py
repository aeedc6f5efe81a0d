"""gather_fail_fast — ordered results, first failure cancels siblings."""

import asyncio

import pytest

from storefront.services.fail_fast import gather_fail_fast


async def test_results_keep_input_order():
    async def value(v, delay):
        await asyncio.sleep(delay)
        return v

    assert await gather_fail_fast([value(1, 0.02), value(2, 0), value(3, 0.01)]) == [1, 2, 3]


async def test_first_failure_cancels_siblings():
    cancelled = asyncio.Event()

    async def slow():
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.set()
            raise

    async def fail():
        raise ValueError("boom")

    with pytest.raises(ValueError):
        await gather_fail_fast([slow(), fail()])
    assert cancelled.is_set()


async def test_empty_input():
    assert await gather_fail_fast([]) == []
