"""Fail-Fast Gathering — run reads concurrently, abort all on the first failure.

Invariants:
    - Results keep the input order
    - The first exception propagates; sibling tasks are cancelled and drained,
      so no partial result ever escapes
"""

import asyncio
from collections.abc import Awaitable, Iterable
from typing import TypeVar

T = TypeVar("T")


async def gather_fail_fast(awaitables: Iterable[Awaitable[T]]) -> list[T]:
    tasks = [asyncio.ensure_future(a) for a in awaitables]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
