"""
Bounded, order-preserving concurrent execution.

ordered_window() runs up to ``limit`` jobs at once and yields their results
in submission order rather than completion order.
"""

import asyncio
from collections import deque
from typing import AsyncIterable, AsyncIterator, Awaitable, Callable, Deque, TypeVar

T = TypeVar("T")

Job = Callable[[], Awaitable[T]]


async def ordered_window(jobs: AsyncIterable[Job[T]], limit: int) -> AsyncIterator[T]:
    """
    Run jobs concurrently while preserving their order on output.

    Jobs are pulled from ``jobs`` only while fewer than ``limit`` are in
    flight, so a slow head-of-line job holds back both output and intake.

    Args:
        jobs: Zero-argument callables returning awaitables, in submission order
        limit: Maximum number of jobs in flight

    Yields:
        Each job's result, in the order the jobs were pulled

    Raises:
        ValueError: If limit is less than 1
    """
    if limit < 1:
        raise ValueError(f"limit must be at least 1, got {limit}")

    source = aiter(jobs)
    pending: Deque[asyncio.Future[T]] = deque()
    exhausted = False

    try:
        while True:
            while not exhausted and len(pending) < limit:
                try:
                    job = await anext(source)
                except StopAsyncIteration:
                    exhausted = True
                    break
                pending.append(asyncio.ensure_future(job()))

            if not pending:
                return

            head = pending.popleft()
            yield await head
    finally:
        for future in pending:
            future.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        aclose = getattr(source, "aclose", None)
        if aclose is not None:
            await aclose()
