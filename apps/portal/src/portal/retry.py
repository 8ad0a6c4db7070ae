from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

from portal.errors import ApiError

T = TypeVar("T")


async def with_exponential_backoff(
    operation: Callable[[], Awaitable[T]],
    retries: int = 3,
    base_delay_seconds: float = 0.1,
    on_retry: Callable[[int, float], None] | None = None,
    sleep_fn: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    if retries < 1:
        raise ValueError("retries must be >= 1")
    attempt = 0
    while True:
        try:
            return await operation()
        except ApiError as exc:
            attempt += 1
            if not exc.retryable or attempt >= retries:
                raise
            delay = base_delay_seconds * (2 ** (attempt - 1))
            if on_retry:
                on_retry(attempt, delay)
            await sleep_fn(delay)
