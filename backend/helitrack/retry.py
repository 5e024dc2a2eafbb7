"""
retry.py
~~~~~~~~
One retry-with-exponential-backoff combinator, used for every upstream call
instead of ad-hoc loops.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

T = TypeVar("T")
LOG = logging.getLogger("retry")


async def retry_async(
    fn: Callable[[], Awaitable[T]],
    *,
    attempts: int,
    base_delay: float,
    retryable: Callable[[BaseException], bool],
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    label: str = "call",
) -> T:
    """
    Await ``fn()`` up to *attempts* times.

    Between attempts we sleep ``base_delay * 2**n`` (n = 0, 1, …). Errors
    for which ``retryable(exc)`` is false propagate at once; the last
    retryable error propagates once the budget is spent.

    Args:
        fn:         Zero-argument coroutine factory (called once per attempt).
        attempts:   Total attempts, first one included (≥ 1).
        base_delay: Seconds before the first retry.
        retryable:  Predicate deciding whether an exception is worth a retry.
        sleep:      Injected for tests.
        label:      Name used in log lines.
    """
    attempts = max(1, attempts)
    for n in range(attempts):
        try:
            return await fn()
        except Exception as exc:
            if not retryable(exc) or n == attempts - 1:
                raise
            delay = base_delay * (2**n)
            LOG.warning(
                "[retry] %s failed (%s) – attempt %d/%d, retrying in %.2fs",
                label,
                exc,
                n + 1,
                attempts,
                delay,
            )
            await sleep(delay)
    raise AssertionError("unreachable")  # pragma: no cover


__all__ = ["retry_async"]
