"""
Retry policy for external provider calls.

Only rate-limit failures are retried, with exponential backoff. Anything
else, including the last rate-limit failure once the budget is spent,
propagates unchanged.
"""

import asyncio
import re
from typing import Awaitable, Callable, Optional, TypeVar

T = TypeVar("T")

RATE_LIMIT_STATUS = 429
# Status code as a standalone token, or gRPC-style quota status
_RATE_LIMIT_MESSAGE = re.compile(r"\b429\b|RESOURCE_EXHAUSTED")

DEFAULT_RETRIES = 3
DEFAULT_DELAY = 1.0  # seconds


def is_rate_limit(error: BaseException) -> bool:
    """
    True if a provider failure signals "back off and try later".

    google-genai's APIError carries the HTTP status in ``code``, anthropic's
    APIStatusError in ``status_code``; some transports only mention it in
    the message.
    """
    for attr in ("status", "status_code", "code"):
        if getattr(error, attr, None) == RATE_LIMIT_STATUS:
            return True
    return _RATE_LIMIT_MESSAGE.search(str(error)) is not None


async def with_retry(
    fn: Callable[[], Awaitable[T]],
    retries: int = DEFAULT_RETRIES,
    delay: float = DEFAULT_DELAY,
    is_retryable: Callable[[BaseException], bool] = is_rate_limit,
    sleep: Optional[Callable[[float], Awaitable[None]]] = None,
) -> T:
    """
    Await ``fn()``, retrying while ``is_retryable`` holds and budget remains.

    Waits ``delay`` before the first retry and doubles it after each one,
    so the default schedule is 1s, 2s, 4s.

    Args:
        fn: Zero-argument coroutine factory, invoked once per attempt
        retries: Number of retries allowed after the first attempt
        delay: Initial backoff in seconds
        is_retryable: Predicate deciding whether a failure is transient
        sleep: Awaitable sleep, injectable for tests
    """
    sleep = sleep or asyncio.sleep

    while True:
        try:
            return await fn()
        except Exception as e:
            if retries <= 0 or not is_retryable(e):
                raise
            print(f"[Retry] Rate limit hit. Retrying in {delay:.1f}s... ({retries} attempts left)")
            await sleep(delay)
            retries -= 1
            delay *= 2
