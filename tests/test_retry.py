"""
Tests for the rate-limit retry policy.
"""

import pytest

from conftest import RateLimitError, SleepRecorder
from vedasmart.retry import is_rate_limit, with_retry


class Flaky:
    """Fails with the given errors, then returns ``value``."""

    def __init__(self, errors, value="ok"):
        self.errors = list(errors)
        self.value = value
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.value


@pytest.mark.asyncio
async def test_success_passes_through_untouched():
    sleeper = SleepRecorder()
    fn = Flaky([], value={"a": 1})
    assert await with_retry(fn, sleep=sleeper) == {"a": 1}
    assert fn.calls == 1
    assert sleeper.delays == []


@pytest.mark.asyncio
@pytest.mark.parametrize("k", [1, 2, 3])
async def test_retries_rate_limit_with_doubling_backoff(k):
    sleeper = SleepRecorder()
    fn = Flaky([RateLimitError() for _ in range(k)])

    assert await with_retry(fn, sleep=sleeper) == "ok"
    assert fn.calls == k + 1
    assert sleeper.delays == [1.0, 2.0, 4.0][:k]


@pytest.mark.asyncio
async def test_exhausted_budget_reraises_last_error():
    sleeper = SleepRecorder()
    errors = [RateLimitError(f"429 attempt {i}") for i in range(4)]
    last = errors[-1]
    fn = Flaky(errors)

    with pytest.raises(RateLimitError) as exc_info:
        await with_retry(fn, sleep=sleeper)

    assert exc_info.value is last
    assert fn.calls == 4
    assert sleeper.delays == [1.0, 2.0, 4.0]


@pytest.mark.asyncio
async def test_non_rate_limit_error_not_retried():
    sleeper = SleepRecorder()
    error = ValueError("bad request")
    fn = Flaky([error])

    with pytest.raises(ValueError) as exc_info:
        await with_retry(fn, sleep=sleeper)

    assert exc_info.value is error
    assert fn.calls == 1
    assert sleeper.delays == []


@pytest.mark.asyncio
async def test_custom_budget_and_predicate():
    sleeper = SleepRecorder()
    fn = Flaky([KeyError("x"), KeyError("y")])

    result = await with_retry(
        fn,
        retries=5,
        delay=0.5,
        is_retryable=lambda e: isinstance(e, KeyError),
        sleep=sleeper,
    )

    assert result == "ok"
    assert sleeper.delays == [0.5, 1.0]


@pytest.mark.asyncio
async def test_zero_budget_never_retries():
    fn = Flaky([RateLimitError()])
    with pytest.raises(RateLimitError):
        await with_retry(fn, retries=0, sleep=SleepRecorder())
    assert fn.calls == 1


def test_is_rate_limit_detection():
    class StatusError(Exception):
        status_code = 429

    class ServerError(Exception):
        code = 500

    assert is_rate_limit(RateLimitError())
    assert is_rate_limit(StatusError("too many"))
    assert is_rate_limit(Exception("HTTP 429 Too Many Requests"))
    assert not is_rate_limit(ServerError("internal"))
    assert not is_rate_limit(ValueError("Invalid response format from AI"))


def test_is_rate_limit_needs_standalone_status():
    assert is_rate_limit(Exception("RESOURCE_EXHAUSTED: quota exceeded"))
    assert is_rate_limit(Exception("Error code: 429 - rate_limit_error"))
    assert not is_rate_limit(Exception("Prompt used 14290 tokens, limit is 8192"))
    assert not is_rate_limit(Exception("request id req_84291 failed"))
