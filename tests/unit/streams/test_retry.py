"""
Unit tests for the download retry policy.
"""

import pytest

from attachment_inliner.config import RetryConfig
from attachment_inliner.exceptions import FetchError, UnexpectedResponseError
from attachment_inliner.streams import RetryPolicy


class Flaky:
    """Operation failing with the given statuses before returning "ok"."""

    def __init__(self, *statuses: int):
        self.statuses = list(statuses)
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.statuses:
            raise FetchError(url="http://x/a", status_code=self.statuses.pop(0))
        return "ok"


class TestRetryPolicy:
    """Tests for the RetryPolicy class."""

    def test_classification(self):
        policy = RetryPolicy()
        assert not policy.is_retryable(FetchError("u", 500))
        assert not policy.is_retryable(FetchError("u", 422))
        assert policy.is_retryable(FetchError("u", 503))
        assert policy.is_retryable(FetchError("u", 404))
        assert policy.is_retryable(FetchError("u", 429))

    def test_invalid_attempts(self):
        with pytest.raises(ValueError):
            RetryPolicy(max_attempts=0)

    @pytest.mark.asyncio
    async def test_success_first_time(self, no_sleep):
        operation = Flaky()
        assert await RetryPolicy(sleep=no_sleep).run(operation) == "ok"
        assert operation.calls == 1
        assert no_sleep.delays == []

    @pytest.mark.asyncio
    async def test_fatal_status_raises_immediately(self, no_sleep):
        operation = Flaky(500)
        with pytest.raises(FetchError) as exc_info:
            await RetryPolicy(sleep=no_sleep).run(operation)
        assert exc_info.value.status_code == 500
        assert operation.calls == 1
        assert no_sleep.delays == []

    @pytest.mark.asyncio
    async def test_success_on_last_attempt(self, no_sleep):
        operation = Flaky(503, 503, 503)
        assert await RetryPolicy(sleep=no_sleep).run(operation) == "ok"
        assert operation.calls == 4
        assert no_sleep.delays == [5.0, 5.0, 5.0]

    @pytest.mark.asyncio
    async def test_last_failure_is_raised(self, no_sleep):
        operation = Flaky(503, 502, 504, 404, 503)
        with pytest.raises(FetchError) as exc_info:
            await RetryPolicy(sleep=no_sleep).run(operation)
        assert exc_info.value.status_code == 404
        assert operation.calls == 4
        assert len(no_sleep.delays) == 3

    @pytest.mark.asyncio
    async def test_fatal_after_retryable(self, no_sleep):
        operation = Flaky(503, 422)
        with pytest.raises(FetchError):
            await RetryPolicy(sleep=no_sleep).run(operation)
        assert operation.calls == 2
        assert no_sleep.delays == [5.0]

    @pytest.mark.asyncio
    async def test_other_errors_are_not_retried(self, no_sleep):
        calls = []

        async def operation():
            calls.append(1)
            raise UnexpectedResponseError("bad body")

        with pytest.raises(UnexpectedResponseError):
            await RetryPolicy(sleep=no_sleep).run(operation)
        assert len(calls) == 1
        assert no_sleep.delays == []

    @pytest.mark.asyncio
    async def test_from_config(self, no_sleep):
        policy = RetryPolicy.from_config(
            RetryConfig(max_attempts=2, delay=0.5, fatal_status_codes=[404]), sleep=no_sleep
        )
        assert not policy.is_retryable(FetchError("u", 404))
        assert policy.is_retryable(FetchError("u", 500))

        operation = Flaky(503, 503)
        with pytest.raises(FetchError):
            await policy.run(operation)
        assert operation.calls == 2
        assert no_sleep.delays == [0.5]
