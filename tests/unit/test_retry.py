"""Unit tests for retry and timeout helpers."""
import asyncio
import pytest

from video_pipeline.core.exceptions import TimeoutError, ValidationError
from video_pipeline.utils.retry import exponential_backoff, linear_backoff, retry_async, with_timeout


class TestBackoff:
    """Test backoff strategies."""

    def test_exponential_backoff_caps(self):
        delay = exponential_backoff(base=0.5, cap=4.0, jitter=0)
        assert [delay(n) for n in range(1, 6)] == [0.5, 1.0, 2.0, 4.0, 4.0]

    def test_exponential_backoff_jitter_bounds(self):
        delay = exponential_backoff(base=0.5, cap=4.0, jitter=0.25)
        for _ in range(20):
            assert 0.5 <= delay(1) <= 0.75

    def test_linear_backoff(self):
        delay = linear_backoff(1.5)
        assert [delay(n) for n in (1, 2, 3)] == [1.5, 3.0, 4.5]


class TestRetryAsync:
    """Test bounded retry loop."""

    @pytest.mark.asyncio
    async def test_succeeds_after_failures(self):
        calls = []
        waits = []

        async def operation(attempt):
            calls.append(attempt)
            if attempt < 3:
                raise RuntimeError("flaky")
            return "ok"

        async def fake_sleep(seconds):
            waits.append(seconds)

        result = await retry_async(operation, 4, linear_backoff(1.0), sleep=fake_sleep)

        assert result == "ok"
        assert calls == [1, 2, 3]
        assert waits == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_exhaustion_reraises_last_error(self):
        async def operation(attempt):
            raise RuntimeError(f"failure {attempt}")

        async def fake_sleep(seconds):
            return None

        with pytest.raises(RuntimeError, match="failure 3"):
            await retry_async(operation, 3, linear_backoff(0), sleep=fake_sleep)

    @pytest.mark.asyncio
    async def test_non_retryable_error_propagates_immediately(self):
        calls = []

        async def operation(attempt):
            calls.append(attempt)
            raise ValidationError("final")

        async def fake_sleep(seconds):
            return None

        with pytest.raises(ValidationError):
            await retry_async(
                operation, 5, linear_backoff(0),
                is_retryable=lambda e: not isinstance(e, ValidationError),
                sleep=fake_sleep
            )
        assert calls == [1]

    @pytest.mark.asyncio
    async def test_on_retry_callback(self):
        seen = []

        async def operation(attempt):
            if attempt == 1:
                raise RuntimeError("once")
            return attempt

        async def fake_sleep(seconds):
            return None

        await retry_async(
            operation, 2, linear_backoff(0.5), sleep=fake_sleep,
            on_retry=lambda n, exc, wait: seen.append((n, str(exc), wait))
        )
        assert seen == [(1, "once", 0.5)]

    @pytest.mark.asyncio
    async def test_rejects_zero_attempts(self):
        async def operation(attempt):
            return None

        with pytest.raises(ValueError):
            await retry_async(operation, 0, linear_backoff(0))


class TestWithTimeout:
    """Test timeout racing."""

    @pytest.mark.asyncio
    async def test_returns_result_in_time(self):
        async def quick():
            return 42

        assert await with_timeout(quick(), 1.0, "quick") == 42

    @pytest.mark.asyncio
    async def test_raises_timeout_error(self):
        async def slow():
            await asyncio.sleep(1)

        with pytest.raises(TimeoutError) as exc_info:
            await with_timeout(slow(), 0.01, "slow call")

        assert exc_info.value.error_code == "TIMEOUT"
        assert exc_info.value.details["operation"] == "slow call"
