"""Tests for the rolling request window."""

import pytest

from core.rate_limiter import RateLimiter


class FakeClock:
    """Monotonic clock that only moves when told to (or when slept on)."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


class TestRateLimiter:

    @pytest.mark.asyncio
    async def test_requests_under_ceiling_do_not_wait(self, clock):
        limiter = RateLimiter(max_requests=3, clock=clock, sleep=clock.sleep)

        for _ in range(3):
            await limiter.acquire()

        assert clock.sleeps == []
        assert limiter.window.count == 3

    @pytest.mark.asyncio
    async def test_request_over_ceiling_waits_for_window_reset(self, clock):
        """With a ceiling of 2, the 3rd call sleeps until the boundary."""
        limiter = RateLimiter(max_requests=2, window_seconds=60, clock=clock, sleep=clock.sleep)

        await limiter.acquire()
        await limiter.acquire()
        clock.now += 10
        await limiter.acquire()

        assert clock.sleeps == [50.0]
        assert limiter.window.count == 1
        assert limiter.window.reset_at == 1060.0 + 60

    @pytest.mark.asyncio
    async def test_expired_window_starts_fresh(self, clock):
        limiter = RateLimiter(max_requests=2, window_seconds=60, clock=clock, sleep=clock.sleep)

        await limiter.acquire()
        await limiter.acquire()
        clock.now += 61
        await limiter.acquire()

        assert clock.sleeps == []
        assert limiter.window.count == 1
        assert limiter.window.reset_at == clock.now + 60

    @pytest.mark.asyncio
    async def test_limiters_do_not_share_windows(self, clock):
        first = RateLimiter(max_requests=1, clock=clock, sleep=clock.sleep)
        second = RateLimiter(max_requests=1, clock=clock, sleep=clock.sleep)

        await first.acquire()
        await second.acquire()

        assert clock.sleeps == []

    @pytest.mark.parametrize("kwargs", [{"max_requests": 0}, {"window_seconds": 0}])
    def test_rejects_non_positive_settings(self, kwargs):
        with pytest.raises(ValueError):
            RateLimiter(**kwargs)
