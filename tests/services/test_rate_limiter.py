import asyncio

import pytest

from sitemapcrawl.services.rate_limiter import RateLimiter


class FakeClock:
    """Monotonic clock that only moves when the limiter sleeps."""

    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now

    async def sleep(self, seconds):
        self.now += seconds


def _max_starts_in_window(starts, window):
    starts = sorted(starts)
    best = 0
    for i, first in enumerate(starts):
        count = sum(1 for s in starts[i:] if s - first < window - 1e-9)
        best = max(best, count)
    return best


def test_rejects_negative_rate():
    with pytest.raises(ValueError):
        RateLimiter(-1)


def test_zero_rate_never_waits():
    clock = FakeClock()
    limiter = RateLimiter(0, clock=clock, sleep=clock.sleep)

    async def scenario():
        return [await limiter.acquire() for _ in range(50)]

    assert asyncio.run(scenario()) == [0.0] * 50
    assert clock.now == 0.0
    assert not limiter.enabled


def test_admits_rate_per_window():
    clock = FakeClock()
    limiter = RateLimiter(2, clock=clock, sleep=clock.sleep)

    async def scenario():
        starts = []
        for _ in range(10):
            await limiter.acquire()
            starts.append(clock.now)
        return starts

    starts = asyncio.run(scenario())
    assert starts == [0.0, 0.0, 1.0, 1.0, 2.0, 2.0, 3.0, 3.0, 4.0, 4.0]
    assert _max_starts_in_window(starts, 1.0) == 2


def test_concurrent_acquires_respect_limit():
    clock = FakeClock()
    limiter = RateLimiter(3, clock=clock, sleep=clock.sleep)
    starts = []

    async def worker():
        await limiter.acquire()
        starts.append(clock.now)

    async def scenario():
        await asyncio.gather(*(worker() for _ in range(12)))

    asyncio.run(scenario())
    assert len(starts) == 12
    assert _max_starts_in_window(starts, 1.0) == 3


def test_slots_free_up_after_the_window_passes():
    clock = FakeClock()
    limiter = RateLimiter(1, clock=clock, sleep=clock.sleep)

    async def scenario():
        await limiter.acquire()
        clock.now = 5.0
        return await limiter.acquire()

    assert asyncio.run(scenario()) == 0.0


def test_real_clock_window():
    limiter = RateLimiter(2, interval=0.1)
    loop_times = []

    async def worker():
        await limiter.acquire()
        loop_times.append(asyncio.get_running_loop().time())

    async def scenario():
        await asyncio.gather(*(worker() for _ in range(6)))

    asyncio.run(scenario())
    assert len(loop_times) == 6
    # three batches of two, each at least one interval apart
    assert loop_times[5] - loop_times[0] >= 0.2 - 0.02
