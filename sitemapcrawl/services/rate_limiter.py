import asyncio
import logging
import time
from collections import deque
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


class RateLimiter:
    """Admits at most `rate_per_second` starts in any sliding window of `interval` seconds.

    A rate of 0 disables limiting. Window state is only touched while holding
    the lock, so concurrent `acquire()` calls are admitted one at a time in
    arrival order.
    """

    def __init__(
        self,
        rate_per_second: int,
        interval: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if rate_per_second < 0:
            raise ValueError("rate_per_second must be >= 0")
        if interval <= 0:
            raise ValueError("interval must be > 0")
        self.rate_per_second = int(rate_per_second)
        self.interval = float(interval)
        self._clock = clock
        self._sleep = sleep
        self._starts: deque = deque()
        self._lock = asyncio.Lock()

    @property
    def enabled(self) -> bool:
        return self.rate_per_second > 0

    async def acquire(self) -> float:
        """Wait for a free slot; return the seconds spent waiting."""
        if not self.enabled:
            return 0.0
        waited = 0.0
        async with self._lock:
            while True:
                now = self._clock()
                while self._starts and now - self._starts[0] >= self.interval:
                    self._starts.popleft()
                if len(self._starts) < self.rate_per_second:
                    self._starts.append(now)
                    if waited:
                        logger.debug("Admitted after waiting %.3fs", waited)
                    return waited
                wait_for = self.interval - (now - self._starts[0])
                await self._sleep(wait_for)
                waited += wait_for
