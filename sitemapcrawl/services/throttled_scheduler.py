import asyncio
import logging
from typing import Awaitable, Callable, Optional, Sequence

from sitemapcrawl.domain.crawl_outcome import CrawlFailure, CrawlOutcome, CrawlSkipped
from sitemapcrawl.services.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

PerTargetOperation = Callable[[int, str], Awaitable[CrawlOutcome]]


class ThrottledScheduler:
    """Fans per-target operations out as tasks, one rate-limited start per target.

    A single dispatcher admits targets in list order through the rate limiter
    and starts each as its own task; a target's retries run inside that task
    and are not re-admitted. Setting `stop_event` stops new starts; targets not
    yet started get a `CrawlSkipped` outcome and started ones are drained.
    """

    def __init__(self, rate_limiter: RateLimiter):
        self.rate_limiter = rate_limiter

    def _is_stopped(self, stop_event: Optional[asyncio.Event]) -> bool:
        return stop_event is not None and stop_event.is_set()

    async def run_all(
        self,
        targets: Sequence[str],
        per_target_op: PerTargetOperation,
        stop_event: Optional[asyncio.Event] = None,
    ) -> list[CrawlOutcome]:
        """Return one outcome per target, aligned with `targets`."""
        outcomes: list[Optional[CrawlOutcome]] = [None] * len(targets)
        tasks = []

        for index, target in enumerate(targets):
            if self._is_stopped(stop_event):
                break
            await self.rate_limiter.acquire()
            # a failure may have been observed while waiting for admission
            if self._is_stopped(stop_event):
                break
            tasks.append(asyncio.create_task(self._run_one(index, target, per_target_op, outcomes)))

        if tasks:
            await asyncio.gather(*tasks)

        not_started = 0
        for index, target in enumerate(targets):
            if outcomes[index] is None:
                outcomes[index] = CrawlSkipped(url=target)
                not_started += 1
        if not_started:
            logger.info("Skipped %s targets that were never started", not_started)
        return outcomes

    async def _run_one(self, index: int, target: str, per_target_op: PerTargetOperation, outcomes: list) -> None:
        try:
            outcomes[index] = await per_target_op(index, target)
        except Exception as e:
            logger.error("Unhandled error processing %s: %s", target, e, exc_info=True)
            outcomes[index] = CrawlFailure(url=target, error=e)
