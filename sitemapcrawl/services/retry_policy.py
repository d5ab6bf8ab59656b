"""Bounded exponential-backoff retry for one URL's pipeline.

Each attempt is turned into an explicit `AttemptResult`; the engine inspects
it rather than letting exceptions drive the loop. `max_retries` counts retries
after the first attempt, so an operation runs at most `max_retries + 1` times.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from sitemapcrawl.domain.crawl_options import BACKOFF_FACTOR, MAX_RETRY_DELAY_MS, CrawlOptions
from sitemapcrawl.domain.crawl_outcome import AttemptResult
from sitemapcrawl.exceptions import PageProcessingError

logger = logging.getLogger(__name__)

Operation = Callable[[], Awaitable[Any]]
FailedAttemptHook = Callable[[AttemptResult, Optional[int]], None]


@dataclass(frozen=True)
class RetryPolicy:
    max_retries: int = 3
    initial_delay_ms: int = 1000
    max_delay_ms: int = MAX_RETRY_DELAY_MS
    backoff_factor: float = BACKOFF_FACTOR

    @classmethod
    def from_options(cls, options: CrawlOptions) -> "RetryPolicy":
        return cls(
            max_retries=options.max_retries,
            initial_delay_ms=options.initial_retry_delay_ms,
            max_delay_ms=options.max_retry_delay_ms,
            backoff_factor=options.backoff_factor,
        )

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def delay_ms(self, failed_attempt: int) -> int:
        """Delay after the 1-based attempt `failed_attempt` fails, capped at `max_delay_ms`."""
        if failed_attempt < 1:
            raise ValueError("attempt numbers start at 1")
        # cap the exponent too, so huge attempt counts cannot overflow the float
        exponent = min(failed_attempt - 1, 64)
        raw = self.initial_delay_ms * (self.backoff_factor ** exponent)
        return int(min(raw, self.max_delay_ms))

    def next_delay_ms(self, failed_attempt: int) -> Optional[int]:
        """Delay before the next attempt, or None once the budget is exhausted."""
        if failed_attempt > self.max_retries:
            return None
        return self.delay_ms(failed_attempt)


async def run_attempt(operation: Operation, attempt: int) -> AttemptResult:
    try:
        value = await operation()
    except PageProcessingError as e:
        return AttemptResult.failure(attempt, e)
    except Exception as e:
        logger.debug("Unexpected error on attempt %s", attempt, exc_info=True)
        return AttemptResult.failure(attempt, e)
    return AttemptResult.success(attempt, value)


class RetryPolicyEngine:
    """Runs an operation until it succeeds or the policy's budget is spent."""

    def __init__(self, policy: RetryPolicy, sleep: Callable[[float], Awaitable[None]] = asyncio.sleep):
        self.policy = policy
        self._sleep = sleep

    async def run(self, operation: Operation, on_failed_attempt: Optional[FailedAttemptHook] = None) -> AttemptResult:
        """Return the successful `AttemptResult`, or the last failed one when exhausted."""
        attempt = 1
        while True:
            result = await run_attempt(operation, attempt)
            if result.ok:
                return result

            next_delay = self.policy.next_delay_ms(attempt)
            if on_failed_attempt is not None:
                on_failed_attempt(result, next_delay)
            if next_delay is None:
                return result

            await self._sleep(next_delay / 1000)
            attempt += 1


async def with_retry(
    operation: Operation,
    policy: RetryPolicy,
    on_failed_attempt: Optional[FailedAttemptHook] = None,
) -> AttemptResult:
    return await RetryPolicyEngine(policy).run(operation, on_failed_attempt)
