import asyncio
import logging
from typing import Optional, Sequence

from sitemapcrawl.domain.crawl_options import CrawlOptions
from sitemapcrawl.domain.crawl_outcome import AttemptResult, CrawlFailure, CrawlOutcome, CrawlSuccess
from sitemapcrawl.domain.run_summary import RunSummary
from sitemapcrawl.services.page_processor import PageProcessor
from sitemapcrawl.services.retry_policy import RetryPolicyEngine
from sitemapcrawl.services.throttled_scheduler import ThrottledScheduler

logger = logging.getLogger(__name__)


class BatchCoordinator:
    """Drives one batch: scheduler around retry engine around the page pipeline.

    Without `continue_on_error` the first observed failure sets the halt flag:
    no further targets start, in-flight ones drain, and the summary comes back
    with `halted=True` instead of the process exiting.
    """

    def __init__(
        self,
        *,
        scheduler: ThrottledScheduler,
        retry_engine: RetryPolicyEngine,
        page_processor: PageProcessor,
    ):
        self.scheduler = scheduler
        self.retry_engine = retry_engine
        self.page_processor = page_processor

    def _report_failed_attempt(self, url: str, result: AttemptResult, next_delay_ms: Optional[int]) -> None:
        max_attempts = self.retry_engine.policy.max_attempts
        logger.warning("Attempt %s/%s failed for %s: %s", result.attempt, max_attempts, url, result.error)
        if next_delay_ms is not None:
            logger.warning("Next retry in %sms with exponential backoff", next_delay_ms)

    async def run(self, targets: Sequence[str], options: CrawlOptions) -> RunSummary:
        stop_event = asyncio.Event()
        total = len(targets)

        async def process_target(index: int, url: str) -> CrawlOutcome:
            logger.info("Processing %s/%s: %s", index + 1, total, url)
            result = await self.retry_engine.run(
                lambda: self.page_processor.process(url),
                on_failed_attempt=lambda r, delay: self._report_failed_attempt(url, r, delay),
            )
            if result.ok:
                return CrawlSuccess(url=url, file_path=result.value, attempts=result.attempt)

            logger.error("Error processing %s after all retry attempts: %s", url, result.error)
            if not options.continue_on_error and not stop_event.is_set():
                logger.error("Stopping due to error. Use --continue to process despite errors.")
                stop_event.set()
            return CrawlFailure(url=url, error=result.error, attempts=result.attempt)

        outcomes = await self.scheduler.run_all(targets, process_target, stop_event)
        summary = RunSummary.from_outcomes(outcomes, halted=stop_event.is_set())
        logger.info(
            "Completed processing %s URLs from sitemap: %s successful, %s failed, %s skipped",
            summary.total,
            summary.succeeded,
            summary.failed,
            summary.skipped,
        )
        return summary
