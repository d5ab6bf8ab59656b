import asyncio
import logging
from typing import Callable, Optional

from sitemapcrawl.domain.crawl_options import CrawlOptions
from sitemapcrawl.domain.run_summary import RunSummary
from sitemapcrawl.services.batch_coordinator import BatchCoordinator
from sitemapcrawl.services.content_extractor import ContentExtractor
from sitemapcrawl.services.document_assembler import DocumentAssembler
from sitemapcrawl.services.document_store import DocumentFileStore
from sitemapcrawl.services.fetcher import Fetcher
from sitemapcrawl.services.page_processor import PageProcessor
from sitemapcrawl.services.rate_limiter import RateLimiter
from sitemapcrawl.services.retry_policy import RetryPolicy, RetryPolicyEngine
from sitemapcrawl.services.sitemap_service import SitemapService
from sitemapcrawl.services.throttled_scheduler import ThrottledScheduler

logger = logging.getLogger(__name__)


class SitemapCrawler:
    """Entry point for one crawl run.

    Long-lived collaborators (HTTP, extraction, assembly) are injected; the
    per-run pieces that depend on `CrawlOptions` and the output directory are
    built in `crawl()`. Fatal setup errors (`OutputDirError`,
    `SitemapFetchError`) propagate before any page work starts.
    """

    def __init__(
        self,
        *,
        sitemap_service: SitemapService,
        fetcher: Fetcher,
        extractor: ContentExtractor,
        assembler: DocumentAssembler,
        rate_interval: float = 1.0,
        store_factory: Optional[Callable[[str], DocumentFileStore]] = None,
    ):
        self.sitemap_service = sitemap_service
        self.fetcher = fetcher
        self.extractor = extractor
        self.assembler = assembler
        self.rate_interval = rate_interval
        self.store_factory = store_factory or (lambda output_dir: DocumentFileStore(output_dir=output_dir))

    def build_coordinator(self, store: DocumentFileStore, options: CrawlOptions) -> BatchCoordinator:
        page_processor = PageProcessor(
            fetcher=self.fetcher,
            extractor=self.extractor,
            assembler=self.assembler,
            store=store,
        )
        return BatchCoordinator(
            scheduler=ThrottledScheduler(RateLimiter(options.rate_per_second, interval=self.rate_interval)),
            retry_engine=RetryPolicyEngine(RetryPolicy.from_options(options)),
            page_processor=page_processor,
        )

    async def crawl(self, sitemap_url: str, output_dir: str, options: CrawlOptions) -> RunSummary:
        logger.debug("Fetching sitemap from: %s", sitemap_url)
        store = self.store_factory(output_dir)
        output_path = store.ensure_output_dir()
        logger.debug("Writing documents to %s", output_path)

        targets = await asyncio.to_thread(self.sitemap_service.fetch_sitemap_urls, sitemap_url)
        logger.info("Found %s URLs in sitemap", len(targets))
        logger.info(
            "Rate limit set to %s requests per second%s",
            options.rate_per_second,
            "" if options.throttled else " (disabled)",
        )

        coordinator = self.build_coordinator(store, options)
        return await coordinator.run(targets, options)

    def run(self, sitemap_url: str, output_dir: str, options: CrawlOptions) -> RunSummary:
        return asyncio.run(self.crawl(sitemap_url, output_dir, options))
