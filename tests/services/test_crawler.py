import asyncio
import os
from unittest.mock import Mock

import pytest

from sitemapcrawl.domain.crawl_options import CrawlOptions
from sitemapcrawl.domain.crawl_outcome import CrawlFailure, CrawlSuccess
from sitemapcrawl.domain.http_response import HttpResponse
from sitemapcrawl.exceptions import HttpFetchError, OutputDirError, SitemapFetchError
from sitemapcrawl.services.content_extractor import HtmlContentExtractor
from sitemapcrawl.services.crawler import SitemapCrawler
from sitemapcrawl.services.document_assembler import DocumentAssembler
from sitemapcrawl.services.filename_deriver import derive_filename

PAGES = {
    "https://example.com/one": "<html><head><title>One</title></head><body><p>First page body.</p></body></html>",
    "https://example.com/two": "<html><head><title>Two</title></head><body><p>Second page body.</p></body></html>",
}


class DictFetcher:
    def __init__(self, pages):
        self.pages = pages
        self.calls = []

    async def fetch(self, url):
        self.calls.append(url)
        if url not in self.pages:
            raise HttpFetchError(url, status_code=404)
        return HttpResponse(200, self.pages[url], "text/html")


def _crawler(urls, fetcher):
    sitemap_service = Mock()
    if isinstance(urls, Exception):
        sitemap_service.fetch_sitemap_urls.side_effect = urls
    else:
        sitemap_service.fetch_sitemap_urls.return_value = urls
    crawler = SitemapCrawler(
        sitemap_service=sitemap_service,
        fetcher=fetcher,
        extractor=HtmlContentExtractor(),
        assembler=DocumentAssembler(),
        rate_interval=0.01,
    )
    return crawler, sitemap_service


def test_crawl_writes_one_file_per_url(tmp_path):
    fetcher = DictFetcher(PAGES)
    crawler, sitemap_service = _crawler(list(PAGES), fetcher)

    summary = crawler.run("https://example.com/sitemap.xml", str(tmp_path / "out"), CrawlOptions(rate_per_second=0))

    sitemap_service.fetch_sitemap_urls.assert_called_once_with("https://example.com/sitemap.xml")
    assert summary.as_dict() == {"total": 2, "succeeded": 2, "failed": 0, "skipped": 0, "halted": False}
    written = sorted(os.listdir(tmp_path / "out"))
    assert written == sorted(derive_filename(u) for u in PAGES)
    assert all(isinstance(o, CrawlSuccess) for o in summary.outcomes)


def test_empty_sitemap_completes_with_zero_outcomes(tmp_path):
    crawler, _ = _crawler([], DictFetcher({}))
    summary = crawler.run("https://example.com/sitemap.xml", str(tmp_path), CrawlOptions())
    assert summary.total == 0
    assert not summary.halted


def test_failing_url_recorded_under_continue(tmp_path):
    urls = ["https://example.com/one", "https://example.com/missing", "https://example.com/two"]
    crawler, _ = _crawler(urls, DictFetcher(PAGES))
    options = CrawlOptions(continue_on_error=True, max_retries=0, rate_per_second=0)

    summary = asyncio.run(crawler.crawl("https://example.com/sitemap.xml", str(tmp_path), options))

    assert (summary.succeeded, summary.failed) == (2, 1)
    assert isinstance(summary.outcomes[1], CrawlFailure)
    assert "404" in summary.outcomes[1].message


def test_output_dir_error_aborts_before_sitemap_fetch(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    crawler, sitemap_service = _crawler(list(PAGES), DictFetcher(PAGES))

    with pytest.raises(OutputDirError):
        crawler.run("https://example.com/sitemap.xml", str(blocker), CrawlOptions())
    sitemap_service.fetch_sitemap_urls.assert_not_called()


def test_sitemap_error_aborts_before_any_page_fetch(tmp_path):
    fetcher = DictFetcher(PAGES)
    crawler, _ = _crawler(SitemapFetchError("https://example.com/sitemap.xml", "boom"), fetcher)

    with pytest.raises(SitemapFetchError):
        crawler.run("https://example.com/sitemap.xml", str(tmp_path), CrawlOptions())
    assert fetcher.calls == []
