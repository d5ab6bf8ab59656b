import gzip
import logging
import warnings
from typing import Callable, Optional

from bs4 import BeautifulSoup, XMLParsedAsHTMLWarning

from sitemapcrawl.domain.http_response import HttpResponse
from sitemapcrawl.exceptions import PageProcessingError, SitemapFetchError

logger = logging.getLogger(__name__)

GZIP_MAGIC = b"\x1f\x8b"


def _parse_xml(text: str) -> BeautifulSoup:
    # html.parser lowercases tag names and tolerates namespaces, which is all sitemaps need
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", XMLParsedAsHTMLWarning)
        return BeautifulSoup(text, "html.parser")


class SitemapService:
    """Fetch a sitemap and return the page URLs it lists, in document order.

    Sitemap index documents are followed into their child sitemaps, each
    child visited once. Page URLs are returned as listed, without dedup.
    """

    def __init__(
        self,
        http_service,
        timeout: Optional[float] = None,
        soup_factory: Optional[Callable[[str], BeautifulSoup]] = None,
    ):
        self.http_service = http_service
        self.timeout = timeout
        self._soup_factory = soup_factory or _parse_xml

    def fetch_sitemap_urls(self, sitemap_url: str) -> list[str]:
        urls: list[str] = []
        seen: set[str] = set()
        pending = [sitemap_url]
        while pending:
            current = pending.pop(0)
            if current in seen:
                logger.debug("Skipping (already visited) sitemap %s", current)
                continue
            seen.add(current)

            is_root = current == sitemap_url
            text = self._fetch_text(current, root=is_root)
            if text is None:
                continue
            try:
                page_urls, child_sitemaps = self.parse(text)
            except ValueError as e:
                if is_root:
                    raise SitemapFetchError(current, str(e)) from e
                logger.warning("Skipping child sitemap %s: %s", current, e)
                continue
            logger.debug("Sitemap %s: %s urls, %s child sitemaps", current, len(page_urls), len(child_sitemaps))
            urls.extend(page_urls)
            pending.extend(child_sitemaps)
        return urls

    def _fetch_text(self, url: str, root: bool) -> Optional[str]:
        """Fetch one sitemap document.

        A failing root sitemap aborts with `SitemapFetchError`; a failing child
        of an index is logged and skipped.
        """
        try:
            response = self.http_service.fetch(url, timeout=self.timeout)
            return self._decode(url, response)
        except (PageProcessingError, OSError, EOFError) as e:
            if root:
                raise SitemapFetchError(url, str(e)) from e
            logger.warning("Failed to fetch child sitemap %s: %s", url, e)
            return None

    def _decode(self, url: str, response: HttpResponse) -> str:
        content = response.content or b""
        if content.startswith(GZIP_MAGIC):
            logger.debug("Decompressing gzipped sitemap %s", url)
            return gzip.decompress(content).decode("utf-8", errors="replace")
        return response.text or ""

    def parse(self, text: str) -> tuple[list[str], list[str]]:
        """Return (page_urls, child_sitemap_urls) listed in a sitemap document."""
        soup = self._soup_factory(text)
        if soup.find("sitemapindex") is not None:
            return [], self._locs(soup.find_all("sitemap"))
        if soup.find("urlset") is not None:
            return self._locs(soup.find_all("url")), []
        raise ValueError("not a sitemap (no <urlset> or <sitemapindex>)")

    def _locs(self, entries) -> list[str]:
        locs = []
        for entry in entries:
            loc = entry.find("loc")
            if loc is None:
                continue
            value = loc.get_text(strip=True)
            if value:
                locs.append(value)
        return locs
