import asyncio
import logging

from sitemapcrawl.domain.http_response import HttpResponse
from sitemapcrawl.exceptions import UnsupportedContentTypeError

logger = logging.getLogger(__name__)


class PageProcessor:
    """One attempt of the per-URL pipeline: fetch, extract, assemble, write.

    Every step's failure propagates as an exception; the retry engine decides
    what happens next. Returns the written file path.
    """

    def __init__(self, *, fetcher, extractor, assembler, store):
        self.fetcher = fetcher
        self.extractor = extractor
        self.assembler = assembler
        self.store = store

    def _check_content_type(self, url: str, response: HttpResponse) -> None:
        ct = (response.content_type or "").lower()
        # Supported: text/html, application/xhtml+xml, any text/*, or unknown
        if ct.startswith("text/") or "application/xhtml+xml" in ct or ct == "":
            return
        logger.info("Content type not supported %s for %s", ct, url)
        raise UnsupportedContentTypeError(url, ct)

    async def process(self, url: str) -> str:
        logger.info("Fetching URL: %s", url)
        response = await self.fetcher.fetch(url)
        self._check_content_type(url, response)

        content = await asyncio.to_thread(self.extractor.extract, url, response.text)
        serialized = self.assembler.assemble(url, content)
        path = await asyncio.to_thread(self.store.write, serialized)
        logger.info("Saved to %s", path)
        return path
