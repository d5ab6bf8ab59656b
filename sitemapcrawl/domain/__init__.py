"""Domain objects for the sitemap crawler - explicit re-exports to satisfy linters."""
from .crawl_options import CrawlOptions as CrawlOptions
from .crawl_outcome import AttemptResult as AttemptResult
from .crawl_outcome import CrawlFailure as CrawlFailure
from .crawl_outcome import CrawlOutcome as CrawlOutcome
from .crawl_outcome import CrawlSkipped as CrawlSkipped
from .crawl_outcome import CrawlSuccess as CrawlSuccess
from .document import ExtractedContent as ExtractedContent
from .document import ExtractedDocument as ExtractedDocument
from .document import SerializedDocument as SerializedDocument
from .http_response import HttpResponse as HttpResponse
from .run_summary import RunSummary as RunSummary

__all__ = [
    "CrawlOptions",
    "AttemptResult",
    "CrawlFailure",
    "CrawlOutcome",
    "CrawlSkipped",
    "CrawlSuccess",
    "ExtractedContent",
    "ExtractedDocument",
    "SerializedDocument",
    "HttpResponse",
    "RunSummary",
]
