"""Custom exceptions for the sitemap crawler."""


class SitemapFetchError(Exception):
    """Raised when the sitemap cannot be fetched or parsed. Aborts the run."""

    def __init__(self, sitemap_url: str, reason: str):
        self.sitemap_url = sitemap_url
        self.reason = reason
        super().__init__(f"Could not fetch sitemap {sitemap_url}: {reason}")


class OutputDirError(Exception):
    """Raised when the output directory cannot be created. Aborts the run."""

    def __init__(self, path: str, original: Exception):
        self.path = path
        self.original = original
        super().__init__(f"Could not create output directory {path}: {original}")


class PageProcessingError(Exception):
    """Base class for per-URL failures. Every subclass is retryable."""

    def __init__(self, url: str, message: str):
        self.url = url
        super().__init__(message)


class HttpFetchError(PageProcessingError):
    """Raised when an HTTP fetch fails due to network/transport errors or a non-2xx status."""

    def __init__(self, url: str, original: Exception = None, status_code: int = None):
        self.original = original
        self.status_code = status_code
        if status_code is not None:
            message = f"HTTP fetch failed for {url}: status {status_code}"
        else:
            message = f"HTTP fetch failed for {url}: {original}"
        super().__init__(url, message)


class FetchTimeoutError(PageProcessingError):
    """Raised when a page fetch exceeds its deadline."""

    def __init__(self, url: str, timeout: float):
        self.timeout = timeout
        super().__init__(url, f"Fetch timed out after {timeout:g}s for {url}")


class UnsupportedContentTypeError(PageProcessingError):
    def __init__(self, url: str, content_type: str):
        self.content_type = content_type
        super().__init__(url, f"Unsupported content type {content_type!r} for {url}")


class EmptyContentError(PageProcessingError):
    """Raised when extraction yields no body text; nothing is written."""

    def __init__(self, url: str):
        super().__init__(url, f"No content found for {url}")


class DocumentWriteError(PageProcessingError):
    def __init__(self, url: str, path: str, original: Exception):
        self.path = path
        self.original = original
        super().__init__(url, f"Could not write {path} for {url}: {original}")
