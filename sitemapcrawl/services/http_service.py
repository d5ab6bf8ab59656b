import requests
from typing import Callable, Optional

from sitemapcrawl.domain.http_response import HttpResponse
from sitemapcrawl.exceptions import FetchTimeoutError, HttpFetchError


class HttpService:
    """
    HTTP client wrapper for fetching pages and sitemaps.

    Requires http_client callable for dependency injection so tests can run
    without patching and the HTTP library can be swapped.
    """

    def __init__(self, user_agent: str, http_client: Callable, timeout: float = 30):
        self.user_agent = user_agent
        self.timeout = timeout
        self.http_client = http_client

    def fetch(self, url: str, timeout: Optional[float] = None) -> HttpResponse:
        """Fetch URL and return status code, body text, raw bytes and Content-Type.

        Non-2xx responses raise `HttpFetchError`; timeouts raise `FetchTimeoutError`.
        """
        timeout = self.timeout if timeout is None else timeout
        headers = {"User-Agent": self.user_agent}
        try:
            resp = self.http_client(url, headers=headers, timeout=timeout)
        except requests.exceptions.Timeout as e:
            raise FetchTimeoutError(url, timeout) from e
        except requests.exceptions.RequestException as e:
            raise HttpFetchError(url, e) from e

        status = int(resp.status_code)
        if status < 200 or status >= 300:
            raise HttpFetchError(url, status_code=status)

        # Extract Content-Type if response has headers; let real exceptions bubble up.
        ct = None
        if hasattr(resp, 'headers'):
            ct = resp.headers.get('Content-Type')

        content = getattr(resp, 'content', b"")
        if not isinstance(content, bytes):
            content = b""
        return HttpResponse(status, resp.text, ct, content)
