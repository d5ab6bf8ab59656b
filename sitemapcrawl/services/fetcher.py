from __future__ import annotations

import asyncio
import os
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Protocol

from sitemapcrawl.domain.http_response import HttpResponse
from sitemapcrawl.exceptions import FetchTimeoutError


def default_max_workers() -> int:
    return min(32, (os.cpu_count() or 1) + 4)


class Fetcher(Protocol):
    """Fetch a page and return a normalized HTTP-like response.

    Kept small so the blocking requests-based fetcher can be swapped for
    another implementation.
    """

    async def fetch(self, url: str) -> HttpResponse: ...


class HttpServiceFetcher:
    """Runs the blocking `HttpService` on its own thread pool under a hard deadline.

    The requests timeout bounds each socket operation; `deadline` bounds the
    whole fetch so one slow page cannot hold its task forever. The deadline
    starts once a worker slot is held, so time spent queued behind other
    fetches never counts against it. A slot is given back only when its
    thread returns, including after the caller stopped waiting on a timeout.
    """

    def __init__(self, http_service, deadline: Optional[float] = None, max_workers: Optional[int] = None):
        self._http_service = http_service
        self._deadline = deadline
        self.max_workers = max_workers or default_max_workers()
        self._executor = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="fetch")
        self._slots: Optional[asyncio.Semaphore] = None
        self._slots_loop = None

    def _get_slots(self) -> asyncio.Semaphore:
        # one semaphore per event loop; the fetcher outlives a single asyncio.run()
        loop = asyncio.get_running_loop()
        if self._slots is None or self._slots_loop is not loop:
            self._slots = asyncio.Semaphore(self.max_workers)
            self._slots_loop = loop
        return self._slots

    async def fetch(self, url: str) -> HttpResponse:
        slots = self._get_slots()
        await slots.acquire()
        try:
            future = asyncio.get_running_loop().run_in_executor(self._executor, self._http_service.fetch, url)
        except BaseException:
            slots.release()
            raise
        future.add_done_callback(lambda f: self._release(slots, f))

        if not self._deadline:
            return await asyncio.shield(future)
        try:
            return await asyncio.wait_for(asyncio.shield(future), timeout=self._deadline)
        except asyncio.TimeoutError as e:
            raise FetchTimeoutError(url, self._deadline) from e

    @staticmethod
    def _release(slots: asyncio.Semaphore, future: asyncio.Future) -> None:
        # an abandoned fetch still finishes; read its result so it is not reported as unretrieved
        if not future.cancelled():
            future.exception()
        slots.release()
