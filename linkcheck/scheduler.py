"""Concurrent crawl scheduler.

One control coroutine owns the frontier, the dedupe set and the result
maps. A fixed pool of worker tasks only fetches: each receives a URL on
the work queue, calls the fetch function and puts the outcome on the
results queue. The control loop hands out a URL only while a worker is
idle (in-flight < pool size), so queued work never sits in a buffer and
cancellation can stop dispatch cleanly.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Awaitable, Callable, Deque, Optional, Set

from .page import CrawlRecord, CrawlState, Defect, FetchOutcome
from .urls import is_under_root, strip_fragment

LOGGER = logging.getLogger(__name__)

FetchFunc = Callable[[str, bool], Awaitable[FetchOutcome]]


class CrawlScheduler:
    """Drain a growing frontier through a fixed number of fetch workers.

    Args:
        root: Normalized root URL; also the prefix that decides which pages
            are traversed.
        fetch: ``fetch(url, extract_links)`` coroutine function.
        crawlers: Number of worker tasks (at least 1).
        stop_event: Optional event; once set no further URL is dispatched,
            in-flight fetches are still collected.
    """

    def __init__(
        self,
        root: str,
        fetch: FetchFunc,
        *,
        crawlers: int = 1,
        stop_event: Optional[asyncio.Event] = None,
    ):
        if crawlers < 1:
            raise ValueError("need at least one crawler")
        self.root = root
        self.crawlers = crawlers
        self._fetch = fetch
        self._stop_event = stop_event
        self._record = CrawlRecord(root=root)
        self._queue: Deque[str] = deque()
        self._queued: Set[str] = set()

    @property
    def state(self) -> CrawlState:
        return self._record.state

    def _set_state(self, state: CrawlState) -> None:
        if self._record.state is not state:
            LOGGER.debug("crawl state %s -> %s", self._record.state.value, state.value)
            self._record.state = state

    async def run(self) -> CrawlRecord:
        """Crawl until the frontier drains or the stop event is set."""
        stop = self._stop_event or asyncio.Event()
        self._record = CrawlRecord(root=self.root)
        self._queue = deque([self.root])
        self._queued = {self.root}

        work: asyncio.Queue[str] = asyncio.Queue()
        results: asyncio.Queue[FetchOutcome] = asyncio.Queue()

        LOGGER.info("starting %d crawlers", self.crawlers)
        workers = [
            asyncio.create_task(self._worker(work, results), name=f"linkcheck-crawler-{i}")
            for i in range(self.crawlers)
        ]
        stop_waiter = asyncio.ensure_future(stop.wait())
        next_result: Optional[asyncio.Future] = None
        in_flight = 0

        try:
            while (self._queue or in_flight) and not stop.is_set():
                while self._queue and in_flight < self.crawlers:
                    work.put_nowait(self._queue.popleft())
                    in_flight += 1
                self._set_state(CrawlState.RUNNING if self._queue else CrawlState.DRAINING)

                if next_result is None:
                    next_result = asyncio.ensure_future(results.get())
                done, _ = await asyncio.wait(
                    {next_result, stop_waiter}, return_when=asyncio.FIRST_COMPLETED
                )
                if next_result in done:
                    in_flight -= 1
                    self._process(next_result.result())
                    next_result = None

            if stop.is_set():
                self._set_state(CrawlState.CANCELLED)
                LOGGER.info("interrupted; waiting on %d in-flight fetches", in_flight)
                while in_flight:
                    if next_result is None:
                        next_result = asyncio.ensure_future(results.get())
                    outcome = await next_result
                    next_result = None
                    in_flight -= 1
                    self._process(outcome)
            else:
                self._set_state(CrawlState.DONE)
        finally:
            stop_waiter.cancel()
            if next_result is not None:
                next_result.cancel()
            for task in workers:
                task.cancel()
            await asyncio.gather(*workers, return_exceptions=True)

        LOGGER.info(
            "fetched %d URLs, %d left unvisited",
            self._record.fetches,
            len(self._queue),
        )
        return self._record

    def _process(self, outcome: FetchOutcome) -> None:
        record = self._record
        record.fetches += 1

        if not outcome.ok:
            record.defects.append(Defect(outcome.url, outcome.error or "unknown error"))
            return

        record.crawled[strip_fragment(outcome.url)] = set(outcome.ids or ())

        # Pages outside the root are validated, never traversed
        if not is_under_root(outcome.url, self.root):
            return

        for href, reason in outcome.invalid_links:
            record.defects.append(Defect(outcome.url, f"invalid link: {href}: {reason}"))

        record.needs[outcome.url] = list(outcome.links)
        for link in outcome.links:
            target = strip_fragment(link)
            if target not in self._queued:
                self._queued.add(target)
                self._queue.append(target)

    async def _worker(
        self,
        work: asyncio.Queue[str],
        results: asyncio.Queue[FetchOutcome],
    ) -> None:
        while True:
            url = await work.get()
            extract_links = is_under_root(url, self.root)
            try:
                outcome = await self._fetch(url, extract_links)
            except Exception as exc:
                LOGGER.exception("Unexpected error fetching %s", url)
                outcome = FetchOutcome.failed(url, str(exc) or exc.__class__.__name__)
            results.put_nowait(outcome)
