"""Broken link and missing fragment checker.

This package crawls a website from a root URL and reports:

- links whose target could not be fetched (non-2xx status, network error)
- ``#fragment`` links whose target page has no element with that id

Pages under the root are traversed; pages outside it are fetched once to
validate them but their own links are not followed.

Example usage:

    from linkcheck import check_site, check_site_async

    result = check_site("https://docs.example.com/", crawlers=4)
    for defect in result.defects:
        print(f"{defect.url}: {defect.message}")

    # Inside an event loop, with a cancellation event
    stop = asyncio.Event()
    result = await check_site_async("https://docs.example.com/", stop_event=stop)
    if result.cancelled:
        print("partial report")
"""

from __future__ import annotations

__version__ = "0.1.0"

import asyncio
import logging
from typing import Iterable, Optional

import httpx

from .config import CheckConfig, ConfigError, build_config
from .fetcher import DEFAULT_TIMEOUT, PageFetcher, build_client
from .filters import LinkFilter
from .page import CheckResult, CrawlRecord, CrawlState, Defect, FetchOutcome
from .reconcile import collect_defects, reconcile
from .report import exit_code
from .scheduler import CrawlScheduler

__all__ = [
    # Results
    "CheckResult",
    "CrawlRecord",
    "CrawlState",
    "Defect",
    "FetchOutcome",
    # Configuration
    "CheckConfig",
    "ConfigError",
    "build_config",
    # Building blocks
    "CrawlScheduler",
    "LinkFilter",
    "PageFetcher",
    "reconcile",
    # Entry points
    "check_site",
    "check_site_async",
    "exit_code",
]

LOGGER = logging.getLogger(__name__)


async def check_site_async(
    root: str,
    *,
    crawlers: int = 1,
    excludes: Iterable[str] = (),
    timeout: Optional[float] = DEFAULT_TIMEOUT,
    user_agent: Optional[str] = None,
    stop_event: Optional[asyncio.Event] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> CheckResult:
    """
    Crawl *root* and return every defect found.

    Args:
        root: Normalized root URL (see :func:`linkcheck.urls.normalize_root`).
        crawlers: Number of concurrent fetch workers.
        excludes: Link prefixes that are never fetched nor reported.
        timeout: Per-request timeout in seconds, *None* for none.
        user_agent: Override for the User-Agent header.
        stop_event: Setting this event stops dispatching new URLs; fetches
            already in flight are collected and a partial result returned.
        client: Optional pre-built client (left open on return).

    Returns:
        CheckResult with the crawl record and the ordered defect list.

    Raises:
        ValueError: If *crawlers* is less than 1.
    """
    owns_client = client is None
    http_client = client or build_client(timeout=timeout, user_agent=user_agent)
    try:
        fetcher = PageFetcher(http_client, LinkFilter(excludes))
        scheduler = CrawlScheduler(
            root,
            fetcher.fetch,
            crawlers=crawlers,
            stop_event=stop_event,
        )
        record = await scheduler.run()
    finally:
        if owns_client:
            await http_client.aclose()

    defects = collect_defects(record)
    LOGGER.info("%d defects found (%s)", len(defects), record.state.value)
    return CheckResult(record=record, defects=defects)


def check_site(
    root: str,
    *,
    crawlers: int = 1,
    excludes: Iterable[str] = (),
    timeout: Optional[float] = DEFAULT_TIMEOUT,
    user_agent: Optional[str] = None,
) -> CheckResult:
    """Synchronous wrapper for check_site_async."""
    return asyncio.run(
        check_site_async(
            root,
            crawlers=crawlers,
            excludes=excludes,
            timeout=timeout,
            user_agent=user_agent,
        )
    )
