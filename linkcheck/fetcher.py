"""Single-page fetcher used by the crawl workers.

The fetcher performs one GET per URL, sniffs the first 512 bytes of the
body and only parses pages that look like HTML. It has no knowledge of the
crawl frontier; everything it learns is returned as a
:class:`~linkcheck.page.FetchOutcome`.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from . import __version__, parsing
from .filters import LinkFilter
from .page import FetchOutcome
from .sniff import SNIFF_LEN, detect_content_type

LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
DEFAULT_USER_AGENT = f"linkcheck/{__version__}"


def build_client(
    timeout: Optional[float] = DEFAULT_TIMEOUT,
    user_agent: Optional[str] = None,
) -> httpx.AsyncClient:
    """Create the shared async client used by every worker.

    A *timeout* of ``None`` disables per-request timeouts.
    """
    return httpx.AsyncClient(
        follow_redirects=True,
        headers={"User-Agent": user_agent or DEFAULT_USER_AGENT},
        timeout=timeout,
    )


class PageFetcher:
    """Fetch pages and report their outbound links and element ids."""

    def __init__(self, client: httpx.AsyncClient, link_filter: Optional[LinkFilter] = None):
        self._client = client
        self._filter = link_filter or LinkFilter()

    async def fetch(self, url: str, extract_links: bool) -> FetchOutcome:
        """GET *url* and classify the response.

        Args:
            url: Absolute URL without fragment.
            extract_links: Whether anchors should be collected. Ids are
                gathered for every HTML page regardless.

        Returns:
            A :class:`FetchOutcome`; ``error`` is set for non-2xx statuses
            and transport failures.
        """
        try:
            async with self._client.stream("GET", url) as response:
                if not response.is_success:
                    status = f"{response.status_code} {response.reason_phrase}".strip()
                    LOGGER.debug("Got %s: %s", status, url)
                    return FetchOutcome.failed(url, status)

                body = await _read_html_body(response)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            LOGGER.debug("Error fetching %s: %s", url, exc)
            return FetchOutcome.failed(url, str(exc) or exc.__class__.__name__)

        if body is None:
            # Not HTML: reached, with no ids to offer
            return FetchOutcome(url=url, ids=set())

        LOGGER.debug("Got OK: %s", url)

        outcome = FetchOutcome(url=url, ids=set())
        if extract_links:
            links, invalid = parsing.extract_links(url, body)
            for link in links:
                LOGGER.debug("url %s links to %s", url, link)
                if not self._filter.exclude(link):
                    outcome.links.append(link)
            outcome.invalid_links = invalid

        for element_id in parsing.page_ids(body):
            LOGGER.debug(" url %s has #%s", url, element_id)
            outcome.ids.add(element_id)

        return outcome


async def _read_html_body(response: httpx.Response) -> Optional[bytes]:
    """Read the whole body if its first bytes sniff as HTML, else ``None``."""
    body = bytearray()
    async for chunk in response.aiter_bytes(chunk_size=SNIFF_LEN):
        if not body:
            content_type = detect_content_type(chunk)
            if not content_type.startswith("text/html"):
                LOGGER.debug("Skipping %s, content-type %s", response.url, content_type)
                return None
        body.extend(chunk)

    if not body:
        LOGGER.debug("Skipping %s, empty body", response.url)
        return None
    return bytes(body)
