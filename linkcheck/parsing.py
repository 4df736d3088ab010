"""Helpers for pulling anchors and element ids out of fetched HTML."""

from __future__ import annotations

import logging
import re
from typing import Iterable, List, Tuple

from bs4 import BeautifulSoup

from .urls import InvalidLinkError, resolve

LOGGER = logging.getLogger(__name__)

ID_ATTRIBUTE = re.compile(rb"""\bid=['"]?([^\s'">]+)""")


def anchor_hrefs(body: bytes) -> List[str]:
    """Return the raw ``href`` of every anchor in document order."""
    soup = BeautifulSoup(body, "html.parser")
    return [anchor["href"] for anchor in soup.find_all("a", href=True)]


def extract_links(
    page_url: str, body: bytes
) -> Tuple[List[str], List[Tuple[str, str]]]:
    """Resolve every anchor on the page against *page_url*.

    Returns:
        ``(links, invalid)`` where *links* are absolute URLs with any
        fragment intact and *invalid* holds ``(href, reason)`` pairs for
        hrefs that are not valid URL references.
    """
    links: List[str] = []
    invalid: List[Tuple[str, str]] = []
    for href in anchor_hrefs(body):
        try:
            links.append(resolve(page_url, href))
        except InvalidLinkError as exc:
            LOGGER.debug("url %s has unparsable href %r: %s", page_url, href, exc.reason)
            invalid.append((exc.ref, exc.reason))
    return links, invalid


def page_ids(body: bytes) -> Iterable[str]:
    """Yield every ``id`` attribute value found by a plain token scan."""
    for match in ID_ATTRIBUTE.finditer(body):
        yield match.group(1).decode("utf-8", errors="replace")
