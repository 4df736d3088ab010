"""Cross-reference the links pages asked for against what the crawl reached."""

from __future__ import annotations

from typing import Dict, Iterable, List, Set

from .page import CrawlRecord, Defect
from .urls import split_fragment


def reconcile(needs: Dict[str, List[str]], crawled: Dict[str, Set[str]]) -> List[Defect]:
    """Return one defect per unreachable link or unsatisfied fragment.

    Sources are visited in sorted order and each source's links in the order
    they appeared on the page, so the result does not depend on the order
    fetches happened to complete in.
    """
    defects: List[Defect] = []
    for source in sorted(needs):
        for destination in needs[source]:
            target, fragment = split_fragment(destination)
            ids = crawled.get(target)
            if ids is None:
                defects.append(Defect(source, f"failed to fetch: {destination}"))
            elif fragment and fragment not in ids:
                defects.append(Defect(source, f"missing fragment: {destination}"))
    return defects


def collect_defects(record: CrawlRecord) -> List[Defect]:
    """Fetch-time defects (by URL) followed by the reconciliation defects."""
    return _by_url(record.defects) + reconcile(record.needs, record.crawled)


def _by_url(defects: Iterable[Defect]) -> List[Defect]:
    return sorted(defects, key=lambda defect: defect.url)
