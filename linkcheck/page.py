"""Data structures exchanged between fetch workers, the scheduler and the reporter."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple


class CrawlState(str, enum.Enum):
    """Lifecycle of a single crawl run."""

    RUNNING = "running"
    DRAINING = "draining"  # queue empty, fetches still in flight
    CANCELLED = "cancelled"
    DONE = "done"


@dataclass(slots=True)
class FetchOutcome:
    """Result of fetching one frontier URL."""

    url: str
    links: List[str] = field(default_factory=list)
    ids: Optional[Set[str]] = None
    error: Optional[str] = None
    # (href, reason) pairs for anchors that could not be resolved
    invalid_links: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failed(cls, url: str, error: str) -> "FetchOutcome":
        return cls(url=url, error=error)


@dataclass(slots=True, frozen=True)
class Defect:
    """A reportable crawl problem attributed to a URL."""

    url: str
    message: str


@dataclass
class CrawlRecord:
    """Everything the scheduler learned during one run."""

    root: str
    # page URL -> outbound links it referenced (under-root pages only)
    needs: Dict[str, List[str]] = field(default_factory=dict)
    # page URL without fragment -> ids present on the page
    crawled: Dict[str, Set[str]] = field(default_factory=dict)
    # fetch errors and unresolvable hrefs, in arrival order
    defects: List[Defect] = field(default_factory=list)
    state: CrawlState = CrawlState.RUNNING
    fetches: int = 0

    @property
    def cancelled(self) -> bool:
        return self.state is CrawlState.CANCELLED


@dataclass
class CheckResult:
    """Outcome of a full check: the crawl record plus the final defect list."""

    record: CrawlRecord
    defects: List[Defect] = field(default_factory=list)

    @property
    def cancelled(self) -> bool:
        return self.record.cancelled
