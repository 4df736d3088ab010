"""Link exclusion rules applied before links are reported back to the scheduler."""

from __future__ import annotations

from typing import Iterable, List, Tuple

# Schemes that never resolve to something an HTTP client can fetch.
INERT_SCHEMES: Tuple[str, ...] = (
    "mailto:",
    "javascript:",
    "tel:",
    "sms:",
    "data:",
)


def parse_excludes(value: str) -> List[str]:
    """Split a comma-separated prefix list, dropping blank entries."""
    return [part.strip() for part in (value or "").split(",") if part.strip()]


class LinkFilter:
    """Decides which discovered links are skipped entirely."""

    def __init__(self, excludes: Iterable[str] = ()):
        self.excludes: Tuple[str, ...] = tuple(p for p in excludes if p)

    def exclude(self, link: str) -> bool:
        if link.startswith(INERT_SCHEMES):
            return True
        return any(link.startswith(prefix) for prefix in self.excludes)

    def __repr__(self) -> str:
        return f"LinkFilter(excludes={list(self.excludes)!r})"
