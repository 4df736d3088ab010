"""Global pytest hooks and the in-memory sample site used by crawl tests."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Optional

import httpx
import pytest

SAMPLE_SITE_DIR = Path(__file__).parent / "fixtures" / "sample-site"
SITE = "http://testsite.local"

EXTERNAL_PAGES: Dict[str, bytes] = {
    "https://example.com/": (
        b"<!DOCTYPE html><html><body><h1 id=\"top\">Example</h1>"
        b"<a href=\"/elsewhere\">elsewhere</a></body></html>"
    ),
}


@dataclass
class SampleSite:
    """Serves ``tests/fixtures/sample-site`` plus a fake example.com.

    Every request is counted in ``hits`` (keyed by full URL) so tests can
    assert how often a page was fetched. ``on_request`` runs before the
    response is built.
    """

    hits: Counter = field(default_factory=Counter)
    on_request: Optional[Callable[[httpx.Request], None]] = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.hits[str(request.url)] += 1
        if self.on_request is not None:
            self.on_request(request)

        if request.url.host == "testsite.local":
            return self._serve_file(request.url.path)

        page = EXTERNAL_PAGES.get(str(request.url))
        if page is None:
            return httpx.Response(404, text="404 page not found\n")
        return httpx.Response(200, content=page)

    def _serve_file(self, path: str) -> httpx.Response:
        relative = path.lstrip("/")
        if not relative or relative.endswith("/"):
            relative += "index.html"
        target = SAMPLE_SITE_DIR / relative
        if not target.is_file():
            return httpx.Response(404, text="404 page not found\n")
        return httpx.Response(200, content=target.read_bytes())

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=httpx.MockTransport(self.handler),
            follow_redirects=True,
        )

    def fetched(self, path: str) -> int:
        return self.hits[SITE + path]


@pytest.fixture
def sample_site() -> SampleSite:
    return SampleSite()


@dataclass
class _TestAccounting:
    deselected: int = 0
    skipped: int = 0
    xfailed: int = 0
    xpassed: int = 0


_ACCOUNTING = _TestAccounting()


def pytest_deselected(items):  # pragma: no cover - pytest hook
    _ACCOUNTING.deselected += len(items)


def pytest_runtest_logreport(report):  # pragma: no cover - pytest hook
    if report.when not in {"setup", "call"}:
        return

    is_xfail = bool(getattr(report, "wasxfail", False))
    if is_xfail:
        if report.outcome == "skipped":
            _ACCOUNTING.xfailed += 1
        elif report.outcome == "passed":
            _ACCOUNTING.xpassed += 1
        return

    if report.outcome == "skipped":
        _ACCOUNTING.skipped += 1


def pytest_sessionfinish(session, exitstatus):  # pragma: no cover - pytest hook
    violations = []
    if _ACCOUNTING.deselected:
        violations.append(f"deselected={_ACCOUNTING.deselected}")
    if _ACCOUNTING.skipped:
        violations.append(f"skipped={_ACCOUNTING.skipped}")
    if _ACCOUNTING.xfailed:
        violations.append(f"xfailed={_ACCOUNTING.xfailed}")
    if _ACCOUNTING.xpassed:
        violations.append(f"xpassed={_ACCOUNTING.xpassed}")

    if not violations:
        return

    reporter = session.config.pluginmanager.get_plugin("terminalreporter")
    if reporter:
        reporter.write_sep(
            "=",
            "Strict guard failed: test accounting violations detected "
            f"({', '.join(violations)})",
        )
        reporter.write_line(
            "Hard guard requires zero skipped/deselected/xfail/xpass tests."
        )

    session.exitstatus = 1
