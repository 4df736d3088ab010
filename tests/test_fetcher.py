"""Tests for linkcheck.fetcher module."""

from __future__ import annotations

from typing import Callable

import httpx
import pytest

from linkcheck.fetcher import (
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
    PageFetcher,
    build_client,
)
from linkcheck.filters import LinkFilter

HTML_PAGE = b"""<!DOCTYPE html>
<html><body>
<h1 id="top">Top</h1>
<a href="child.html">child</a>
<a href="#top">top</a>
<a href="https://example.com/skip/me">skipped</a>
<a href="mailto:x@example.com">mail</a>
<a href="http://[broken">broken</a>
</body></html>
"""


def _client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler), follow_redirects=True)


class TestBuildClient:
    @pytest.mark.asyncio
    async def test_defaults(self):
        client = build_client()
        try:
            assert client.follow_redirects is True
            assert client.headers["User-Agent"] == DEFAULT_USER_AGENT
            assert client.timeout.read == DEFAULT_TIMEOUT
        finally:
            await client.aclose()

    @pytest.mark.asyncio
    async def test_overrides(self):
        client = build_client(timeout=None, user_agent="probe/1.0")
        try:
            assert client.headers["User-Agent"] == "probe/1.0"
            assert client.timeout.read is None
        finally:
            await client.aclose()


class TestPageFetcher:
    @pytest.mark.asyncio
    async def test_html_with_links(self):
        def handler(request):
            return httpx.Response(200, content=HTML_PAGE)

        async with _client(handler) as client:
            fetcher = PageFetcher(client, LinkFilter(["https://example.com/skip"]))
            outcome = await fetcher.fetch("http://h/dir/page.html", True)

        assert outcome.ok
        assert outcome.links == [
            "http://h/dir/child.html",
            "http://h/dir/page.html#top",
        ]
        assert outcome.ids == {"top"}
        assert outcome.invalid_links[0][0] == "http://[broken"

    @pytest.mark.asyncio
    async def test_ids_without_link_extraction(self):
        def handler(request):
            return httpx.Response(200, content=HTML_PAGE)

        async with _client(handler) as client:
            outcome = await PageFetcher(client).fetch("http://other/page.html", False)

        assert outcome.ok
        assert outcome.links == []
        assert outcome.invalid_links == []
        assert outcome.ids == {"top"}

    @pytest.mark.asyncio
    async def test_not_found(self):
        def handler(request):
            return httpx.Response(404, text="404 page not found\n")

        async with _client(handler) as client:
            outcome = await PageFetcher(client).fetch("http://h/404", True)

        assert not outcome.ok
        assert outcome.error == "404 Not Found"
        assert outcome.ids is None
        assert outcome.links == []

    @pytest.mark.asyncio
    async def test_server_error(self):
        def handler(request):
            return httpx.Response(500)

        async with _client(handler) as client:
            outcome = await PageFetcher(client).fetch("http://h/", True)

        assert outcome.error == "500 Internal Server Error"

    @pytest.mark.asyncio
    async def test_other_success_status(self):
        def handler(request):
            return httpx.Response(203, content=b"<html><body id=x></body></html>")

        async with _client(handler) as client:
            outcome = await PageFetcher(client).fetch("http://h/", True)

        assert outcome.ok
        assert outcome.ids == {"x"}

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(handler) as client:
            outcome = await PageFetcher(client).fetch("http://h/", True)

        assert outcome.error == "connection refused"
        assert outcome.ids is None

    @pytest.mark.asyncio
    async def test_invalid_url_is_fetch_error(self):
        def handler(request):
            raise AssertionError("no request expected")

        async with _client(handler) as client:
            outcome = await PageFetcher(client).fetch("http://h:abc/x", True)

        assert not outcome.ok
        assert outcome.error
        assert outcome.ids is None

    @pytest.mark.asyncio
    async def test_redirect_followed(self):
        def handler(request):
            if request.url.path == "/old":
                return httpx.Response(301, headers={"Location": "/new"})
            return httpx.Response(200, content=b"<html><p id='moved'>x</p></html>")

        async with _client(handler) as client:
            outcome = await PageFetcher(client).fetch("http://h/old", True)

        assert outcome.ok
        assert outcome.ids == {"moved"}

    @pytest.mark.asyncio
    async def test_redirect_to_missing_page(self):
        def handler(request):
            if request.url.path == "/old":
                return httpx.Response(302, headers={"Location": "/gone"})
            return httpx.Response(404)

        async with _client(handler) as client:
            outcome = await PageFetcher(client).fetch("http://h/old", True)

        assert outcome.error == "404 Not Found"

    @pytest.mark.asyncio
    async def test_non_html_is_reached_without_ids(self):
        def handler(request):
            return httpx.Response(200, content=b"just text id=\"nope\"\n")

        async with _client(handler) as client:
            outcome = await PageFetcher(client).fetch("http://h/notes.txt", True)

        assert outcome.ok
        assert outcome.ids == set()
        assert outcome.links == []

    @pytest.mark.asyncio
    async def test_content_type_header_ignored(self):
        def handler(request):
            return httpx.Response(
                200,
                content=b"plain words",
                headers={"Content-Type": "text/html"},
            )

        async with _client(handler) as client:
            outcome = await PageFetcher(client).fetch("http://h/", True)

        assert outcome.ids == set()

    @pytest.mark.asyncio
    async def test_empty_body(self):
        def handler(request):
            return httpx.Response(200, content=b"")

        async with _client(handler) as client:
            outcome = await PageFetcher(client).fetch("http://h/empty", True)

        assert outcome.ok
        assert outcome.ids == set()

    @pytest.mark.asyncio
    async def test_sniff_uses_first_512_bytes_only(self):
        body = b" " * 600 + b"<html><a href='late.html'>late</a></html>"

        def handler(request):
            return httpx.Response(200, content=body)

        async with _client(handler) as client:
            outcome = await PageFetcher(client).fetch("http://h/", True)

        assert outcome.ok
        assert outcome.links == []

    @pytest.mark.asyncio
    async def test_links_past_sniff_window_are_read(self):
        filler = b"<p>" + b"x" * 1000 + b"</p>"
        body = b"<html><body>" + filler + b"<a href='late.html' id='tail'>late</a></body></html>"

        def handler(request):
            return httpx.Response(200, content=body)

        async with _client(handler) as client:
            outcome = await PageFetcher(client).fetch("http://h/", True)

        assert outcome.links == ["http://h/late.html"]
        assert outcome.ids == {"tail"}

    @pytest.mark.asyncio
    async def test_user_agent_sent(self):
        seen = {}

        def handler(request):
            seen["ua"] = request.headers.get("User-Agent")
            return httpx.Response(200, content=b"<html></html>")

        async with httpx.AsyncClient(
            transport=httpx.MockTransport(handler),
            headers={"User-Agent": "probe/2"},
        ) as client:
            await PageFetcher(client).fetch("http://h/", True)

        assert seen["ua"] == "probe/2"
