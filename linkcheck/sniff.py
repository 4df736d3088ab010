"""Content-type sniffing over the first bytes of a response body.

Only the HTML branch of the WHATWG MIME sniffing algorithm matters to the
crawler; everything else collapses to plain text or octet-stream.
"""

from __future__ import annotations

SNIFF_LEN = 512

HTML_TYPE = "text/html; charset=utf-8"
TEXT_TYPE = "text/plain; charset=utf-8"
BINARY_TYPE = "application/octet-stream"

_WHITESPACE = b"\t\n\x0c\r "

_HTML_SIGNATURES = (
    b"<!DOCTYPE HTML",
    b"<HTML",
    b"<HEAD",
    b"<SCRIPT",
    b"<IFRAME",
    b"<H1",
    b"<DIV",
    b"<FONT",
    b"<TABLE",
    b"<A",
    b"<STYLE",
    b"<TITLE",
    b"<B",
    b"<BODY",
    b"<BR",
    b"<P",
    b"<!--",
)

_BINARY_BYTES = frozenset(
    list(range(0x00, 0x09)) + [0x0B] + list(range(0x0E, 0x1B)) + list(range(0x1C, 0x20))
)


def _matches_html(data: bytes) -> bool:
    data = data.lstrip(_WHITESPACE)
    for signature in _HTML_SIGNATURES:
        if len(data) <= len(signature):
            continue
        if data[: len(signature)].upper() != signature:
            continue
        # Tag name must be terminated by a space or '>'
        if data[len(signature)] in b" >":
            return True
    return False


def detect_content_type(data: bytes) -> str:
    """Classify at most the first 512 bytes of *data*."""
    data = data[:SNIFF_LEN]
    if _matches_html(data):
        return HTML_TYPE
    if any(byte in _BINARY_BYTES for byte in data):
        return BINARY_TYPE
    return TEXT_TYPE


def is_html(data: bytes) -> bool:
    return detect_content_type(data).startswith("text/html")
