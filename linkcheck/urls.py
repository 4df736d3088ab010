"""URL resolution and fragment helpers shared by the fetcher and scheduler."""

from __future__ import annotations

from typing import Tuple
from urllib.parse import urldefrag, urljoin, urlsplit, urlunsplit

DEFAULT_ROOT = "http://localhost:8000"

_FETCHABLE_SCHEMES = frozenset({"http", "https"})


class InvalidLinkError(ValueError):
    """Raised when an href cannot be parsed as a URL reference."""

    def __init__(self, ref: str, reason: str):
        self.ref = ref
        self.reason = reason
        super().__init__(f"{ref}: {reason}")


class InvalidRootError(ValueError):
    """Raised when the crawl root is not an absolute http(s) URL."""


def resolve(base: str, ref: str) -> str:
    """Resolve *ref* against *base* and return an absolute URL.

    Raises:
        InvalidLinkError: If *ref* is not valid reference syntax.
    """
    ref = ref.strip()
    try:
        # urljoin skips parsing when either side is empty
        urlsplit(ref)
        resolved = urljoin(base, ref)
        # The port is only validated when read
        urlsplit(resolved).port
        return resolved
    except ValueError as exc:
        raise InvalidLinkError(ref, str(exc)) from exc


def split_fragment(url: str) -> Tuple[str, str]:
    """Return ``(url_without_fragment, fragment)``; the fragment may be empty."""
    defragged, fragment = urldefrag(url)
    return defragged, fragment


def strip_fragment(url: str) -> str:
    return split_fragment(url)[0]


def is_under_root(url: str, root: str) -> bool:
    """True if *url* shares the root's scheme, authority and path prefix."""
    return url.startswith(root)


def normalize_root(raw: str) -> str:
    """Validate the crawl root and return its canonical string form.

    An empty value falls back to ``http://localhost:8000``, an empty path
    becomes ``/`` and any fragment is dropped.
    """
    raw = (raw or "").strip() or DEFAULT_ROOT
    try:
        parts = urlsplit(raw)
    except ValueError as exc:
        raise InvalidRootError(f"parsing root URL: {exc}") from exc

    if parts.scheme.lower() not in _FETCHABLE_SCHEMES:
        raise InvalidRootError(
            f"parsing root URL: unsupported scheme in {raw!r} (expected http or https)"
        )
    if not parts.netloc:
        raise InvalidRootError(f"parsing root URL: missing host in {raw!r}")

    path = parts.path or "/"
    return urlunsplit((parts.scheme, parts.netloc, path, parts.query, ""))
