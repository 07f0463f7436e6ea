"""Read access to the ambient cookie store.

The ambient store is the aiohttp session's cookie jar: whatever cookies the
service set on earlier responses and the session will send back to it.
"""

from __future__ import annotations

from urllib.parse import unquote

from aiohttp.abc import AbstractCookieJar
from yarl import URL


def parse_cookie(header: str | None, name: str) -> str | None:
    """Return the URL-decoded value of cookie ``name`` from a Cookie header.

    Segments are split on ``;`` and trimmed; empty segments and segments
    without ``=`` are skipped. The first segment whose key equals ``name``
    wins.

    Args:
        header: Raw ``Cookie`` header value, e.g. ``"a=1; csrftoken=abc"``.
        name: Cookie name to look up.

    Returns:
        The decoded value, or None when absent.
    """
    if not header:
        return None
    for part in header.split(";"):
        part = part.strip()
        if not part:
            continue
        key, sep, value = part.partition("=")
        if not sep:
            continue
        if key.strip() == name:
            return unquote(value)
    return None


class CookieAccessor:
    """Synchronous, side-effect free view over a cookie jar for one server."""

    def __init__(self, cookie_jar: AbstractCookieJar | None, url: str | URL) -> None:
        self._jar = cookie_jar
        self._url = URL(str(url))

    @property
    def url(self) -> URL:
        return self._url

    def cookie_header(self) -> str | None:
        """Render the cookies the jar would send to the server as a header.

        Values are the decoded morsel values, so quoting added by the cookie
        jar never leaks into ``get_cookie``.
        """
        if self._jar is None:
            return None
        cookies = self._jar.filter_cookies(self._url)
        if not cookies:
            return ""
        return "; ".join(f"{morsel.key}={morsel.value}" for morsel in cookies.values())

    def get_cookie(self, name: str) -> str | None:
        """Return the decoded value of cookie ``name`` or None when absent."""
        return parse_cookie(self.cookie_header(), name)
