"""CSRF token bootstrap for the double-submit cookie scheme.

The service sets a readable ``csrftoken`` cookie from its CSRF endpoint and
expects the same value back in ``X-CSRFToken`` on unsafe requests.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from ..constants import CSRF_COOKIE_NAME, CSRF_HEADER_NAME
from ..errors.handling import log_error
from ..errors.internal import ApiError
from .cookies import CookieAccessor

if TYPE_CHECKING:
    from .client import ApiClient


class CsrfTokenManager:
    """Guarantees a CSRF cookie exists and shares the token across clients.

    One manager serves every client that talks to the same server; the
    resolved token is installed as an unsafe-method default header on each
    attached client. Concurrent bootstraps share a single in-flight fetch.
    """

    def __init__(
        self,
        cookies: CookieAccessor,
        *,
        cookie_name: str = CSRF_COOKIE_NAME,
        header_name: str = CSRF_HEADER_NAME,
        csrf_path: str = "/csrf/",
    ) -> None:
        self._cookies = cookies
        self.cookie_name = cookie_name
        self.header_name = header_name
        self.csrf_path = csrf_path
        self._clients: list[ApiClient] = []
        self._fetch_client: ApiClient | None = None
        self._inflight: asyncio.Future[str | None] | None = None
        self.fetch_count = 0
        self.token: str | None = None

    def attach(self, client: ApiClient, *, fetch: bool = False) -> None:
        """Share this manager with a client.

        Args:
            client: Client receiving the token as a default header.
            fetch: Use this client to call the CSRF endpoint. The first
                attached client is used when none is marked.
        """
        if client not in self._clients:
            self._clients.append(client)
        if fetch or self._fetch_client is None:
            self._fetch_client = client
        if self.token:
            client.defaults.unsafe[self.header_name] = self.token

    def get_csrf_token(self) -> str | None:
        """Current token value from the cookie store, or None."""
        return self._cookies.get_cookie(self.cookie_name)

    async def ensure_csrf_cookie(self) -> None:
        """Make sure the CSRF cookie exists; no network call when it does."""
        if self.get_csrf_token():
            return
        await self._fetch_single_flight()

    async def bootstrap_csrf(self, *, force: bool = False) -> str | None:
        """Resolve the CSRF token and install it on every attached client.

        Args:
            force: Fetch from the service even when a cookie already exists
                (used after a session refresh, which may pair a new token).

        Returns:
            The token, or None when the service could not provide one. Never
            raises for transport or HTTP failures: a missing token surfaces
            later as a 403 on the unsafe request.
        """
        existing = self.get_csrf_token()
        if existing and not force:
            self._install(existing)
            return existing
        return await self._fetch_single_flight()

    async def _fetch_single_flight(self) -> str | None:
        if self._inflight is None or self._inflight.done():
            self._inflight = asyncio.ensure_future(self._fetch())
        # Shielded so one cancelled caller does not abort the shared fetch.
        return await asyncio.shield(self._inflight)

    async def _fetch(self) -> str | None:
        client = self._fetch_client
        if client is None:
            raise RuntimeError("CsrfTokenManager has no client attached")
        self.fetch_count += 1
        body_token = None
        try:
            response = await client.get(self.csrf_path, skip_auth_refresh=True)
            body_token = self._token_from_body(response.data)
        except ApiError as e:
            log_error(
                "CSRF bootstrap failed, falling back to cookie",
                e,
                context={"client": client.name, "path": self.csrf_path},
                level=logging.WARNING,
            )
        # Body value wins: the cookie write may not be visible yet.
        token = body_token or self.get_csrf_token()
        if token:
            self._install(token)
            logging.debug(f"🛡️ CSRF token bootstrapped source={'body' if body_token else 'cookie'}")
        else:
            logging.warning("⚠️ No CSRF token available; unsafe requests will be rejected")
        return token

    def _install(self, token: str) -> None:
        self.token = token
        for client in self._clients:
            client.defaults.unsafe[self.header_name] = token

    @staticmethod
    def _token_from_body(data: Any) -> str | None:
        if isinstance(data, dict):
            value = data.get("csrfToken")
            if isinstance(value, str) and value:
                return value
        return None
