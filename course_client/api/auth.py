"""Authentication endpoints and client-side session state.

``AuthAPI`` wraps the ``/api/auth/*`` endpoints. ``AuthSession`` keeps the
currently logged-in user and an optional keep-alive loop that renews the
session in the background so long idle periods do not end in a 401 storm.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from ..constants import KEEPALIVE_INTERVAL_SECONDS
from ..errors.handling import log_error
from ..errors.internal import ApiError, SessionExpiredError
from ..http.client import ApiClient
from ..http.csrf import CsrfTokenManager
from ..http.refresh import RefreshCoordinator


class AuthAPI:
    """Asynchronous client for the authentication endpoints.

    Attributes:
        client: The authenticated ApiClient (base URL ``<server>/api/auth``).
    """

    def __init__(self, client: ApiClient):
        if client is None:
            raise ValueError("ApiClient required")
        self.client = client

    async def get_csrf(self) -> Any:
        response = await self.client.get("/csrf/", skip_auth_refresh=True)
        return response.data

    async def current_user(self) -> dict[str, Any] | None:
        response = await self.client.get("/current-user/")
        return response.data if isinstance(response.data, dict) else None

    async def login(self, credentials: Mapping[str, Any]) -> Any:
        response = await self.client.post("/login/", dict(credentials), skip_auth_refresh=True)
        return response.data

    async def logout(self) -> Any:
        response = await self.client.post("/logout/")
        return response.data

    async def refresh(self) -> Any:
        """Call the refresh endpoint directly.

        Never routed through the refresh coordinator: a 401 here is the
        refresh failure itself.
        """
        response = await self.client.post("/refresh/", skip_auth_refresh=True)
        return response.data


class AuthSession:
    """Current user state plus the login/logout/check flows.

    Keep-alive renewals go through the shared refresh coordinator, so a
    background renewal and a 401-triggered refresh never overlap.
    """

    def __init__(
        self,
        auth_api: AuthAPI,
        csrf: CsrfTokenManager,
        coordinator: RefreshCoordinator,
        *,
        keepalive_interval: float = KEEPALIVE_INTERVAL_SECONDS,
    ) -> None:
        self.auth_api = auth_api
        self.csrf = csrf
        self.coordinator = coordinator
        self.keepalive_interval = keepalive_interval
        self.user: dict[str, Any] | None = None
        self._keepalive_task: asyncio.Task[None] | None = None

    @property
    def is_logged_in(self) -> bool:
        return self.user is not None

    async def check_auth(self) -> dict[str, Any] | None:
        """Bootstrap CSRF and load the current user; None when not logged in."""
        try:
            await self.csrf.bootstrap_csrf()
            self.user = await self.auth_api.current_user()
        except ApiError as e:
            logging.debug(f"👤 Not authenticated: {type(e).__name__} status={e.status}")
            self.user = None
        return self.user

    async def login(self, credentials: Mapping[str, Any]) -> dict[str, Any] | None:
        """Log in, then re-bootstrap CSRF (login rotates the token) and load the user.

        Raises:
            ApiError: The login request failed (bad credentials, 403, network).
        """
        await self.csrf.bootstrap_csrf()
        await self.auth_api.login(credentials)
        await self.csrf.bootstrap_csrf(force=True)
        user = await self.check_auth()
        logging.info(f"🔓 Logged in user={self._username(user)}")
        return user

    async def logout(self) -> None:
        """Log out on the service and forget the cached user."""
        await self.csrf.bootstrap_csrf()
        try:
            await self.auth_api.logout()
        finally:
            self.user = None
        logging.info("🔒 Logged out")

    # ---- keep-alive ----
    def start_keepalive(self) -> None:
        """Start the background session renewal loop (idempotent)."""
        if self._keepalive_task and not self._keepalive_task.done():
            return
        self._keepalive_task = asyncio.create_task(self._keepalive_loop())
        logging.debug(f"▶️ Started session keep-alive interval={self.keepalive_interval}s")

    async def stop_keepalive(self) -> None:
        task, self._keepalive_task = self._keepalive_task, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logging.debug("⏹️ Stopped session keep-alive")

    async def keepalive_once(self) -> bool:
        """Renew the session once; clears the user when renewal fails.

        Joins a refresh cycle already in flight instead of starting a second
        one. The cycle re-bootstraps CSRF before returning.

        Returns:
            True when the session was renewed.
        """
        try:
            await self.coordinator.wait_for_refresh()
        except SessionExpiredError as e:
            log_error("Session keep-alive failed", e, level=logging.WARNING)
            self.user = None
            return False
        return True

    async def _keepalive_loop(self) -> None:
        while True:
            await asyncio.sleep(self.keepalive_interval)
            if self.user is None:
                continue
            await self.keepalive_once()

    @staticmethod
    def _username(user: Mapping[str, Any] | None) -> str:
        if not user:
            return "unknown"
        return str(user.get("username") or user.get("email") or user.get("id") or "unknown")


def dashboard_path(user: Mapping[str, Any] | None) -> str:
    """Landing dashboard path for a user based on role flags."""
    if not user:
        return "/dashboard"
    if user.get("is_admin"):
        return "/dashboard/admin"
    if user.get("is_moderator"):
        return "/dashboard/moderator"
    if user.get("is_tutor"):
        return "/dashboard/tutor"
    if user.get("is_student"):
        return "/dashboard/student"
    return "/dashboard"
