"""Central application context owning the shared HTTP resources.

One context per process: it creates the aiohttp session (and its cookie
jar), both API clients, the CSRF manager and the single refresh coordinator.
Application code talks to ``api``/``auth_api`` and the endpoint wrappers;
the coordinator is reachable only through the clients' interceptors.
"""

from __future__ import annotations

import asyncio
import logging
from types import TracebackType

import aiohttp

from .api.auth import AuthAPI, AuthSession
from .api.courses import CourseAPI
from .api.moderator import ModeratorAPI
from .config.loader import load_settings
from .config.model import ClientSettings
from .http.client import ApiClient
from .http.cookies import CookieAccessor
from .http.csrf import CsrfTokenManager
from .http.interceptors import CsrfRequestInterceptor, RefreshResponseInterceptor
from .http.refresh import RefreshCoordinator, RefreshState


class ApplicationContext:
    """Holds shared async resources for the client lifecycle."""

    # Class / instance attribute type declarations (helps mypy)
    settings: ClientSettings
    session: aiohttp.ClientSession | None
    cookies: CookieAccessor
    csrf: CsrfTokenManager
    api: ApiClient
    auth_api: ApiClient
    auth: AuthSession
    courses: CourseAPI
    moderator: ModeratorAPI
    _coordinator: RefreshCoordinator
    _owns_session: bool
    _started: bool
    _lock: asyncio.Lock

    def __init__(self, settings: ClientSettings) -> None:
        self.settings = settings
        self.session = None
        self._owns_session = False
        # Lifecycle flags
        self._started = False
        self._lock = asyncio.Lock()

    # ------------------------- Construction ------------------------- #
    @classmethod
    async def create(
        cls,
        settings: ClientSettings | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
    ) -> ApplicationContext:
        """Create and wire a new ApplicationContext.

        Args:
            settings: Client settings; loaded from file/environment when omitted.
            session: Existing aiohttp session to reuse (not closed on shutdown).

        Returns:
            A fully wired ApplicationContext (call ``start`` to bootstrap CSRF).
        """
        ctx = cls(settings or load_settings())
        logging.debug("🧪 Creating application context")
        if session is None:
            jar = aiohttp.CookieJar(unsafe=ctx.settings.allow_ip_cookies)
            session = aiohttp.ClientSession(
                cookie_jar=jar, headers={"User-Agent": ctx.settings.user_agent}
            )
            ctx._owns_session = True
            logging.debug("🔗 HTTP session created")
        ctx.session = session
        ctx._wire(session)
        return ctx

    def _wire(self, session: aiohttp.ClientSession) -> None:
        s = self.settings
        client_options = {
            "timeout": s.request_timeout,
            "retry_attempts": s.retry_attempts,
            "retry_backoff": s.retry_backoff,
            "retry_max_backoff": s.retry_max_backoff,
        }
        # Cookies scoped to "/", "/api/" or "/api/auth/" are all visible here.
        self.cookies = CookieAccessor(session.cookie_jar, f"{s.auth_base_url}/")
        self.csrf = CsrfTokenManager(
            self.cookies, cookie_name=s.csrf_cookie_name, header_name=s.csrf_header_name
        )
        self.api = ApiClient(session, s.api_base_url, name="api", **client_options)
        self.auth_api = ApiClient(session, s.auth_base_url, name="auth_api", **client_options)

        csrf_interceptor = CsrfRequestInterceptor(self.csrf)
        for client in (self.api, self.auth_api):
            client.request_interceptors.append(csrf_interceptor)
        self.csrf.attach(self.api)
        self.csrf.attach(self.auth_api, fetch=True)

        auth_api = AuthAPI(self.auth_api)
        self._coordinator = RefreshCoordinator(
            auth_api.refresh,
            after_refresh=self._rebootstrap_csrf,
            timeout=s.refresh_timeout,
        )
        refresh_interceptor = RefreshResponseInterceptor(self._coordinator)
        self.auth_api.response_interceptors.append(refresh_interceptor)
        if s.refresh_on_api:
            self.api.response_interceptors.append(refresh_interceptor)

        self.auth = AuthSession(
            auth_api, self.csrf, self._coordinator, keepalive_interval=s.keepalive_interval
        )
        self.courses = CourseAPI(self.api)
        self.moderator = ModeratorAPI(self.api)

    async def _rebootstrap_csrf(self) -> None:
        # A renewed session may pair with a new CSRF token; always refetch.
        await self.csrf.bootstrap_csrf(force=True)

    @property
    def refresh_state(self) -> RefreshState:
        return self._coordinator.state

    # --------------------------- Lifecycle -------------------------- #
    async def start(self, *, keepalive: bool = False) -> None:
        """Bootstrap CSRF and optionally start the session keep-alive.

        Idempotent.
        """
        async with self._lock:
            if self._started:
                return
            await self.csrf.bootstrap_csrf()
            if keepalive:
                self.auth.start_keepalive()
            self._started = True
            logging.debug("🚀 Application context started")

    async def shutdown(self) -> None:
        """Stop background work, reject pending refresh waiters, close the session."""
        async with self._lock:
            logging.debug("🔻 Application context shutdown initiated")
            await self.auth.stop_keepalive()
            await self._coordinator.close()
            await self._close_http_session()
            self._started = False
            logging.debug("✅ Application context shutdown complete")

    async def _close_http_session(self) -> None:
        """Close the HTTP session if this context created it."""
        if not self.session:
            return
        if not self._owns_session:
            self.session = None
            return
        try:
            await self.session.close()
        except (aiohttp.ClientError, OSError, ValueError) as e:
            logging.error(f"💥 Error closing HTTP session: {str(e)}")
        finally:
            self.session = None

    async def __aenter__(self) -> ApplicationContext:
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.shutdown()
