"""Shared fixtures: an in-process fake of the course platform service."""

import asyncio
from typing import Any

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from course_client.application_context import ApplicationContext
from course_client.config.model import ClientSettings
from course_client.logging_config import error_aggregator

CSRF_COOKIE = "csrftoken"
CSRF_HEADER = "X-CSRFToken"


class FakeService:
    """Session-cookie service with Django-style CSRF and a refresh endpoint.

    Counters and switches are plain attributes so tests can steer behaviour
    and assert on how many times each endpoint was hit.
    """

    def __init__(self) -> None:
        self.url = ""
        self.session_valid = False
        self.refresh_succeeds = True
        self.refresh_delay = 0.0
        self.csrf_status = 200
        self.csrf_body_token = True
        self.csrf_calls = 0
        self.refresh_calls = 0
        self.login_calls = 0
        self.user: dict[str, Any] = {"id": 1, "username": "ada", "is_tutor": True}
        # (method, path, csrf header) for every request
        self.requests: list[tuple[str, str, str | None]] = []

    # ---- helpers ----
    def _record(self, request: web.Request) -> None:
        self.requests.append((request.method, request.path, request.headers.get(CSRF_HEADER)))

    def _csrf_ok(self, request: web.Request) -> bool:
        header = request.headers.get(CSRF_HEADER)
        return bool(header) and header == request.cookies.get(CSRF_COOKIE)

    @staticmethod
    def _unauthorized() -> web.Response:
        return web.json_response(
            {"detail": "Authentication credentials were not provided."}, status=401
        )

    @staticmethod
    def _csrf_failed() -> web.Response:
        return web.json_response({"detail": "CSRF Failed: CSRF token missing."}, status=403)

    # ---- auth endpoints ----
    async def csrf(self, request: web.Request) -> web.Response:
        self._record(request)
        self.csrf_calls += 1
        if self.csrf_status != 200:
            return web.json_response({"detail": "boom"}, status=self.csrf_status)
        token = f"token{self.csrf_calls:04d}"
        body = {"csrfToken": token} if self.csrf_body_token else {"detail": "CSRF cookie set"}
        response = web.json_response(body)
        response.set_cookie(CSRF_COOKIE, token, path="/")
        return response

    async def refresh(self, request: web.Request) -> web.Response:
        self._record(request)
        self.refresh_calls += 1
        if self.refresh_delay:
            await asyncio.sleep(self.refresh_delay)
        if not self.refresh_succeeds:
            return web.json_response({"detail": "Token is invalid or expired"}, status=401)
        self.session_valid = True
        return web.json_response({"detail": "refreshed"})

    async def login(self, request: web.Request) -> web.Response:
        self._record(request)
        self.login_calls += 1
        if not self._csrf_ok(request):
            return self._csrf_failed()
        payload = await request.json()
        if payload.get("password") != "secret":
            return web.json_response(
                {"non_field_errors": ["Unable to log in with provided credentials."]}, status=400
            )
        self.session_valid = True
        return web.json_response({"detail": "logged in"})

    async def logout(self, request: web.Request) -> web.Response:
        self._record(request)
        if not self._csrf_ok(request):
            return self._csrf_failed()
        self.session_valid = False
        return web.json_response({"detail": "logged out"})

    async def current_user(self, request: web.Request) -> web.Response:
        self._record(request)
        if not self.session_valid:
            return self._unauthorized()
        return web.json_response(self.user)

    async def profile(self, request: web.Request) -> web.Response:
        self._record(request)
        if not self.session_valid:
            return self._unauthorized()
        if request.method == "POST":
            if not self._csrf_ok(request):
                return self._csrf_failed()
            return web.json_response(await request.json(), status=201)
        return web.json_response({"username": self.user["username"]})

    async def always_unauthorized(self, request: web.Request) -> web.Response:
        self._record(request)
        return self._unauthorized()

    async def forbidden(self, request: web.Request) -> web.Response:
        self._record(request)
        return web.json_response(
            {"detail": "You do not have permission to perform this action."}, status=403
        )

    # ---- general api ----
    async def echo(self, request: web.Request) -> web.Response:
        self._record(request)
        return web.json_response({"method": request.method, "query": dict(request.query)})

    async def course(self, request: web.Request) -> web.Response:
        self._record(request)
        if not self.session_valid:
            return self._unauthorized()
        return web.json_response({"id": int(request.match_info["course_id"]), "title": "Python"})

    async def plain_text(self, request: web.Request) -> web.Response:
        self._record(request)
        return web.Response(text="pong")

    async def broken_json(self, request: web.Request) -> web.Response:
        self._record(request)
        return web.Response(text="{not json", content_type="application/json")

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/api/auth/csrf/", self.csrf)
        app.router.add_post("/api/auth/refresh/", self.refresh)
        app.router.add_post("/api/auth/login/", self.login)
        app.router.add_post("/api/auth/logout/", self.logout)
        app.router.add_get("/api/auth/current-user/", self.current_user)
        app.router.add_route("*", "/api/auth/profile/", self.profile)
        app.router.add_get("/api/auth/always-401/", self.always_unauthorized)
        app.router.add_get("/api/auth/forbidden/", self.forbidden)
        app.router.add_route("*", "/api/echo/", self.echo)
        app.router.add_get("/api/courses/{course_id}/", self.course)
        app.router.add_get("/api/ping/", self.plain_text)
        app.router.add_get("/api/broken/", self.broken_json)
        return app

    def csrf_headers_for(self, path: str) -> list[tuple[str, str | None]]:
        return [(method, header) for method, p, header in self.requests if p == path]


@pytest_asyncio.fixture
async def service():
    fake = FakeService()
    server = TestServer(fake.app())
    await server.start_server()
    fake.url = str(server.make_url("")).rstrip("/")
    try:
        yield fake
    finally:
        await server.close()


def make_settings(service: FakeService, **overrides: Any) -> ClientSettings:
    values: dict[str, Any] = {
        "server_url": service.url,
        "retry_attempts": 1,
        "refresh_timeout": 2.0,
        "request_timeout": 5.0,
    }
    values.update(overrides)
    return ClientSettings(**values)


@pytest_asyncio.fixture
async def context(service):
    ctx = await ApplicationContext.create(make_settings(service))
    try:
        yield ctx
    finally:
        await ctx.shutdown()


@pytest.fixture(autouse=True)
def _reset_error_aggregator():
    """Keep error counts from leaking between tests."""
    error_aggregator.reset()
    yield
    error_aggregator.reset()


@pytest.fixture
def settings_for(service):
    """Build settings pointing at the fake service, with overrides."""

    def _build(**overrides: Any) -> ClientSettings:
        return make_settings(service, **overrides)

    return _build
